"""
Submission store backed by JSON documents, with a SQLAlchemy alternative.

The JSON store keeps two documents: an array of submissions and the current
logo ledger. Every mutation loads the whole document, changes it in memory and
writes the whole document back. A per-document lock serializes those cycles
within the process and writes go through a temp file plus ``os.replace`` so a
reader never sees a half-written document.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
import threading
from contextlib import contextmanager
from typing import Any, Iterator, Optional, Protocol

from sqlalchemy import Column, Index, Integer, String, create_engine, select, text
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from brandboard.errors import AlreadySubmitted, NotFound, StorageUnavailable
from brandboard.records import (
    CurrentLogoStats,
    Submission,
    SubmissionStatus,
    VoteDirection,
    VoteTally,
    newest_first,
    utc_now_iso,
)

logger = logging.getLogger(__name__)


class SubmissionStore(Protocol):
    """Interface for submission and ledger persistence."""

    def list_submissions(
        self, status: Optional[SubmissionStatus] = None
    ) -> list[Submission]:
        ...

    def get_submission(self, submission_id: str) -> Submission:
        ...

    def has_user_submitted(self, email: str) -> bool:
        ...

    def add_submission(self, submission: Submission) -> Submission:
        ...

    def set_status(
        self, submission_id: str, status: SubmissionStatus
    ) -> Submission:
        ...

    def vote_submission(
        self, submission_id: str, email: str, direction: VoteDirection
    ) -> Submission:
        ...

    def get_current_logo(self) -> CurrentLogoStats:
        ...

    def vote_current_logo(
        self, email: str, direction: VoteDirection
    ) -> CurrentLogoStats:
        ...


def _is_open_submission(submission: Submission, email: str) -> bool:
    return (
        submission.user_email == email
        and submission.status != SubmissionStatus.REJECTED
    )


class JsonFileSubmissionStore:
    """Whole-document JSON persistence for submissions and the logo ledger."""

    def __init__(self, submissions_path: str, current_logo_path: str):
        self.submissions_path = submissions_path
        self.current_logo_path = current_logo_path
        # Re-entrant: loads inside a mutation may initialise the document.
        self._submissions_lock = threading.RLock()
        self._logo_lock = threading.RLock()

    # -- document primitives -------------------------------------------------

    def _read_document(self, path: str, default: Any, lock: threading.RLock) -> Any:
        if not os.path.exists(path):
            with lock:
                if not os.path.exists(path):
                    self._write_document(path, default)
        try:
            with open(path, "r", encoding="utf-8") as fh:
                return json.load(fh)
        except (OSError, json.JSONDecodeError) as exc:
            logger.error("Could not read %s: %s", path, exc)
            raise StorageUnavailable(f"Failed to read {os.path.basename(path)}") from exc

    def _write_document(self, path: str, data: Any) -> None:
        dir_name = os.path.dirname(os.path.abspath(path))
        try:
            os.makedirs(dir_name, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(dir=dir_name, suffix=".tmp")
        except OSError as exc:
            logger.error("Could not write %s: %s", path, exc)
            raise StorageUnavailable(f"Failed to write {os.path.basename(path)}") from exc
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(data, fh, indent=2)
            os.replace(tmp_path, path)
        except OSError as exc:
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
            logger.error("Could not write %s: %s", path, exc)
            raise StorageUnavailable(f"Failed to write {os.path.basename(path)}") from exc

    def _load_submissions(self) -> list[Submission]:
        raw = self._read_document(
            self.submissions_path, [], self._submissions_lock
        )
        if not isinstance(raw, list):
            raise StorageUnavailable("Submissions document is not a list")
        try:
            return [Submission.from_dict(item) for item in raw]
        except (KeyError, TypeError, ValueError, AttributeError) as exc:
            logger.error("Malformed record in %s: %s", self.submissions_path, exc)
            raise StorageUnavailable("Submissions document is malformed") from exc

    def _save_submissions(self, submissions: list[Submission]) -> None:
        self._write_document(
            self.submissions_path, [s.as_dict() for s in submissions]
        )

    def _load_logo(self) -> CurrentLogoStats:
        raw = self._read_document(
            self.current_logo_path, CurrentLogoStats().as_dict(), self._logo_lock
        )
        if not isinstance(raw, dict):
            raise StorageUnavailable("Current logo document is not an object")
        try:
            return CurrentLogoStats.from_dict(raw)
        except (TypeError, ValueError, AttributeError) as exc:
            logger.error("Malformed %s: %s", self.current_logo_path, exc)
            raise StorageUnavailable("Current logo document is malformed") from exc

    @contextmanager
    def _editing_submissions(self) -> Iterator[list[Submission]]:
        with self._submissions_lock:
            submissions = self._load_submissions()
            yield submissions
            self._save_submissions(submissions)

    def _find(self, submissions: list[Submission], submission_id: str) -> Submission:
        for submission in submissions:
            if submission.id == submission_id:
                return submission
        raise NotFound()

    # -- submissions ---------------------------------------------------------

    def list_submissions(
        self, status: Optional[SubmissionStatus] = None
    ) -> list[Submission]:
        submissions = self._load_submissions()
        if status is not None:
            submissions = [s for s in submissions if s.status == status]
        return newest_first(submissions)

    def get_submission(self, submission_id: str) -> Submission:
        return self._find(self._load_submissions(), submission_id)

    def has_user_submitted(self, email: str) -> bool:
        return any(_is_open_submission(s, email) for s in self._load_submissions())

    def add_submission(self, submission: Submission) -> Submission:
        with self._editing_submissions() as submissions:
            if any(_is_open_submission(s, submission.user_email) for s in submissions):
                raise AlreadySubmitted()
            submissions.append(submission)
        return submission

    def set_status(
        self, submission_id: str, status: SubmissionStatus
    ) -> Submission:
        with self._editing_submissions() as submissions:
            submission = self._find(submissions, submission_id)
            submission.status = status
            submission.touch()
        return submission

    def vote_submission(
        self, submission_id: str, email: str, direction: VoteDirection
    ) -> Submission:
        with self._editing_submissions() as submissions:
            submission = self._find(submissions, submission_id)
            if submission.status != SubmissionStatus.APPROVED:
                raise NotFound()
            if submission.apply_vote(email, direction):
                submission.touch()
        return submission

    # -- current logo ledger -------------------------------------------------

    def get_current_logo(self) -> CurrentLogoStats:
        return self._load_logo()

    def vote_current_logo(
        self, email: str, direction: VoteDirection
    ) -> CurrentLogoStats:
        with self._logo_lock:
            stats = self._load_logo()
            if stats.apply_vote(email, direction):
                self._write_document(self.current_logo_path, stats.as_dict())
        return stats


Base = declarative_base()


class SubmissionRow(Base):
    __tablename__ = "submissions"

    id = Column(String, primary_key=True)
    name = Column(String, nullable=False)
    description = Column(String, nullable=False)
    logo_url = Column(String, nullable=False)
    user_email = Column(String, nullable=False, index=True)
    user_name = Column(String, nullable=False)
    user_image = Column(String, nullable=True)
    status = Column(String, nullable=False, index=True)
    likes = Column(Integer, nullable=False, default=0)
    dislikes = Column(Integer, nullable=False, default=0)
    created_at = Column(String, nullable=False)
    updated_at = Column(String, nullable=False)

    # At most one non-rejected submission per email, even across racing inserts.
    __table_args__ = (
        Index(
            "uq_submissions_open_email",
            "user_email",
            unique=True,
            postgresql_where=text("status != 'rejected'"),
            sqlite_where=text("status != 'rejected'"),
        ),
    )


class SubmissionVoteRow(Base):
    __tablename__ = "submission_votes"

    submission_id = Column(String, primary_key=True)
    user_email = Column(String, primary_key=True)
    action = Column(String, nullable=False)


class LogoStatsRow(Base):
    __tablename__ = "current_logo"

    id = Column(Integer, primary_key=True)
    likes = Column(Integer, nullable=False, default=0)
    dislikes = Column(Integer, nullable=False, default=0)


class LogoVoteRow(Base):
    __tablename__ = "current_logo_votes"

    user_email = Column(String, primary_key=True)
    action = Column(String, nullable=False)


LOGO_ROW_ID = 1


class SqlSubmissionStore:
    """
    SQLAlchemy-backed implementation. Accepts any SQLAlchemy URL (e.g., Postgres or SQLite for tests).

    Each mutation runs in a single transaction and locks the row it changes.
    """

    def __init__(self, database_url: str):
        if not database_url:
            raise ValueError("DATABASE_URL is required for SqlSubmissionStore")
        self.engine = create_engine(database_url, future=True, pool_pre_ping=True)
        self.Session = sessionmaker(
            bind=self.engine, class_=Session, expire_on_commit=False, future=True
        )
        Base.metadata.create_all(self.engine)

    @contextmanager
    def _session(self) -> Iterator[Session]:
        try:
            with self.Session() as session:
                yield session
        except SQLAlchemyError as exc:
            logger.error("Database error: %s", exc)
            raise StorageUnavailable("Database unavailable") from exc

    def _to_record(self, row: SubmissionRow, votes: dict | None = None) -> Submission:
        return Submission(
            id=row.id,
            name=row.name,
            description=row.description,
            logo_url=row.logo_url,
            user_email=row.user_email,
            user_name=row.user_name,
            user_image=row.user_image,
            status=SubmissionStatus(row.status),
            likes=row.likes,
            dislikes=row.dislikes,
            user_actions={
                email: VoteDirection(action) for email, action in (votes or {}).items()
            },
            created_at=row.created_at,
            updated_at=row.updated_at,
        )

    def _votes_for(self, session: Session, submission_id: str) -> dict:
        rows = session.execute(
            select(SubmissionVoteRow).where(
                SubmissionVoteRow.submission_id == submission_id
            )
        ).scalars()
        return {row.user_email: row.action for row in rows}

    def _locked_row(self, session: Session, submission_id: str) -> SubmissionRow:
        row = session.execute(
            select(SubmissionRow)
            .where(SubmissionRow.id == submission_id)
            .with_for_update()
        ).scalar_one_or_none()
        if row is None:
            raise NotFound()
        return row

    def list_submissions(
        self, status: Optional[SubmissionStatus] = None
    ) -> list[Submission]:
        with self._session() as session:
            stmt = select(SubmissionRow)
            if status is not None:
                stmt = stmt.where(SubmissionRow.status == status.value)
            rows = session.execute(stmt).scalars().all()
            records = [self._to_record(row, self._votes_for(session, row.id)) for row in rows]
        return newest_first(records)

    def get_submission(self, submission_id: str) -> Submission:
        with self._session() as session:
            row = session.get(SubmissionRow, submission_id)
            if row is None:
                raise NotFound()
            return self._to_record(row, self._votes_for(session, row.id))

    def has_user_submitted(self, email: str) -> bool:
        with self._session() as session:
            row = session.execute(
                select(SubmissionRow.id)
                .where(
                    SubmissionRow.user_email == email,
                    SubmissionRow.status != SubmissionStatus.REJECTED.value,
                )
                .limit(1)
            ).first()
            return row is not None

    def add_submission(self, submission: Submission) -> Submission:
        with self._session() as session:
            existing = session.execute(
                select(SubmissionRow.id)
                .where(
                    SubmissionRow.user_email == submission.user_email,
                    SubmissionRow.status != SubmissionStatus.REJECTED.value,
                )
                .with_for_update()
            ).first()
            if existing is not None:
                raise AlreadySubmitted()
            session.add(
                SubmissionRow(
                    id=submission.id,
                    name=submission.name,
                    description=submission.description,
                    logo_url=submission.logo_url,
                    user_email=submission.user_email,
                    user_name=submission.user_name,
                    user_image=submission.user_image,
                    status=submission.status.value,
                    likes=submission.likes,
                    dislikes=submission.dislikes,
                    created_at=submission.created_at,
                    updated_at=submission.updated_at,
                )
            )
            try:
                session.commit()
            except IntegrityError as exc:
                session.rollback()
                raise AlreadySubmitted() from exc
        return submission

    def set_status(
        self, submission_id: str, status: SubmissionStatus
    ) -> Submission:
        with self._session() as session:
            row = self._locked_row(session, submission_id)
            row.status = status.value
            row.updated_at = utc_now_iso()
            session.commit()
            return self._to_record(row, self._votes_for(session, row.id))

    def vote_submission(
        self, submission_id: str, email: str, direction: VoteDirection
    ) -> Submission:
        with self._session() as session:
            row = self._locked_row(session, submission_id)
            if row.status != SubmissionStatus.APPROVED.value:
                raise NotFound()
            vote = session.get(SubmissionVoteRow, (submission_id, email))
            tally = VoteTally(
                likes=row.likes,
                dislikes=row.dislikes,
                user_actions={email: VoteDirection(vote.action)} if vote else {},
            )
            if tally.apply_vote(email, direction):
                row.likes = tally.likes
                row.dislikes = tally.dislikes
                row.updated_at = utc_now_iso()
                if vote:
                    vote.action = direction.value
                else:
                    session.add(
                        SubmissionVoteRow(
                            submission_id=submission_id,
                            user_email=email,
                            action=direction.value,
                        )
                    )
                session.commit()
            return self._to_record(row, self._votes_for(session, row.id))

    def _logo_row(self, session: Session, for_update: bool = False) -> LogoStatsRow:
        stmt = select(LogoStatsRow).where(LogoStatsRow.id == LOGO_ROW_ID)
        if for_update:
            stmt = stmt.with_for_update()
        row = session.execute(stmt).scalar_one_or_none()
        if row is None:
            row = LogoStatsRow(id=LOGO_ROW_ID, likes=0, dislikes=0)
            session.add(row)
            session.flush()
        return row

    def _logo_stats(self, session: Session, row: LogoStatsRow) -> CurrentLogoStats:
        votes = session.execute(select(LogoVoteRow)).scalars()
        return CurrentLogoStats(
            likes=row.likes,
            dislikes=row.dislikes,
            user_actions={v.user_email: VoteDirection(v.action) for v in votes},
        )

    def get_current_logo(self) -> CurrentLogoStats:
        with self._session() as session:
            row = self._logo_row(session)
            stats = self._logo_stats(session, row)
            session.commit()
            return stats

    def vote_current_logo(
        self, email: str, direction: VoteDirection
    ) -> CurrentLogoStats:
        with self._session() as session:
            row = self._logo_row(session, for_update=True)
            vote = session.get(LogoVoteRow, email)
            tally = VoteTally(
                likes=row.likes,
                dislikes=row.dislikes,
                user_actions={email: VoteDirection(vote.action)} if vote else {},
            )
            if tally.apply_vote(email, direction):
                row.likes = tally.likes
                row.dislikes = tally.dislikes
                if vote:
                    vote.action = direction.value
                else:
                    session.add(LogoVoteRow(user_email=email, action=direction.value))
            session.commit()
            return self._logo_stats(session, row)
