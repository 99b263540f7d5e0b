import unittest
from contextlib import contextmanager
from unittest import mock

from brandboard.errors import AlreadySubmitted, NotFound
from brandboard.records import Submission, SubmissionStatus, VoteDirection
from brandboard.store import SqlSubmissionStore, SubmissionRow


class SqlSubmissionStoreTests(unittest.TestCase):
    """
    Uses SQLite via SQLAlchemy URL for fast/local testing of the SQL store.
    """

    def setUp(self):
        self.store = SqlSubmissionStore("sqlite+pysqlite:///:memory:")

    def _submission(self, email="a@x.com", **kwargs):
        return Submission(
            name=kwargs.pop("name", "Sadak"),
            description="...",
            logo_url="/uploads/a.png",
            user_email=email,
            user_name="A",
            **kwargs,
        )

    def test_create_and_get_submission(self):
        created = self.store.add_submission(self._submission())
        fetched = self.store.get_submission(created.id)
        self.assertEqual(fetched.id, created.id)
        self.assertEqual(fetched.status, SubmissionStatus.PENDING)
        self.assertEqual((fetched.likes, fetched.dislikes), (0, 0))
        self.assertIsNone(fetched.user_image)

    def test_duplicate_open_submission(self):
        first = self.store.add_submission(self._submission())
        with self.assertRaises(AlreadySubmitted):
            self.store.add_submission(self._submission(name="Again"))

        self.store.set_status(first.id, SubmissionStatus.REJECTED)
        self.store.add_submission(self._submission(name="Again"))
        self.assertTrue(self.store.has_user_submitted("a@x.com"))

    def test_open_submission_per_email_enforced_by_index(self):
        self.store.add_submission(self._submission())
        racing = self._submission(name="Raced")

        # A concurrent create that passed the existence check before the first commit.
        with mock.patch.object(self.store, "_session", self._session_skipping_check):
            with self.assertRaises(AlreadySubmitted):
                self.store.add_submission(racing)

        with self.store.Session() as session:
            session.add(
                SubmissionRow(
                    id="rejected-1",
                    name="Old",
                    description="...",
                    logo_url="/uploads/old.png",
                    user_email="a@x.com",
                    user_name="A",
                    status=SubmissionStatus.REJECTED.value,
                    likes=0,
                    dislikes=0,
                    created_at="2024-01-01T00:00:00+00:00",
                    updated_at="2024-01-01T00:00:00+00:00",
                )
            )
            session.commit()
        self.assertEqual(len(self.store.list_submissions()), 2)

    @contextmanager
    def _session_skipping_check(self):
        with self.store.Session() as session:
            original_execute = session.execute

            def execute(stmt, *args, **kwargs):
                result = original_execute(stmt, *args, **kwargs)
                if getattr(stmt, "is_select", False):
                    return mock.Mock(first=lambda: None)
                return result

            session.execute = execute
            yield session

    def test_status_lifecycle_and_ordering(self):
        older = self.store.add_submission(
            self._submission("old@x.com", created_at="2024-01-01T00:00:00+00:00")
        )
        newer = self.store.add_submission(
            self._submission("new@x.com", created_at="2024-02-01T00:00:00+00:00")
        )
        self.assertEqual(
            [s.id for s in self.store.list_submissions(SubmissionStatus.PENDING)],
            [newer.id, older.id],
        )

        self.store.set_status(older.id, SubmissionStatus.APPROVED)
        approved = self.store.list_submissions(SubmissionStatus.APPROVED)
        self.assertEqual([s.id for s in approved], [older.id])
        pending = self.store.list_submissions(SubmissionStatus.PENDING)
        self.assertEqual([s.id for s in pending], [newer.id])

    def test_unknown_ids(self):
        with self.assertRaises(NotFound):
            self.store.get_submission("missing")
        with self.assertRaises(NotFound):
            self.store.set_status("missing", SubmissionStatus.APPROVED)
        with self.assertRaises(NotFound):
            self.store.vote_submission("missing", "b@x.com", VoteDirection.LIKE)

    def test_submission_votes(self):
        submission = self.store.add_submission(self._submission())
        with self.assertRaises(NotFound):
            self.store.vote_submission(submission.id, "b@x.com", VoteDirection.LIKE)
        self.store.set_status(submission.id, SubmissionStatus.APPROVED)

        self.store.vote_submission(submission.id, "b@x.com", VoteDirection.LIKE)
        self.store.vote_submission(submission.id, "b@x.com", VoteDirection.LIKE)
        voted = self.store.vote_submission(
            submission.id, "b@x.com", VoteDirection.DISLIKE
        )
        self.assertEqual((voted.likes, voted.dislikes), (0, 1))
        self.assertEqual(voted.user_actions, {"b@x.com": VoteDirection.DISLIKE})

    def test_current_logo_ledger(self):
        stats = self.store.get_current_logo()
        self.assertEqual((stats.likes, stats.dislikes), (0, 0))

        self.store.vote_current_logo("a@x.com", VoteDirection.LIKE)
        stats = self.store.vote_current_logo("a@x.com", VoteDirection.LIKE)
        self.assertEqual((stats.likes, stats.dislikes), (1, 0))

        stats = self.store.vote_current_logo("a@x.com", VoteDirection.DISLIKE)
        self.assertEqual((stats.likes, stats.dislikes), (0, 1))
        self.assertEqual(stats.user_actions, {"a@x.com": VoteDirection.DISLIKE})

        stats = self.store.vote_current_logo("b@x.com", VoteDirection.DISLIKE)
        self.assertEqual((stats.likes, stats.dislikes), (0, 2))


if __name__ == "__main__":
    unittest.main()
