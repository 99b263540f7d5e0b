"""
Submission lifecycle and voting rules, gated by caller identity.
"""

from __future__ import annotations

import logging
from typing import Optional

from brandboard.auth import AuthorizationGate, Identity
from brandboard.records import (
    CurrentLogoStats,
    Submission,
    SubmissionStatus,
    VoteDirection,
)
from brandboard.store import SubmissionStore

logger = logging.getLogger(__name__)


class BrandingService:
    def __init__(self, store: SubmissionStore, gate: AuthorizationGate):
        self.store = store
        self.gate = gate

    def create_submission(
        self,
        identity: Optional[Identity],
        *,
        name: str,
        description: str,
        logo_url: str,
    ) -> Submission:
        """Create a pending submission for the signed-in caller.

        The submitter snapshot comes from the identity. Raises
        ``AlreadySubmitted`` when the caller has a submission that was not
        rejected.
        """
        identity = self.gate.require_user(identity)
        submission = Submission(
            name=name,
            description=description,
            logo_url=logo_url,
            user_email=identity.email,
            user_name=identity.name,
            user_image=identity.image,
        )
        self.store.add_submission(submission)
        logger.info("Submission %s created by %s", submission.id, identity.email)
        return submission

    def list_approved(self) -> list[Submission]:
        return self.store.list_submissions(SubmissionStatus.APPROVED)

    def list_pending(self, identity: Optional[Identity]) -> list[Submission]:
        self.gate.require_admin(identity)
        return self.store.list_submissions(SubmissionStatus.PENDING)

    def has_user_submitted(self, identity: Optional[Identity]) -> bool:
        identity = self.gate.require_user(identity)
        return self.store.has_user_submitted(identity.email)

    def get_submission(self, submission_id: str) -> Submission:
        return self.store.get_submission(submission_id)

    def set_status(
        self,
        identity: Optional[Identity],
        submission_id: str,
        status: SubmissionStatus,
    ) -> Submission:
        self.gate.require_admin(identity)
        submission = self.store.set_status(submission_id, status)
        logger.info("Submission %s marked %s", submission_id, status.value)
        return submission

    def approve(self, identity: Optional[Identity], submission_id: str) -> Submission:
        return self.set_status(identity, submission_id, SubmissionStatus.APPROVED)

    def reject(self, identity: Optional[Identity], submission_id: str) -> Submission:
        return self.set_status(identity, submission_id, SubmissionStatus.REJECTED)

    def vote(
        self,
        identity: Optional[Identity],
        submission_id: str,
        direction: VoteDirection,
    ) -> Submission:
        identity = self.gate.require_user(identity)
        submission = self.store.vote_submission(
            submission_id, identity.email, direction
        )
        logger.info(
            "%s voted %s on submission %s",
            identity.email,
            direction.value,
            submission_id,
        )
        return submission

    def current_logo_stats(self) -> CurrentLogoStats:
        return self.store.get_current_logo()

    def vote_current_logo(
        self, identity: Optional[Identity], direction: VoteDirection
    ) -> CurrentLogoStats:
        identity = self.gate.require_user(identity)
        stats = self.store.vote_current_logo(identity.email, direction)
        logger.info("%s voted %s on the current logo", identity.email, direction.value)
        return stats
