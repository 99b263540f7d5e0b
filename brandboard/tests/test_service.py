import os
import shutil
import tempfile
import unittest

from brandboard.auth import AuthorizationGate, Identity
from brandboard.errors import AlreadySubmitted, NotFound, Unauthenticated, Unauthorized
from brandboard.records import SubmissionStatus, VoteDirection
from brandboard.service import BrandingService
from brandboard.store import JsonFileSubmissionStore

ADMIN = Identity(email="admin@example.com", name="Admin")
ALICE = Identity(email="a@x.com", name="A")
BOB = Identity(email="b@x.com", name="B", image="https://img.test/b.png")


class BrandingServiceTests(unittest.TestCase):
    def setUp(self):
        self.data_dir = tempfile.mkdtemp()
        self.submissions_path = os.path.join(self.data_dir, "submissions.json")
        store = JsonFileSubmissionStore(
            self.submissions_path, os.path.join(self.data_dir, "current_logo.json")
        )
        self.service = BrandingService(store, AuthorizationGate("admin@example.com"))

    def tearDown(self):
        shutil.rmtree(self.data_dir, ignore_errors=True)

    def _create(self, identity=ALICE, name="Sadak"):
        return self.service.create_submission(
            identity, name=name, description="...", logo_url="/uploads/a.png"
        )

    def test_create_then_approve_scenario(self):
        submission = self._create()
        self.assertEqual(submission.status, SubmissionStatus.PENDING)
        self.assertEqual((submission.likes, submission.dislikes), (0, 0))
        self.assertEqual(submission.user_email, "a@x.com")
        self.assertEqual(submission.user_name, "A")
        self.assertIsNone(submission.user_image)

        self.assertEqual(
            [s.id for s in self.service.list_pending(ADMIN)], [submission.id]
        )
        self.assertEqual(self.service.list_approved(), [])

        self.service.set_status(ADMIN, submission.id, SubmissionStatus.APPROVED)
        self.assertEqual([s.id for s in self.service.list_approved()], [submission.id])
        self.assertEqual(self.service.list_pending(ADMIN), [])

    def test_identity_snapshot_is_stored(self):
        submission = self._create(BOB)
        stored = self.service.get_submission(submission.id)
        self.assertEqual(stored.user_image, "https://img.test/b.png")

    def test_create_requires_identity(self):
        with self.assertRaises(Unauthenticated):
            self._create(None)

    def test_create_twice_fails(self):
        self._create()
        with self.assertRaises(AlreadySubmitted):
            self._create(name="Second")
        self.assertTrue(self.service.has_user_submitted(ALICE))
        self.assertFalse(self.service.has_user_submitted(BOB))

    def test_non_admin_cannot_change_status(self):
        submission = self._create()
        with open(self.submissions_path) as fh:
            before = fh.read()

        with self.assertRaises(Unauthorized):
            self.service.approve(BOB, submission.id)
        with self.assertRaises(Unauthenticated):
            self.service.reject(None, submission.id)
        with self.assertRaises(Unauthorized):
            self.service.list_pending(BOB)

        with open(self.submissions_path) as fh:
            self.assertEqual(fh.read(), before)

    def test_admin_email_match_is_case_insensitive(self):
        submission = self._create()
        admin = Identity(email="Admin@Example.com", name="Admin")
        rejected = self.service.reject(admin, submission.id)
        self.assertEqual(rejected.status, SubmissionStatus.REJECTED)

    def test_status_change_unknown_id(self):
        with self.assertRaises(NotFound):
            self.service.approve(ADMIN, "missing")

    def test_vote_requires_identity(self):
        submission = self._create()
        self.service.approve(ADMIN, submission.id)
        with self.assertRaises(Unauthenticated):
            self.service.vote(None, submission.id, VoteDirection.LIKE)
        with self.assertRaises(Unauthenticated):
            self.service.vote_current_logo(None, VoteDirection.LIKE)

    def test_votes_on_submission(self):
        submission = self._create()
        self.service.approve(ADMIN, submission.id)

        self.service.vote(BOB, submission.id, VoteDirection.LIKE)
        voted = self.service.vote(ALICE, submission.id, VoteDirection.DISLIKE)
        self.assertEqual((voted.likes, voted.dislikes), (1, 1))
        self.assertEqual(voted.action_for("b@x.com"), VoteDirection.LIKE)

    def test_current_logo_like_then_dislike(self):
        after_like = self.service.vote_current_logo(ALICE, VoteDirection.LIKE)
        likes_after_first = after_like.likes
        after_dislike = self.service.vote_current_logo(ALICE, VoteDirection.DISLIKE)

        self.assertEqual(after_dislike.likes, likes_after_first - 1)
        self.assertEqual(after_dislike.dislikes, 1)
        self.assertEqual(after_dislike.user_actions["a@x.com"], VoteDirection.DISLIKE)
        self.assertEqual(self.service.current_logo_stats().dislikes, 1)

    def test_current_logo_like_twice(self):
        self.service.vote_current_logo(ALICE, VoteDirection.LIKE)
        stats = self.service.vote_current_logo(ALICE, VoteDirection.LIKE)
        self.assertEqual(stats.likes, 1)


class AuthorizationGateTests(unittest.TestCase):
    def test_roles(self):
        gate = AuthorizationGate("admin@example.com")
        self.assertEqual(gate.role_for(None).value, "anonymous")
        self.assertEqual(gate.role_for(ALICE).value, "user")
        self.assertEqual(gate.role_for(ADMIN).value, "admin")

    def test_require_admin(self):
        gate = AuthorizationGate("admin@example.com")
        self.assertIs(gate.require_admin(ADMIN), ADMIN)
        with self.assertRaises(Unauthorized):
            gate.require_admin(ALICE)
        with self.assertRaises(Unauthenticated):
            gate.require_admin(None)


if __name__ == "__main__":
    unittest.main()
