"""
Record types for submissions and the current logo vote ledger.

Both records serialize to the camelCase JSON the document store keeps on disk.
"""

from __future__ import annotations

import enum
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, Optional


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def parse_timestamp(value: str) -> datetime:
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


class SubmissionStatus(str, enum.Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class VoteDirection(str, enum.Enum):
    LIKE = "like"
    DISLIKE = "dislike"


@dataclass
class VoteTally:
    """Counters plus the standing vote of each user.

    A user holds at most one vote. Voting the other way moves the vote from one
    counter to the other; voting the same way again changes nothing.
    """

    likes: int = 0
    dislikes: int = 0
    user_actions: Dict[str, VoteDirection] = field(default_factory=dict)

    def apply_vote(self, email: str, direction: VoteDirection) -> bool:
        """Record *direction* for *email*. Returns False when nothing changed."""
        previous = self.user_actions.get(email)
        if previous == direction:
            return False
        if direction == VoteDirection.LIKE:
            self.likes += 1
            if previous == VoteDirection.DISLIKE:
                self.dislikes = max(0, self.dislikes - 1)
        else:
            self.dislikes += 1
            if previous == VoteDirection.LIKE:
                self.likes = max(0, self.likes - 1)
        self.user_actions[email] = direction
        return True

    def action_for(self, email: Optional[str]) -> Optional[VoteDirection]:
        if not email:
            return None
        return self.user_actions.get(email)


def _actions_from_dict(raw: Optional[dict]) -> Dict[str, VoteDirection]:
    return {email: VoteDirection(action) for email, action in (raw or {}).items()}


def _actions_as_dict(actions: Dict[str, VoteDirection]) -> dict:
    return {email: action.value for email, action in actions.items()}


@dataclass
class Submission(VoteTally):
    id: str = field(default_factory=lambda: uuid.uuid4().hex)
    name: str = ""
    description: str = ""
    logo_url: str = ""
    user_email: str = ""
    user_name: str = ""
    user_image: Optional[str] = None
    status: SubmissionStatus = SubmissionStatus.PENDING
    created_at: str = field(default_factory=utc_now_iso)
    updated_at: str = field(default_factory=utc_now_iso)

    def touch(self) -> None:
        self.updated_at = utc_now_iso()

    @property
    def created_time(self) -> datetime:
        return parse_timestamp(self.created_at)

    def as_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "logoUrl": self.logo_url,
            "userEmail": self.user_email,
            "userName": self.user_name,
            "userImage": self.user_image,
            "status": self.status.value,
            "likes": self.likes,
            "dislikes": self.dislikes,
            "userActions": _actions_as_dict(self.user_actions),
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Submission":
        return cls(
            id=data["id"],
            name=data.get("name", ""),
            description=data.get("description", ""),
            logo_url=data.get("logoUrl", ""),
            user_email=data.get("userEmail", ""),
            user_name=data.get("userName", ""),
            user_image=data.get("userImage"),
            status=SubmissionStatus(data.get("status", "pending")),
            likes=data.get("likes") or 0,
            dislikes=data.get("dislikes") or 0,
            user_actions=_actions_from_dict(data.get("userActions")),
            created_at=data.get("createdAt") or utc_now_iso(),
            updated_at=data.get("updatedAt") or utc_now_iso(),
        )


@dataclass
class CurrentLogoStats(VoteTally):
    def as_dict(self) -> dict:
        return {
            "likes": self.likes,
            "dislikes": self.dislikes,
            "userActions": _actions_as_dict(self.user_actions),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "CurrentLogoStats":
        return cls(
            likes=data.get("likes") or 0,
            dislikes=data.get("dislikes") or 0,
            user_actions=_actions_from_dict(data.get("userActions")),
        )


def newest_first(submissions: list[Submission]) -> list[Submission]:
    return sorted(submissions, key=lambda s: s.created_time, reverse=True)
