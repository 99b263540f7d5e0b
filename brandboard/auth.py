"""
Identity extraction and role mapping.

Identities arrive as HS256 session tokens issued by the sign-in provider. A
missing or unreadable token is treated as an anonymous caller, never as an
error; the operations that need an identity raise on their own.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import Optional

import jwt

from brandboard.errors import Unauthenticated, Unauthorized

logger = logging.getLogger(__name__)


class Role(str, enum.Enum):
    ANONYMOUS = "anonymous"
    USER = "user"
    ADMIN = "admin"


@dataclass(frozen=True)
class Identity:
    email: str
    name: str = "Anonymous"
    image: Optional[str] = None


class AuthorizationGate:
    """Maps identities to roles against a single configured admin email."""

    def __init__(self, admin_email: str):
        self.admin_email = admin_email.strip().lower()

    def role_for(self, identity: Optional[Identity]) -> Role:
        if identity is None:
            return Role.ANONYMOUS
        if identity.email.strip().lower() == self.admin_email:
            return Role.ADMIN
        return Role.USER

    def require_user(self, identity: Optional[Identity]) -> Identity:
        if identity is None:
            raise Unauthenticated()
        return identity

    def require_admin(self, identity: Optional[Identity]) -> Identity:
        identity = self.require_user(identity)
        if self.role_for(identity) != Role.ADMIN:
            raise Unauthorized()
        return identity


class TokenDecoder:
    """Turns a signed session token into an :class:`Identity`."""

    def __init__(self, secret: str, algorithm: str = "HS256"):
        self.secret = secret
        self.algorithm = algorithm

    def decode(self, token: Optional[str]) -> Optional[Identity]:
        if not token:
            return None
        try:
            claims = jwt.decode(token, self.secret, algorithms=[self.algorithm])
        except jwt.PyJWTError as exc:
            logger.info("Ignoring invalid session token: %s", exc)
            return None
        email = claims.get("email")
        if not email:
            logger.info("Session token has no email claim")
            return None
        return Identity(
            email=email,
            name=claims.get("name") or "Anonymous",
            image=claims.get("picture") or claims.get("image"),
        )

    def encode(self, identity: Identity, **extra_claims) -> str:
        claims = {"email": identity.email, "name": identity.name}
        if identity.image:
            claims["picture"] = identity.image
        claims.update(extra_claims)
        return jwt.encode(claims, self.secret, algorithm=self.algorithm)


def bearer_token(authorization: Optional[str]) -> Optional[str]:
    """Pull the token out of an ``Authorization: Bearer ...`` header."""
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()
