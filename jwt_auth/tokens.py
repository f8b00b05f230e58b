"""
Credential representations before and after authentication.

A ``PreAuthenticatedJsonWebToken`` only says "a bearer token was presented";
nothing in it has been verified. An ``AuthenticatedJsonWebToken`` is only ever
built by the authenticator after the signature and claims passed. They are
different types, so one is never mistaken for (or equal to) the other.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

import jwt

logger = logging.getLogger(__name__)

BEARER_SCHEME = "bearer"


def bearer_token_from_header(value: str | None) -> str | None:
    """
    Return ``<token>`` from an ``Authorization: Bearer <token>`` header value.

    The scheme is matched case-insensitively. Returns None if the header is
    missing, uses another scheme, or has no token.
    """
    if not value:
        return None
    parts = value.strip().split()
    if len(parts) != 2 or parts[0].lower() != BEARER_SCHEME:
        return None
    return parts[1]


class JwtAuthentication(ABC):
    """Common base for both token representations."""

    token: str

    @property
    @abstractmethod
    def is_authenticated(self) -> bool:
        """True only once the signature and claims have been verified."""


@dataclass(frozen=True)
class PreAuthenticatedJsonWebToken(JwtAuthentication):
    """
    A presented but unverified token.

    ``key_id`` and ``principal`` are read without verifying the signature.
    Use them for routing and diagnostics only, never for access decisions.
    """

    token: str
    key_id: str | None = None
    principal: str | None = None

    @classmethod
    def using_token(cls, token: str | None) -> PreAuthenticatedJsonWebToken | None:
        """Wrap ``token``, or return None if it is absent or not a JWT."""
        if not token:
            return None
        try:
            header = jwt.get_unverified_header(token)
            payload = jwt.decode(token, options={"verify_signature": False})
        except jwt.InvalidTokenError:
            logger.debug("Presented bearer value is not a decodable JWT")
            return None
        kid = header.get("kid")
        sub = payload.get("sub")
        return cls(
            token=token,
            key_id=str(kid) if kid is not None else None,
            principal=str(sub) if sub is not None else None,
        )

    @classmethod
    def from_authorization_header(cls, value: str | None) -> PreAuthenticatedJsonWebToken | None:
        return cls.using_token(bearer_token_from_header(value))

    @property
    def is_authenticated(self) -> bool:
        return False


def _authorities(claims: Mapping[str, Any]) -> tuple[str, ...]:
    """
    Collect granted authorities from ``scope`` and ``permissions``.

    ``scope`` is a space-separated string in most tokens (some issuers send a
    list); ``permissions`` is a list (Auth0 RBAC).
    """
    found: list[str] = []
    scope = claims.get("scope")
    if isinstance(scope, str):
        found.extend(s for s in scope.split() if s)
    elif isinstance(scope, list):
        found.extend(str(s) for s in scope)

    permissions = claims.get("permissions")
    if isinstance(permissions, list):
        found.extend(str(p) for p in permissions)

    return tuple(dict.fromkeys(found))


@dataclass(frozen=True)
class AuthenticatedJsonWebToken(JwtAuthentication):
    """A token whose signature and claims have been verified."""

    token: str
    header: Mapping[str, Any] = field(repr=False, hash=False)
    claims: Mapping[str, Any] = field(hash=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "header", MappingProxyType(dict(self.header)))
        object.__setattr__(self, "claims", MappingProxyType(dict(self.claims)))

    @property
    def is_authenticated(self) -> bool:
        return True

    @property
    def key_id(self) -> str | None:
        kid = self.header.get("kid")
        return str(kid) if kid is not None else None

    @property
    def principal(self) -> str | None:
        sub = self.claims.get("sub")
        return str(sub) if sub is not None else None

    @property
    def name(self) -> str | None:
        return self.principal

    @property
    def authorities(self) -> tuple[str, ...]:
        return _authorities(self.claims)

    @property
    def expires_at(self) -> int | None:
        exp = self.claims.get("exp")
        return int(exp) if isinstance(exp, (int, float)) else None

    def to_dict(self) -> dict[str, object]:
        """Return a JSON-serializable summary (without the raw token)."""
        return {
            "principal": self.principal,
            "authorities": list(self.authorities),
            "expires_at": self.expires_at,
            "claims": dict(self.claims),
        }
