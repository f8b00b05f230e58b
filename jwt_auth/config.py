"""Configuration from environment variables. No hardcoded secrets."""

from __future__ import annotations

import os
from dataclasses import dataclass

from .jwks import jwks_uri_for_issuer


def _getenv(key: str, default: str | None = None) -> str | None:
    return os.environ.get(key, default)


def _getenv_int(key: str, default: int) -> int:
    raw = os.environ.get(key)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


@dataclass(frozen=True)
class JwtAuthConfig:
    """
    Bearer-token authentication configuration from environment.

    Required:
        JWT_ISSUER: Expected ``iss`` claim, compared exactly.
        JWT_AUDIENCE: Expected ``aud`` claim (or member of it).

    Symmetric (HS256) tokens:
        JWT_SECRET: Shared secret. When set, tokens are verified with it and
            no JWKS is fetched.
        JWT_SECRET_BASE64: Set to 1 or true if JWT_SECRET is base64 encoded.

    Asymmetric (RS256/ES256) tokens:
        JWT_JWKS_URI: Optional; defaults to ``<issuer>/.well-known/jwks.json``.
        JWKS_CACHE_TTL_SECONDS: How long to cache the JWKS (default 3600).
        JWKS_TIMEOUT_SECONDS: HTTP timeout for the JWKS fetch (default 10).

    Optional:
        CLOCK_SKEW_SECONDS: Seconds of tolerance for exp/nbf (default 0).
    """

    issuer: str
    audience: str
    secret: str | None
    secret_base64: bool
    jwks_uri_override: str | None  # if None, derived from issuer
    jwks_cache_ttl_seconds: int
    jwks_timeout_seconds: int
    clock_skew_seconds: int

    @property
    def uses_secret(self) -> bool:
        return bool(self.secret)

    @property
    def algorithm(self) -> str:
        return "HS256" if self.uses_secret else "RS256"

    @property
    def jwks_uri(self) -> str:
        if self.jwks_uri_override:
            return self.jwks_uri_override
        return jwks_uri_for_issuer(self.issuer)

    @classmethod
    def from_environ(cls) -> JwtAuthConfig:
        issuer = _getenv("JWT_ISSUER")
        audience = _getenv("JWT_AUDIENCE")
        if not issuer or not issuer.strip() or not audience or not audience.strip():
            raise _config_error("JWT_ISSUER and JWT_AUDIENCE must be set")
        return cls(
            issuer=issuer.strip(),
            audience=audience.strip(),
            secret=_strip_or_none(_getenv("JWT_SECRET")),
            secret_base64=_getenv("JWT_SECRET_BASE64", "").strip().lower() in ("1", "true", "yes"),
            jwks_uri_override=_strip_or_none(_getenv("JWT_JWKS_URI")),
            jwks_cache_ttl_seconds=_getenv_int("JWKS_CACHE_TTL_SECONDS", 3600),
            jwks_timeout_seconds=_getenv_int("JWKS_TIMEOUT_SECONDS", 10),
            clock_skew_seconds=_getenv_int("CLOCK_SKEW_SECONDS", 0),
        )


def _strip_or_none(s: str | None) -> str | None:
    if s is None:
        return None
    t = s.strip()
    return t if t else None


def _config_error(msg: str) -> Exception:
    return ValueError(msg)
