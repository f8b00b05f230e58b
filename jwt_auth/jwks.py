"""
JWK lookup contract and a URL-backed provider with a TTL cache.

Background for newcomers:
    Issuers that sign tokens with a private key (RS256, ES256, ...) publish
    the matching **public** keys as a JSON Web Key Set (JWKS) at a well-known
    URL. Each key carries a ``kid`` (Key ID); the token header names the
    ``kid`` that signed it, and that is how we know which key to verify with.

    The authenticator only needs one operation from this module:
    ``JwkProvider.get(kid) -> Jwk``. ``UrlJwkProvider`` is the default
    implementation; anything with the same ``get`` method can replace it
    (a fixture in tests, a provider backed by a local file, ...).

    Issuers periodically **rotate** signing keys. If a token arrives with a
    ``kid`` we have not seen yet, we force-refresh the cache once and try
    again before giving up.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Protocol

import requests
from cryptography.hazmat.primitives.asymmetric import ec, ed448, ed25519, rsa
from jwt import PyJWK, PyJWTError

from .errors import InvalidPublicKeyError, SigningKeyNotFoundError

logger = logging.getLogger(__name__)

WELL_KNOWN_JWKS_PATH = "/.well-known/jwks.json"

PUBLIC_KEY_TYPES = (
    rsa.RSAPublicKey,
    ec.EllipticCurvePublicKey,
    ed25519.Ed25519PublicKey,
    ed448.Ed448PublicKey,
)


def jwks_uri_for_issuer(issuer: str) -> str:
    """Return the well-known JWKS location for an issuer URL or bare domain."""
    base = issuer.strip().rstrip("/")
    if "://" not in base:
        base = f"https://{base}"
    return base + WELL_KNOWN_JWKS_PATH


@dataclass(frozen=True)
class Jwk:
    """A single JSON Web Key as published by the issuer."""

    kid: str | None
    data: Mapping[str, Any]

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Jwk:
        return cls(kid=data.get("kid"), data=dict(data))

    def public_key(self) -> Any:
        """
        Decode the key material into a ``cryptography`` public key.

        Raises InvalidPublicKeyError for symmetric (``oct``) keys, private
        keys, unknown key types or corrupt parameters.
        """
        try:
            key = PyJWK.from_dict(dict(self.data)).key
        except (PyJWTError, ValueError, KeyError, TypeError) as e:
            raise InvalidPublicKeyError(f"Cannot decode public key kid={self.kid}") from e
        if not isinstance(key, PUBLIC_KEY_TYPES):
            raise InvalidPublicKeyError(f"Key kid={self.kid} is not an asymmetric public key")
        return key


class JwkProvider(Protocol):
    """Anything that maps a ``kid`` to a ``Jwk``."""

    def get(self, kid: str) -> Jwk:
        """Return the key for ``kid`` or raise a ``JwkError`` subclass."""
        ...


class UrlJwkProvider:
    """
    Fetches a JWKS document over HTTP and caches it for ``ttl_seconds``.

    On cache miss (unknown ``kid``) the cache is refreshed once to handle key
    rotation before raising SigningKeyNotFoundError.
    """

    def __init__(self, jwks_uri: str, ttl_seconds: int = 3600, timeout_seconds: float = 10) -> None:
        if not jwks_uri:
            raise ValueError("jwks_uri must be set")
        self._uri = jwks_uri
        self._ttl = ttl_seconds
        self._timeout = timeout_seconds
        # (jwks document, monotonic fetch time); swapped as a whole
        self._cache: tuple[dict[str, Any], float] | None = None

    @classmethod
    def for_issuer(cls, issuer: str, **kwargs: Any) -> UrlJwkProvider:
        """Build a provider for ``<issuer>/.well-known/jwks.json``."""
        return cls(jwks_uri_for_issuer(issuer), **kwargs)

    @property
    def uri(self) -> str:
        return self._uri

    def _fetch(self) -> dict[str, Any]:
        try:
            resp = requests.get(self._uri, timeout=self._timeout)
            resp.raise_for_status()
            data = resp.json()
        except (requests.RequestException, ValueError) as e:
            raise SigningKeyNotFoundError(f"Cannot obtain jwks from url {self._uri}") from e
        if not isinstance(data, dict) or not isinstance(data.get("keys"), list):
            raise SigningKeyNotFoundError(f"Malformed jwks document at {self._uri}")
        return data

    def _refresh(self) -> dict[str, Any]:
        """Force-refresh the cache regardless of TTL."""
        data = self._fetch()
        self._cache = (data, time.monotonic())
        logger.debug("JWKS cache refreshed uri=%s keys=%d", self._uri, len(data["keys"]))
        return data

    def _ensure_fresh(self) -> dict[str, Any]:
        """Return cached data, refreshing only when TTL has elapsed."""
        cache = self._cache
        if cache is None or (time.monotonic() - cache[1]) >= self._ttl:
            return self._refresh()
        return cache[0]

    def _find_key(self, kid: str, data: dict[str, Any]) -> Jwk | None:
        for key_dict in data["keys"]:
            if isinstance(key_dict, dict) and key_dict.get("kid") == kid:
                return Jwk.from_dict(key_dict)
        return None

    def get(self, kid: str) -> Jwk:
        """
        Return the JWK for the given key id.

        If ``kid`` is not in the cached key set, the cache is refreshed once
        before raising SigningKeyNotFoundError.
        """
        key = self._find_key(kid, self._ensure_fresh())
        if key is not None:
            return key

        logger.info("kid not in cached JWKS; refreshing for possible key rotation")
        key = self._find_key(kid, self._refresh())
        if key is None:
            raise SigningKeyNotFoundError(f"No key found in {self._uri} with kid {kid}")
        return key
