"""Key resolution strategies: a fixed HMAC secret, or a public key looked up by ``kid``."""

from __future__ import annotations

import base64
import binascii
import logging
from typing import Any, Protocol

from .errors import (
    ConfigurationError,
    CredentialError,
    InfrastructureError,
    InvalidPublicKeyError,
    SigningKeyNotFoundError,
)
from .jwks import Jwk, JwkProvider
from .verifier import algorithms_for_key

logger = logging.getLogger(__name__)


class KeyResolver(Protocol):
    def resolve(self, key_id: str | None) -> Any:
        """Return the verification key for a token whose header carries ``key_id``."""
        ...


class SecretKeyResolver:
    """Always returns the shared secret; the token's ``kid`` is ignored."""

    def __init__(self, secret: bytes | str) -> None:
        if isinstance(secret, str):
            secret = secret.encode("utf-8")
        if not secret:
            raise ValueError("secret must be a non-empty byte sequence")
        self._secret = bytes(secret)

    @classmethod
    def from_base64(cls, value: str) -> SecretKeyResolver:
        """Decode a base64 (or base64url) encoded secret."""
        raw = value.strip().replace("-", "+").replace("_", "/")
        raw += "=" * (-len(raw) % 4)
        try:
            return cls(base64.b64decode(raw, validate=True))
        except binascii.Error as e:
            raise ValueError("secret is not valid base64") from e

    def resolve(self, key_id: str | None) -> bytes:
        return self._secret


class JwkKeyResolver:
    """
    Looks up the issuer's public key for the token's ``kid``.

    Every lookup failure is classified here, so the authenticator can let
    these errors through untouched:

    * no provider configured -> ConfigurationError
    * no ``kid`` in the token -> CredentialError
    * unknown ``kid`` / JWKS unreachable -> InfrastructureError
    * key material that is not a public key -> InfrastructureError
    """

    def __init__(self, jwk_provider: JwkProvider | None) -> None:
        self._provider = jwk_provider

    def resolve(self, key_id: str | None) -> Any:
        if self._provider is None:
            raise ConfigurationError("Missing jwk provider")
        if not key_id:
            raise CredentialError("No kid found in jwt")

        try:
            return _usable_public_key(self._provider.get(key_id))
        except SigningKeyNotFoundError as e:
            logger.warning("Signing key lookup failed: %s", e)
            raise InfrastructureError("Could not retrieve jwks from issuer") from e
        except InvalidPublicKeyError as e:
            logger.warning("Issuer returned an unusable public key: %s", e)
            raise InfrastructureError("Could not retrieve public key from issuer") from e
        except Exception as e:
            logger.warning("JWK provider failed: %s", type(e).__name__)
            raise InfrastructureError("Cannot authenticate with jwt") from e


def _usable_public_key(jwk: Jwk) -> Any:
    """Decode ``jwk`` and make sure a JWS algorithm exists for the key."""
    key = jwk.public_key()
    try:
        algorithms_for_key(key)
    except TypeError as e:
        raise InvalidPublicKeyError(str(e)) from e
    return key
