"""
Failure taxonomy for bearer-token authentication.

Background for newcomers:
    A rejected token can fail for two very different reasons, and callers
    must be able to tell them apart:

    * ``CredentialError`` means the *token* is not trustworthy (bad signature,
      wrong issuer/audience, expired, missing ``kid``). That is a client error;
      the message is deliberately vague so an attacker cannot learn which
      check failed.
    * ``InfrastructureError`` means we could not consult the *trust
      infrastructure* (no JWK provider configured, JWKS endpoint unreachable,
      key material that cannot be decoded). That is a service error.

    The precise technical reason is never in the message. It is kept as the
    exception's ``cause`` (``raise ... from exc``) for server-side logs.
"""

from __future__ import annotations


class AuthenticationError(Exception):
    """Base class for every outward-facing authentication failure."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    @property
    def cause(self) -> BaseException | None:
        """Lower-level reason, for diagnostics only. Never show to the caller."""
        return self.__cause__


class CredentialError(AuthenticationError):
    """The presented token is malformed or untrusted (client error)."""


class InfrastructureError(AuthenticationError):
    """The trust infrastructure could not be consulted (service error)."""


class ConfigurationError(InfrastructureError):
    """The authenticator is misconfigured, e.g. no JWK provider was given."""


# Verification causes. Raised by TokenVerifier, attached to CredentialError.


class TokenVerificationError(Exception):
    """Base class for reasons a token failed signature or claim checks."""


class TokenDecodeError(TokenVerificationError):
    """The token is not a structurally valid JWT."""


class AlgorithmMismatchError(TokenVerificationError):
    """The token's ``alg`` header is not usable with the resolved key."""


class SignatureVerificationError(TokenVerificationError):
    """The signature does not match the header and payload."""


class InvalidClaimError(TokenVerificationError):
    """A registered claim (iss, aud, exp, nbf, iat) is missing or invalid."""

    def __init__(self, message: str, claim: str | None = None) -> None:
        super().__init__(message)
        self.claim = claim


# Key lookup failures. Raised by JwkProvider implementations.


class JwkError(Exception):
    """Generic failure while looking up key material."""


class SigningKeyNotFoundError(JwkError):
    """No key matches the requested ``kid``, or the key set could not be fetched."""


class InvalidPublicKeyError(JwkError):
    """The returned key material cannot be decoded as a public key."""
