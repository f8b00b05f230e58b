"""
Standalone utility to authenticate JWT bearer tokens.

Build a ``JwtAuthenticationProvider`` once (shared secret or issuer JWKS),
wrap each presented token in ``PreAuthenticatedJsonWebToken`` and call
``authenticate``. Failures are either ``CredentialError`` (bad token) or
``InfrastructureError`` (the key source could not be consulted).
"""

from .config import JwtAuthConfig
from .errors import (
    AuthenticationError,
    ConfigurationError,
    CredentialError,
    InfrastructureError,
    InvalidPublicKeyError,
    JwkError,
    SigningKeyNotFoundError,
)
from .jwks import Jwk, JwkProvider, UrlJwkProvider
from .logging_config import configure_logging
from .provider import JwtAuthenticationProvider
from .tokens import AuthenticatedJsonWebToken, PreAuthenticatedJsonWebToken, bearer_token_from_header

__all__ = [
    "JwtAuthConfig",
    "AuthenticationError",
    "ConfigurationError",
    "CredentialError",
    "InfrastructureError",
    "InvalidPublicKeyError",
    "JwkError",
    "SigningKeyNotFoundError",
    "Jwk",
    "JwkProvider",
    "UrlJwkProvider",
    "configure_logging",
    "JwtAuthenticationProvider",
    "AuthenticatedJsonWebToken",
    "PreAuthenticatedJsonWebToken",
    "bearer_token_from_header",
]
