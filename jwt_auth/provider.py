"""
Authenticate bearer JWTs: resolve the key, verify the token, classify failures.

Background for newcomers:
    ``JwtAuthenticationProvider`` is the entry point. A host (web middleware,
    an RPC interceptor, a CLI) wraps the presented token in a
    ``PreAuthenticatedJsonWebToken`` and calls ``authenticate``. Exactly one
    of three things happens:

    * an ``AuthenticatedJsonWebToken`` is returned;
    * ``CredentialError`` is raised (reject the client, e.g. HTTP 401);
    * ``InfrastructureError`` is raised (our side is broken, e.g. HTTP 503).

    The provider is built once and shared. It keeps no per-call state, so
    the same token always gets the same answer and concurrent calls are safe.
"""

from __future__ import annotations

import logging
from typing import Any

from .config import JwtAuthConfig
from .errors import CredentialError, TokenVerificationError
from .jwks import JwkProvider, UrlJwkProvider
from .resolvers import JwkKeyResolver, KeyResolver, SecretKeyResolver
from .tokens import AuthenticatedJsonWebToken, PreAuthenticatedJsonWebToken
from .verifier import TokenVerifier, unverified_header

logger = logging.getLogger(__name__)

INVALID_TOKEN_MESSAGE = "Not a valid token"


class JwtAuthenticationProvider:
    """
    Verifies JWTs signed with a shared secret (HS*) or an issuer key (RS*/ES*).

    Prefer the ``with_secret`` / ``with_jwk_provider`` / ``from_config``
    constructors over calling ``__init__`` with a resolver directly.
    """

    def __init__(self, resolver: KeyResolver, issuer: str, audience: str, leeway: float = 0) -> None:
        self._resolver = resolver
        self._verifier = TokenVerifier(issuer, audience, leeway=leeway)

    @classmethod
    def with_secret(cls, secret: bytes | str, issuer: str, audience: str) -> JwtAuthenticationProvider:
        return cls(SecretKeyResolver(secret), issuer, audience)

    @classmethod
    def with_base64_secret(cls, secret: str, issuer: str, audience: str) -> JwtAuthenticationProvider:
        return cls(SecretKeyResolver.from_base64(secret), issuer, audience)

    @classmethod
    def with_jwk_provider(
        cls, jwk_provider: JwkProvider | None, issuer: str, audience: str
    ) -> JwtAuthenticationProvider:
        """
        Verify with the issuer's public keys.

        ``jwk_provider`` may be None; every ``authenticate`` call then fails
        with ConfigurationError instead of failing here.
        """
        return cls(JwkKeyResolver(jwk_provider), issuer, audience)

    @classmethod
    def from_config(cls, config: JwtAuthConfig | None = None) -> JwtAuthenticationProvider:
        """Build a provider from ``JwtAuthConfig`` (environment if None)."""
        config = config or JwtAuthConfig.from_environ()
        resolver: KeyResolver
        if config.uses_secret:
            if config.secret_base64:
                resolver = SecretKeyResolver.from_base64(config.secret)
            else:
                resolver = SecretKeyResolver(config.secret)
        else:
            resolver = JwkKeyResolver(
                UrlJwkProvider(
                    config.jwks_uri,
                    ttl_seconds=config.jwks_cache_ttl_seconds,
                    timeout_seconds=config.jwks_timeout_seconds,
                )
            )
        logger.debug("JWT provider configured alg=%s issuer=%s", config.algorithm, config.issuer)
        return cls(resolver, config.issuer, config.audience, leeway=config.clock_skew_seconds)

    @property
    def issuer(self) -> str:
        return self._verifier.issuer

    @property
    def audience(self) -> str:
        return self._verifier.audience

    @property
    def leeway(self) -> float:
        return self._verifier.leeway

    def with_leeway(self, seconds: float) -> JwtAuthenticationProvider:
        """Return a copy that tolerates ``seconds`` of clock skew on exp/nbf/iat."""
        return type(self)(self._resolver, self.issuer, self.audience, leeway=seconds)

    def supports(self, credential_type: Any) -> bool:
        """True only for the pre-authenticated token type this provider verifies."""
        return isinstance(credential_type, type) and issubclass(credential_type, PreAuthenticatedJsonWebToken)

    def authenticate(self, authentication: Any) -> AuthenticatedJsonWebToken | None:
        """
        Verify ``authentication`` and return the authenticated token.

        Returns None for credential types this provider does not support, so
        a host can try the next provider in its chain.

        Raises:
            CredentialError: the token is malformed, forged, expired, for
                another issuer/audience, or lacks a ``kid``.
            InfrastructureError: the JWK provider is missing, unreachable, or
                returned unusable key material.
        """
        if not self.supports(type(authentication)):
            return None

        token = authentication.token
        try:
            header = unverified_header(token)
            key = self._resolver.resolve(header.get("kid"))
            claims = self._verifier.verify(token, key)
        except TokenVerificationError as e:
            logger.info("Token rejected: %s", type(e).__name__)
            raise CredentialError(INVALID_TOKEN_MESSAGE) from e

        return AuthenticatedJsonWebToken(token=token, header=header, claims=claims)
