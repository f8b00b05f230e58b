"""
Verify a JWT's signature and registered claims against a resolved key.

Background for newcomers:
    Before we trust **anything** in a token we must:

    1. Pick the algorithms the key can verify. An HMAC secret only ever
       verifies HS*, an RSA key only RS*/PS*, and so on. Accepting whatever
       ``alg`` the token claims would let an attacker downgrade to ``none`` or
       sign with our public key as an HMAC secret.
    2. Verify the **signature** (proves the issuer created the token).
    3. Check the **issuer** (``iss``) matches exactly.
    4. Check the **audience** (``aud``) is, or contains, ours.
    5. Check it hasn't **expired** (``exp``) and isn't used early (``nbf``).

    PyJWT does the signature check before looking at any claim, so no claim
    is read from an unverified token.
"""

from __future__ import annotations

from typing import Any

import jwt
from cryptography.hazmat.primitives.asymmetric import ec, ed448, ed25519, rsa

from .errors import (
    AlgorithmMismatchError,
    InvalidClaimError,
    SignatureVerificationError,
    TokenDecodeError,
    TokenVerificationError,
)

HMAC_ALGORITHMS = ("HS256", "HS384", "HS512")
RSA_ALGORITHMS = ("RS256", "RS384", "RS512", "PS256", "PS384", "PS512")
EDDSA_ALGORITHMS = ("EdDSA",)

_EC_ALGORITHMS_BY_CURVE = {
    "secp256r1": ("ES256",),
    "secp384r1": ("ES384",),
    "secp521r1": ("ES512",),
    "secp256k1": ("ES256K",),
}


def unverified_header(token: str) -> dict[str, Any]:
    """
    Read the JWT header **without** validating the token. We need the
    ``kid`` to pick the verification key before the signature can be checked.
    """
    try:
        return jwt.get_unverified_header(token)
    except jwt.InvalidTokenError as e:
        raise TokenDecodeError("Token header could not be decoded") from e


def algorithms_for_key(key: Any) -> tuple[str, ...]:
    """Return the JWS algorithms that may be verified with ``key``."""
    if isinstance(key, (bytes, bytearray)):
        return HMAC_ALGORITHMS
    if isinstance(key, rsa.RSAPublicKey):
        return RSA_ALGORITHMS
    if isinstance(key, ec.EllipticCurvePublicKey):
        algorithms = _EC_ALGORITHMS_BY_CURVE.get(key.curve.name)
        if algorithms is None:
            raise TypeError(f"Unsupported EC curve: {key.curve.name}")
        return algorithms
    if isinstance(key, (ed25519.Ed25519PublicKey, ed448.Ed448PublicKey)):
        return EDDSA_ALGORITHMS
    raise TypeError(f"Unsupported verification key type: {type(key).__name__}")


class TokenVerifier:
    """
    Checks signature, then issuer, audience and lifetime.

    Holds only the expected issuer/audience and the clock leeway, so one
    instance can be shared by any number of threads.
    """

    def __init__(self, issuer: str, audience: str, leeway: float = 0) -> None:
        if not issuer:
            raise ValueError("issuer must be a non-empty string")
        if not audience:
            raise ValueError("audience must be a non-empty string")
        if leeway < 0:
            raise ValueError("leeway must not be negative")
        self.issuer = issuer
        self.audience = audience
        self.leeway = leeway

    def verify(self, token: str, key: Any) -> dict[str, Any]:
        """
        Return the verified claims of ``token``.

        Raises a TokenVerificationError subclass on the first failed check.
        The PyJWT exception is chained as ``__cause__``.
        """
        algorithms = list(algorithms_for_key(key))
        try:
            return jwt.decode(
                token,
                key,
                algorithms=algorithms,
                audience=self.audience,
                issuer=self.issuer,
                leeway=self.leeway,
                options={
                    "verify_signature": True,
                    "verify_exp": True,
                    "verify_nbf": True,
                    "verify_iat": True,
                    "verify_iss": True,
                    "verify_aud": True,
                    "require": ["iss", "aud"],
                },
            )
        except jwt.InvalidSignatureError as e:
            raise SignatureVerificationError("Signature does not match") from e
        except (jwt.InvalidAlgorithmError, jwt.InvalidKeyError) as e:
            raise AlgorithmMismatchError(f"Token algorithm not allowed, expected one of {algorithms}") from e
        except jwt.MissingRequiredClaimError as e:
            raise InvalidClaimError(f"Missing claim: {e.claim}", claim=e.claim) from e
        except jwt.InvalidIssuerError as e:
            raise InvalidClaimError("Issuer does not match", claim="iss") from e
        except jwt.InvalidAudienceError as e:
            raise InvalidClaimError("Audience does not match", claim="aud") from e
        except jwt.ExpiredSignatureError as e:
            raise InvalidClaimError("Token expired", claim="exp") from e
        except jwt.ImmatureSignatureError as e:
            raise InvalidClaimError("Token not yet valid", claim="nbf") from e
        except jwt.InvalidIssuedAtError as e:
            raise InvalidClaimError("Invalid issued-at", claim="iat") from e
        except jwt.DecodeError as e:
            raise TokenDecodeError("Token could not be decoded") from e
        except jwt.InvalidTokenError as e:
            raise TokenVerificationError(f"Invalid token: {type(e).__name__}") from e
