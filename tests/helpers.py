"""Shared constants and token minting for the test suite."""
from __future__ import annotations

import jwt


ISSUER = "issuer"
AUDIENCE = "audience"
KEY_ID = "key-id"
# Long enough to avoid PyJWT's short-HMAC-key warning.
SECRET = b"secret-secret-secret-secret-secret"
OTHER_SECRET = b"not-real-secret-not-real-secret-xx"


def make_token(key, algorithm="HS256", *, kid=None, **claims) -> str:
    """Sign ``claims`` with ``key``; ``kid`` goes into the header when given."""
    headers = {"kid": kid} if kid is not None else None
    return jwt.encode(claims, key, algorithm=algorithm, headers=headers)
