"""
Pytest fixtures for the test suite.

Key pairs are generated once per session (RSA generation is slow). Tokens are
minted with ``tests.helpers.make_token``, the same way an issuer would.
"""
from __future__ import annotations

from unittest.mock import MagicMock

import pytest
from cryptography.hazmat.primitives.asymmetric import ec, rsa

from jwt_auth.errors import SigningKeyNotFoundError
from tests.helpers import KEY_ID


@pytest.fixture(scope="session")
def rsa_private_key():
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture(scope="session")
def other_rsa_private_key():
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture(scope="session")
def ec_private_key():
    return ec.generate_private_key(ec.SECP256R1())


@pytest.fixture
def jwk_provider(rsa_private_key):
    """
    A mocked JWK provider that returns the RSA public key for ``KEY_ID``.

    Tests override ``get.side_effect`` or ``public_key`` to simulate
    lookup failures.
    """
    jwk = MagicMock()
    jwk.public_key.return_value = rsa_private_key.public_key()
    provider = MagicMock()
    provider.get.side_effect = lambda kid: jwk if kid == KEY_ID else _missing(kid)
    provider.jwk = jwk
    return provider


def _missing(kid):
    raise SigningKeyNotFoundError(f"no key {kid}")
