"""Tests for signature and claim verification."""

import time

import jwt
import pytest
from cryptography.hazmat.primitives.asymmetric import ec, ed25519

from jwt_auth.errors import (
    AlgorithmMismatchError,
    InvalidClaimError,
    SignatureVerificationError,
    TokenDecodeError,
)
from jwt_auth.verifier import (
    HMAC_ALGORITHMS,
    RSA_ALGORITHMS,
    TokenVerifier,
    algorithms_for_key,
    unverified_header,
)
from tests.helpers import AUDIENCE, ISSUER, OTHER_SECRET, SECRET, make_token


def test_algorithms_for_key_types(rsa_private_key, ec_private_key):
    assert algorithms_for_key(SECRET) == HMAC_ALGORITHMS
    assert algorithms_for_key(rsa_private_key.public_key()) == RSA_ALGORITHMS
    assert algorithms_for_key(ec_private_key.public_key()) == ("ES256",)
    assert algorithms_for_key(ec.generate_private_key(ec.SECP384R1()).public_key()) == ("ES384",)
    assert algorithms_for_key(ed25519.Ed25519PrivateKey.generate().public_key()) == ("EdDSA",)


def test_algorithms_for_key_rejects_unknown_type():
    with pytest.raises(TypeError):
        algorithms_for_key("a string secret")


def test_verifier_requires_issuer_and_audience():
    with pytest.raises(ValueError):
        TokenVerifier("", AUDIENCE)
    with pytest.raises(ValueError):
        TokenVerifier(ISSUER, "")
    with pytest.raises(ValueError):
        TokenVerifier(ISSUER, AUDIENCE, leeway=-1)


def test_verify_returns_claims():
    token = make_token(SECRET, iss=ISSUER, aud=AUDIENCE, sub="u", custom="x")
    claims = TokenVerifier(ISSUER, AUDIENCE).verify(token, SECRET)
    assert claims == {"iss": ISSUER, "aud": AUDIENCE, "sub": "u", "custom": "x"}


def test_signature_checked_before_claims():
    # Wrong issuer *and* wrong key: the signature failure must win.
    token = make_token(OTHER_SECRET, iss="some", aud="some")
    with pytest.raises(SignatureVerificationError) as exc_info:
        TokenVerifier(ISSUER, AUDIENCE).verify(token, SECRET)
    assert isinstance(exc_info.value.__cause__, jwt.InvalidSignatureError)


@pytest.mark.parametrize(
    "claims, failed",
    [
        ({"aud": AUDIENCE}, "iss"),
        ({"iss": ISSUER}, "aud"),
        ({"iss": "issuer2", "aud": AUDIENCE}, "iss"),
        ({"iss": ISSUER, "aud": "audience2"}, "aud"),
        ({"iss": ISSUER, "aud": ["a", "b"]}, "aud"),
    ],
)
def test_claim_failures_name_the_claim(claims, failed):
    token = make_token(SECRET, **claims)
    with pytest.raises(InvalidClaimError) as exc_info:
        TokenVerifier(ISSUER, AUDIENCE).verify(token, SECRET)
    assert exc_info.value.claim == failed


def test_issuer_is_exact_match():
    token = make_token(SECRET, iss=ISSUER + "/", aud=AUDIENCE)
    with pytest.raises(InvalidClaimError):
        TokenVerifier(ISSUER, AUDIENCE).verify(token, SECRET)


def test_not_before_in_future():
    token = make_token(SECRET, iss=ISSUER, aud=AUDIENCE, nbf=int(time.time()) + 600)
    with pytest.raises(InvalidClaimError) as exc_info:
        TokenVerifier(ISSUER, AUDIENCE).verify(token, SECRET)
    assert exc_info.value.claim == "nbf"


def test_none_algorithm_rejected():
    token = jwt.encode({"iss": ISSUER, "aud": AUDIENCE}, None, algorithm="none")
    with pytest.raises(AlgorithmMismatchError):
        TokenVerifier(ISSUER, AUDIENCE).verify(token, SECRET)


def test_garbage_token():
    with pytest.raises(TokenDecodeError):
        TokenVerifier(ISSUER, AUDIENCE).verify("a.b.c", SECRET)


def test_unverified_header():
    token = make_token(SECRET, kid="k1", iss=ISSUER)
    assert unverified_header(token)["kid"] == "k1"
    with pytest.raises(TokenDecodeError):
        unverified_header("not-a-jwt")
