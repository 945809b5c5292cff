import base64

import pytest

from keylab.crypto import dispatch
from keylab.crypto.errors import InvalidKeyFormat, UnsupportedParameter

SIGNING = ["RSA-2048", "RSA-3072", "RSA-4096", "P-256", "P-384", "P-521", "secp256k1", "Ed25519"]
HASHES = {
    "RSA-2048": "SHA-256",
    "RSA-3072": "SHA-256",
    "RSA-4096": "SHA-256",
    "P-256": "SHA-256",
    "P-384": "SHA-384",
    "P-521": "SHA-512",
    "secp256k1": "SHA-256",
    "Ed25519": "SHA-512",
}


@pytest.fixture(scope="module")
def keys():
    return {alg: dispatch.generate_keypair(alg) for alg in SIGNING}


def _flip(b64: str, index: int) -> str:
    raw = bytearray(base64.b64decode(b64))
    raw[index % len(raw)] ^= 0x01
    return base64.b64encode(bytes(raw)).decode()


@pytest.mark.parametrize("alg", SIGNING)
def test_sign_verify_roundtrip(keys, alg):
    kp = keys[alg]
    s = dispatch.sign(alg, "hello", kp.private_key)
    assert s.hash == HASHES[alg]
    v = dispatch.verify(alg, "hello", s.signature, kp.public_key)
    assert v.verified is True
    assert v.algorithm == alg


@pytest.mark.parametrize("alg", SIGNING)
def test_tampered_message_is_false_not_error(keys, alg):
    kp = keys[alg]
    s = dispatch.sign(alg, b"hello", kp.private_key)
    assert dispatch.verify(alg, b"hellp", s.signature, kp.public_key).verified is False


@pytest.mark.parametrize("alg", SIGNING)
@pytest.mark.parametrize("index", [0, 7, -1])
def test_tampered_signature_is_false(keys, alg, index):
    kp = keys[alg]
    s = dispatch.sign(alg, "hello", kp.private_key)
    assert dispatch.verify(alg, "hello", _flip(s.signature, index), kp.public_key).verified is False


def test_signature_from_other_key(keys):
    other = dispatch.generate_keypair("P-256")
    s = dispatch.sign("P-256", "hello", other.private_key)
    assert dispatch.verify("P-256", "hello", s.signature, keys["P-256"].public_key).verified is False


def test_undecodable_signature_is_false(keys):
    assert dispatch.verify("Ed25519", "hello", "!!not-base64!!", keys["Ed25519"].public_key).verified is False


def test_schemes_and_curves(keys):
    assert dispatch.sign("RSA-2048", "m", keys["RSA-2048"].private_key).scheme == "RSASSA-PKCS1-v1_5"
    s = dispatch.sign("P-384", "m", keys["P-384"].private_key)
    assert s.scheme == "ECDSA" and s.curve == "secp384r1" and s.deterministic is False
    e = dispatch.sign("Ed25519", "m", keys["Ed25519"].private_key)
    assert e.scheme == "EdDSA" and e.curve is None and e.deterministic is True


def test_ed25519_is_deterministic(keys):
    kp = keys["Ed25519"]
    assert dispatch.sign("Ed25519", "hello", kp.private_key).signature == dispatch.sign("Ed25519", "hello", kp.private_key).signature


def test_ecdsa_is_randomized_but_verifies(keys):
    kp = keys["P-256"]
    a = dispatch.sign("P-256", "hello", kp.private_key).signature
    b = dispatch.sign("P-256", "hello", kp.private_key).signature
    assert a != b
    assert dispatch.verify("P-256", "hello", a, kp.public_key).verified
    assert dispatch.verify("P-256", "hello", b, kp.public_key).verified


def test_matching_hash_parameter_accepted(keys):
    s = dispatch.sign("P-384", "m", keys["P-384"].private_key, hash_name="sha384")
    assert dispatch.verify("P-384", "m", s.signature, keys["P-384"].public_key, hash_name="SHA-384").verified


def test_unrelated_hash_rejected(keys):
    with pytest.raises(UnsupportedParameter) as ei:
        dispatch.sign("P-256", "m", keys["P-256"].private_key, hash_name="SHA-512")
    assert ei.value.details["expected"] == "SHA-256"


def test_ed25519_rejects_any_hash(keys):
    with pytest.raises(UnsupportedParameter):
        dispatch.sign("Ed25519", "m", keys["Ed25519"].private_key, hash_name="SHA-512")
    with pytest.raises(UnsupportedParameter):
        dispatch.verify("Ed25519", "m", "AAAA", keys["Ed25519"].public_key, hash_name="SHA-256")


def test_curve_mismatch_is_invalid_key(keys):
    with pytest.raises(InvalidKeyFormat):
        dispatch.sign("P-256", "m", keys["P-384"].private_key)
    with pytest.raises(InvalidKeyFormat):
        dispatch.verify("secp256k1", "m", "AAAA", keys["P-256"].public_key)
