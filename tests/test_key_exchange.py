import base64

import pytest

from keylab.crypto import dispatch
from keylab.crypto.errors import InvalidKeyFormat, KeyExchangeError

LENGTHS = {"P-256": 32, "P-384": 48, "P-521": 66, "secp256k1": 32, "X25519": 32}


@pytest.mark.parametrize("alg", list(LENGTHS))
def test_shared_secret_symmetry(alg):
    alice = dispatch.generate_keypair(alg)
    bob = dispatch.generate_keypair(alg)
    ab = dispatch.key_exchange(alg, alice.private_key, bob.public_key)
    ba = dispatch.key_exchange(alg, bob.private_key, alice.public_key)
    assert ab.shared_secret == ba.shared_secret
    assert ab.length == LENGTHS[alg]
    assert len(base64.b64decode(ab.shared_secret)) == LENGTHS[alg]


def test_x25519_scenario():
    alice = dispatch.generate_keypair("X25519")
    bob = dispatch.generate_keypair("X25519")
    assert alice.capabilities == ["key-exchange"]
    r1 = dispatch.key_exchange("X25519", alice.private_key, bob.public_key)
    r2 = dispatch.key_exchange("X25519", bob.private_key, alice.public_key)
    assert base64.b64decode(r1.shared_secret) == base64.b64decode(r2.shared_secret)
    assert r1.length == 32
    assert r1.scheme == "X25519-ECDH" and r1.curve == "Curve25519"


def test_ecdh_reports_curve():
    a = dispatch.generate_keypair("P-521")
    b = dispatch.generate_keypair("P-521")
    r = dispatch.key_exchange("P-521", a.private_key, b.public_key)
    assert r.scheme == "ECDH" and r.curve == "secp521r1"


def test_x25519_private_with_p256_peer():
    x = dispatch.generate_keypair("X25519")
    p = dispatch.generate_keypair("P-256")
    with pytest.raises(KeyExchangeError) as ei:
        dispatch.key_exchange("X25519", x.private_key, p.public_key)
    assert "X25519" in ei.value.message


def test_private_key_of_wrong_family():
    x = dispatch.generate_keypair("X25519")
    p = dispatch.generate_keypair("P-256")
    with pytest.raises(KeyExchangeError):
        dispatch.key_exchange("P-256", x.private_key, p.public_key)


def test_mismatched_curves():
    a = dispatch.generate_keypair("P-256")
    b = dispatch.generate_keypair("P-384")
    with pytest.raises(KeyExchangeError) as ei:
        dispatch.key_exchange("P-256", a.private_key, b.public_key)
    assert "same curve" in ei.value.message


def test_malformed_peer_key():
    a = dispatch.generate_keypair("P-256")
    bad = "-----BEGIN PUBLIC KEY-----\nbm90IGEga2V5\n-----END PUBLIC KEY-----\n"
    with pytest.raises(KeyExchangeError):
        dispatch.key_exchange("P-256", a.private_key, bad)


def test_peer_without_pem_envelope():
    a = dispatch.generate_keypair("X25519")
    with pytest.raises(InvalidKeyFormat):
        dispatch.key_exchange("X25519", a.private_key, "not a pem")


def test_bad_private_key_envelope():
    b = dispatch.generate_keypair("X25519")
    with pytest.raises(InvalidKeyFormat):
        dispatch.key_exchange("X25519", b.public_key, b.public_key)
