"""Operation dispatcher.

Each public function handles one operation for every algorithm:

  1. capability gate (``UnsupportedOperation`` before any key is touched)
  2. fixed parameter resolution from the capability table
  3. a single ``cryptography`` primitive call, picked by algorithm family
  4. a result dataclass echoing what was used

Binary outputs (ciphertext, signatures, shared secrets) are base64 text.
"""

from __future__ import annotations

import base64
import binascii
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import ec, ed25519, padding, rsa, x25519

from ..utils.logging import get_logger
from .alg_registry import (
    ED25519_INTRINSIC_HASH,
    RSA_OAEP_HASH,
    AlgorithmId,
    Capability,
    Family,
    capability_names,
    ec_curve_for,
    family_of,
    hash_for,
    metadata_of,
    parameters_of,
    parse_algorithm,
    supports,
)
from .errors import (
    DecryptionError,
    InvalidKeyFormat,
    KeyExchangeError,
    MessageTooLarge,
    UnsupportedOperation,
    UnsupportedParameter,
)
from .keyloader import (
    describe_key,
    has_public_envelope,
    key_matches,
    keypair_pems,
    load_private_key,
    load_public_key,
    parse_private_pem,
    parse_public_pem,
)

log = get_logger("dispatch")

X25519_CURVE_LABEL = "Curve25519"


@dataclass
class KeyPairResult:
    algorithm: str
    public_key: str
    private_key: str
    key_size: int
    capabilities: List[str]
    curve: Optional[str] = None


@dataclass
class EncryptResult:
    ciphertext: str
    algorithm: str
    scheme: str = "RSA-OAEP"
    padding: str = "OAEP"
    hash: str = RSA_OAEP_HASH


@dataclass
class DecryptResult:
    plaintext: bytes
    algorithm: str
    scheme: str = "RSA-OAEP"

    @property
    def text(self) -> str:
        return self.plaintext.decode("utf-8", errors="replace")


@dataclass
class SignResult:
    signature: str
    algorithm: str
    scheme: str
    hash: str
    curve: Optional[str] = None
    deterministic: bool = False


@dataclass
class VerifyResult:
    verified: bool
    algorithm: str
    scheme: str
    hash: str
    curve: Optional[str] = None


@dataclass
class KeyExchangeResult:
    shared_secret: str
    algorithm: str
    scheme: str
    curve: str
    length: int
    notes: List[str] = field(default_factory=list)


def _b64(data: bytes) -> str:
    return base64.b64encode(data).decode()


def _as_bytes(message: str | bytes) -> bytes:
    return message.encode("utf-8") if isinstance(message, str) else bytes(message)


def require(alg: str | AlgorithmId, op: Capability) -> AlgorithmId:
    """Resolve ``alg`` and fail with UnsupportedOperation unless it supports ``op``."""
    a = parse_algorithm(alg)
    if not supports(a, op):
        raise UnsupportedOperation(a.value, op.value, capability_names(a))
    return a


def _check_hash(alg: AlgorithmId, requested: Optional[str]) -> None:
    """Reject caller-chosen hashes; the hash is fixed per algorithm."""
    if requested is None or requested == "":
        return
    fixed = parameters_of(alg).hash_name
    if fixed is None:
        raise UnsupportedParameter(
            f"{alg.value} does not take a hash parameter",
            algorithm=alg.value,
            hash=requested,
        )
    norm = requested.upper().replace("_", "-")
    if not norm.startswith("SHA-"):
        norm = norm.replace("SHA", "SHA-", 1)
    if norm != fixed:
        raise UnsupportedParameter(
            f"{alg.value} signs with {fixed}; hash {requested} cannot be selected",
            algorithm=alg.value,
            hash=requested,
            expected=fixed,
        )


def max_oaep_plaintext(key_size_bits: int) -> int:
    """Largest plaintext RSA-OAEP with SHA-256 can carry for the given modulus."""
    k = (key_size_bits + 7) // 8
    return k - 2 * hashes.SHA256.digest_size - 2


def _oaep() -> padding.OAEP:
    return padding.OAEP(
        mgf=padding.MGF1(algorithm=hashes.SHA256()),
        algorithm=hashes.SHA256(),
        label=None,
    )


# ---------------------------------------------------------------------------
# key generation

def _gen_rsa(alg: AlgorithmId):
    return rsa.generate_private_key(public_exponent=65537, key_size=metadata_of(alg).key_size_bits)


def _gen_ec(alg: AlgorithmId):
    return ec.generate_private_key(ec_curve_for(alg))


def _gen_ed25519(alg: AlgorithmId):
    return ed25519.Ed25519PrivateKey.generate()


def _gen_x25519(alg: AlgorithmId):
    return x25519.X25519PrivateKey.generate()


_GENERATORS: Dict[Family, Callable] = {
    Family.RSA: _gen_rsa,
    Family.EC: _gen_ec,
    Family.ED25519: _gen_ed25519,
    Family.X25519: _gen_x25519,
}


def generate_keypair(alg: str | AlgorithmId) -> KeyPairResult:
    a = parse_algorithm(alg)
    log.debug("generate algorithm=%s", a.value)
    sk = _GENERATORS[family_of(a)](a)
    pub_pem, priv_pem = keypair_pems(sk)
    md = metadata_of(a)
    return KeyPairResult(
        algorithm=a.value,
        public_key=pub_pem,
        private_key=priv_pem,
        key_size=md.key_size_bits,
        capabilities=capability_names(a),
        curve=md.native_curve_name,
    )


# ---------------------------------------------------------------------------
# encrypt / decrypt (RSA only)

def encrypt(alg: str | AlgorithmId, message: str | bytes, public_key_pem: str) -> EncryptResult:
    a = require(alg, Capability.ENCRYPT)
    data = _as_bytes(message)
    pk = load_public_key(a, public_key_pem)
    limit = max_oaep_plaintext(pk.key_size)
    if len(data) > limit:
        raise MessageTooLarge(a.value, limit, len(data))
    log.debug("encrypt algorithm=%s bytes=%d", a.value, len(data))
    ct = pk.encrypt(data, _oaep())
    return EncryptResult(ciphertext=_b64(ct), algorithm=a.value)


def decrypt(alg: str | AlgorithmId, ciphertext_b64: str, private_key_pem: str) -> DecryptResult:
    a = require(alg, Capability.DECRYPT)
    sk = load_private_key(a, private_key_pem)
    try:
        ct = base64.b64decode(ciphertext_b64, validate=True)
        pt = sk.decrypt(ct, _oaep())
    except (ValueError, binascii.Error) as e:
        raise DecryptionError(a.value) from e
    log.debug("decrypt algorithm=%s", a.value)
    return DecryptResult(plaintext=pt, algorithm=a.value)


# ---------------------------------------------------------------------------
# sign / verify

def _scheme(alg: AlgorithmId) -> str:
    fam = family_of(alg)
    if fam is Family.RSA:
        return "RSASSA-PKCS1-v1_5"
    if fam is Family.EC:
        return "ECDSA"
    return "EdDSA"


def _hash_label(alg: AlgorithmId) -> str:
    return parameters_of(alg).hash_name or ED25519_INTRINSIC_HASH


def _sign_rsa(alg, sk, data: bytes) -> bytes:
    return sk.sign(data, padding.PKCS1v15(), hash_for(alg))


def _sign_ec(alg, sk, data: bytes) -> bytes:
    return sk.sign(data, ec.ECDSA(hash_for(alg)))


def _sign_ed25519(alg, sk, data: bytes) -> bytes:
    return sk.sign(data)


def _verify_rsa(alg, pk, sig: bytes, data: bytes) -> None:
    pk.verify(sig, data, padding.PKCS1v15(), hash_for(alg))


def _verify_ec(alg, pk, sig: bytes, data: bytes) -> None:
    pk.verify(sig, data, ec.ECDSA(hash_for(alg)))


def _verify_ed25519(alg, pk, sig: bytes, data: bytes) -> None:
    pk.verify(sig, data)


_SIGNERS: Dict[Family, Callable] = {
    Family.RSA: _sign_rsa,
    Family.EC: _sign_ec,
    Family.ED25519: _sign_ed25519,
}
_VERIFIERS: Dict[Family, Callable] = {
    Family.RSA: _verify_rsa,
    Family.EC: _verify_ec,
    Family.ED25519: _verify_ed25519,
}


def sign(
    alg: str | AlgorithmId,
    message: str | bytes,
    private_key_pem: str,
    hash_name: Optional[str] = None,
) -> SignResult:
    a = require(alg, Capability.SIGN)
    _check_hash(a, hash_name)
    sk = load_private_key(a, private_key_pem)
    data = _as_bytes(message)
    log.debug("sign algorithm=%s bytes=%d", a.value, len(data))
    sig = _SIGNERS[family_of(a)](a, sk, data)
    return SignResult(
        signature=_b64(sig),
        algorithm=a.value,
        scheme=_scheme(a),
        hash=_hash_label(a),
        curve=metadata_of(a).native_curve_name,
        deterministic=family_of(a) is not Family.EC,
    )


def verify(
    alg: str | AlgorithmId,
    message: str | bytes,
    signature_b64: str,
    public_key_pem: str,
    hash_name: Optional[str] = None,
) -> VerifyResult:
    """Check a signature. A signature that does not verify is a False result, not an error."""
    a = require(alg, Capability.VERIFY)
    _check_hash(a, hash_name)
    pk = load_public_key(a, public_key_pem)
    data = _as_bytes(message)
    ok = False
    try:
        sig = base64.b64decode(signature_b64 or "", validate=True)
    except (ValueError, binascii.Error):
        sig = None
    if sig:
        try:
            _VERIFIERS[family_of(a)](a, pk, sig, data)
            ok = True
        except InvalidSignature:
            ok = False
    log.debug("verify algorithm=%s verified=%s", a.value, ok)
    return VerifyResult(
        verified=ok,
        algorithm=a.value,
        scheme=_scheme(a),
        hash=_hash_label(a),
        curve=metadata_of(a).native_curve_name,
    )


# ---------------------------------------------------------------------------
# key exchange

def _exchange_ec(sk, peer) -> bytes:
    return sk.exchange(ec.ECDH(), peer)


def _exchange_x25519(sk, peer) -> bytes:
    return sk.exchange(peer)


_EXCHANGERS: Dict[Family, Callable] = {
    Family.EC: _exchange_ec,
    Family.X25519: _exchange_x25519,
}


def key_exchange(alg: str | AlgorithmId, private_key_pem: str, peer_public_key_pem: str) -> KeyExchangeResult:
    a = require(alg, Capability.KEY_EXCHANGE)
    fam = family_of(a)
    sk = parse_private_pem(private_key_pem)
    if not key_matches(a, sk):
        raise KeyExchangeError(
            f"Private key is {describe_key(sk)}, which cannot perform {a.value} key exchange",
            algorithm=a.value,
        )
    if not has_public_envelope(peer_public_key_pem):
        raise InvalidKeyFormat("Invalid peer public key format: must be a PEM 'PUBLIC KEY' block")
    try:
        peer = parse_public_pem(peer_public_key_pem, what="peer public key")
    except InvalidKeyFormat as e:
        raise KeyExchangeError(f"Malformed peer public key for {a.value} key exchange", algorithm=a.value) from e
    if not key_matches(a, peer):
        raise KeyExchangeError(
            f"Mismatched keys: peer public key is {describe_key(peer)} but {a.value} was requested. "
            "Ensure both keys use the same curve.",
            algorithm=a.value,
            peerKey=describe_key(peer),
        )
    try:
        secret = _EXCHANGERS[fam](sk, peer)
    except ValueError as e:
        # e.g. X25519 low-order peer point yields an all-zero secret
        raise KeyExchangeError(f"{a.value} key exchange failed: invalid peer public key", algorithm=a.value) from e
    log.debug("key-exchange algorithm=%s length=%d", a.value, len(secret))
    if fam is Family.X25519:
        scheme, curve = "X25519-ECDH", X25519_CURVE_LABEL
    else:
        scheme, curve = "ECDH", metadata_of(a).native_curve_name
    return KeyExchangeResult(
        shared_secret=_b64(secret),
        algorithm=a.value,
        scheme=scheme,
        curve=curve,
        length=len(secret),
        notes=["The shared secret should go through a KDF before use as a symmetric key"],
    )


__all__ = [
    "KeyPairResult",
    "EncryptResult",
    "DecryptResult",
    "SignResult",
    "VerifyResult",
    "KeyExchangeResult",
    "require",
    "max_oaep_plaintext",
    "generate_keypair",
    "encrypt",
    "decrypt",
    "sign",
    "verify",
    "key_exchange",
]
