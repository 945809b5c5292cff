"""Algorithm capability table.

Every supported algorithm is an ``AlgorithmId``. One table entry per id holds
its family, capability set, display metadata and the fixed primitive
parameters (signing hash, RSA padding, EC curve). Everything else in the
package looks algorithms up here instead of branching on names.

Capability partition:
  RSA-2048/3072/4096            encrypt, decrypt, sign, verify
  P-256/P-384/P-521/secp256k1   sign, verify, key-exchange
  Ed25519                       sign, verify
  X25519                        key-exchange
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, FrozenSet, List, Optional

from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import ec

from .errors import UnsupportedAlgorithm


class AlgorithmId(str, Enum):
    RSA_2048 = "RSA-2048"
    RSA_3072 = "RSA-3072"
    RSA_4096 = "RSA-4096"
    P_256 = "P-256"
    P_384 = "P-384"
    P_521 = "P-521"
    SECP256K1 = "secp256k1"
    ED25519 = "Ed25519"
    X25519 = "X25519"


class Capability(str, Enum):
    ENCRYPT = "encrypt"
    DECRYPT = "decrypt"
    SIGN = "sign"
    VERIFY = "verify"
    KEY_EXCHANGE = "key-exchange"

    @classmethod
    def _missing_(cls, value):
        # Older clients call key exchange "ecdh"
        if isinstance(value, str) and value.lower() in ("ecdh", "key_exchange", "keyexchange"):
            return cls.KEY_EXCHANGE
        return None


class Family(str, Enum):
    RSA = "rsa"
    EC = "ec"
    ED25519 = "ed25519"
    X25519 = "x25519"


@dataclass(frozen=True)
class AlgorithmMetadata:
    key_size_bits: int
    security_bits: int
    native_curve_name: Optional[str] = None
    label: str = ""
    description: str = ""


@dataclass(frozen=True)
class AlgorithmParameters:
    """Primitive configuration derived from an AlgorithmId; never caller-chosen."""

    family: Family
    hash_name: Optional[str] = None
    padding: Optional[str] = None
    curve: Optional[str] = None


@dataclass(frozen=True)
class _Entry:
    family: Family
    capabilities: FrozenSet[Capability]
    metadata: AlgorithmMetadata
    hash_name: Optional[str] = None
    ec_curve: Optional[Callable[[], ec.EllipticCurve]] = None


_RSA_CAPS = frozenset({Capability.ENCRYPT, Capability.DECRYPT, Capability.SIGN, Capability.VERIFY})
_EC_CAPS = frozenset({Capability.SIGN, Capability.VERIFY, Capability.KEY_EXCHANGE})
_ED_CAPS = frozenset({Capability.SIGN, Capability.VERIFY})
_X_CAPS = frozenset({Capability.KEY_EXCHANGE})

# Listing order for responses and error messages
CAPABILITY_ORDER = [
    Capability.ENCRYPT,
    Capability.DECRYPT,
    Capability.SIGN,
    Capability.VERIFY,
    Capability.KEY_EXCHANGE,
]

RSA_OAEP_HASH = "SHA-256"
ED25519_INTRINSIC_HASH = "SHA-512"

_TABLE: Dict[AlgorithmId, _Entry] = {
    AlgorithmId.RSA_2048: _Entry(
        Family.RSA, _RSA_CAPS,
        AlgorithmMetadata(2048, 112, label="RSA-2048", description="Classic RSA encryption (2048-bit)"),
        hash_name="SHA-256",
    ),
    AlgorithmId.RSA_3072: _Entry(
        Family.RSA, _RSA_CAPS,
        AlgorithmMetadata(3072, 128, label="RSA-3072", description="Higher security RSA (3072-bit)"),
        hash_name="SHA-256",
    ),
    AlgorithmId.RSA_4096: _Entry(
        Family.RSA, _RSA_CAPS,
        AlgorithmMetadata(4096, 152, label="RSA-4096", description="Maximum RSA security (4096-bit)"),
        hash_name="SHA-256",
    ),
    AlgorithmId.P_256: _Entry(
        Family.EC, _EC_CAPS,
        AlgorithmMetadata(256, 128, "prime256v1", "ECDSA P-256", "NIST P-256 curve (prime256v1)"),
        hash_name="SHA-256", ec_curve=ec.SECP256R1,
    ),
    AlgorithmId.P_384: _Entry(
        Family.EC, _EC_CAPS,
        AlgorithmMetadata(384, 192, "secp384r1", "ECDSA P-384", "NIST P-384 curve"),
        hash_name="SHA-384", ec_curve=ec.SECP384R1,
    ),
    AlgorithmId.P_521: _Entry(
        Family.EC, _EC_CAPS,
        AlgorithmMetadata(521, 256, "secp521r1", "ECDSA P-521", "NIST P-521 curve (highest security)"),
        hash_name="SHA-512", ec_curve=ec.SECP521R1,
    ),
    AlgorithmId.SECP256K1: _Entry(
        Family.EC, _EC_CAPS,
        AlgorithmMetadata(256, 128, "secp256k1", "secp256k1", "Bitcoin curve"),
        hash_name="SHA-256", ec_curve=ec.SECP256K1,
    ),
    AlgorithmId.ED25519: _Entry(
        Family.ED25519, _ED_CAPS,
        AlgorithmMetadata(256, 128, label="Ed25519", description="EdDSA signatures (fast, deterministic)"),
    ),
    AlgorithmId.X25519: _Entry(
        Family.X25519, _X_CAPS,
        AlgorithmMetadata(256, 128, label="X25519", description="Curve25519 Diffie-Hellman key exchange"),
    ),
}

_missing = set(AlgorithmId) - set(_TABLE)
if _missing:  # pragma: no cover - guards edits to the table
    raise RuntimeError(f"capability table has no entry for: {sorted(a.value for a in _missing)}")

_HASHES: Dict[str, Callable[[], hashes.HashAlgorithm]] = {
    "SHA-256": hashes.SHA256,
    "SHA-384": hashes.SHA384,
    "SHA-512": hashes.SHA512,
}

_BY_NAME = {a.value.lower(): a for a in AlgorithmId}


def parse_algorithm(name: str | AlgorithmId) -> AlgorithmId:
    if isinstance(name, AlgorithmId):
        return name
    alg = _BY_NAME.get(str(name).strip().lower())
    if alg is None:
        raise UnsupportedAlgorithm(str(name), [a.value for a in AlgorithmId])
    return alg


def parse_capability(name: str | Capability) -> Capability:
    if isinstance(name, Capability):
        return name
    return Capability(str(name).strip().lower())


def capabilities_of(alg: AlgorithmId) -> FrozenSet[Capability]:
    return _TABLE[alg].capabilities


def capability_names(alg: AlgorithmId) -> List[str]:
    caps = _TABLE[alg].capabilities
    return [c.value for c in CAPABILITY_ORDER if c in caps]


def supports(alg: AlgorithmId, op: Capability) -> bool:
    return op in _TABLE[alg].capabilities


def family_of(alg: AlgorithmId) -> Family:
    return _TABLE[alg].family


def metadata_of(alg: AlgorithmId) -> AlgorithmMetadata:
    return _TABLE[alg].metadata


def parameters_of(alg: AlgorithmId) -> AlgorithmParameters:
    entry = _TABLE[alg]
    return AlgorithmParameters(
        family=entry.family,
        hash_name=entry.hash_name,
        padding="OAEP" if entry.family is Family.RSA else None,
        curve=entry.metadata.native_curve_name,
    )


def hash_for(alg: AlgorithmId) -> Optional[hashes.HashAlgorithm]:
    """Signing hash for ``alg``; None for Ed25519 (intrinsic) and X25519."""
    name = _TABLE[alg].hash_name
    return _HASHES[name]() if name else None


def ec_curve_for(alg: AlgorithmId) -> ec.EllipticCurve:
    factory = _TABLE[alg].ec_curve
    if factory is None:
        raise ValueError(f"{alg.value} is not a named-curve algorithm")
    return factory()


def describe(alg: AlgorithmId) -> Dict[str, Any]:
    md = metadata_of(alg)
    params = parameters_of(alg)
    out: Dict[str, Any] = {
        "id": alg.value,
        "name": md.label,
        "family": params.family.value,
        "description": md.description,
        "keySize": md.key_size_bits,
        "securityLevel": md.security_bits,
        "capabilities": capability_names(alg),
        "hash": params.hash_name or (ED25519_INTRINSIC_HASH if params.family is Family.ED25519 else None),
    }
    if md.native_curve_name:
        out["curve"] = md.native_curve_name
    return out


def describe_all() -> List[Dict[str, Any]]:
    return [describe(a) for a in AlgorithmId]


__all__ = [
    "AlgorithmId",
    "Capability",
    "Family",
    "AlgorithmMetadata",
    "AlgorithmParameters",
    "parse_algorithm",
    "parse_capability",
    "capabilities_of",
    "capability_names",
    "supports",
    "family_of",
    "metadata_of",
    "parameters_of",
    "hash_for",
    "ec_curve_for",
    "describe",
    "describe_all",
]
