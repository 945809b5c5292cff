from __future__ import annotations

from typing import Any, Dict

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from ..crypto import dispatch
from ..crypto.alg_registry import describe, describe_all, parse_algorithm
from ..obs.prom import observe_operation
from .models import (
    DecryptRequest,
    EncryptRequest,
    GenerateKeysRequest,
    KeyExchangeRequest,
    SignRequest,
    VerifyRequest,
)

# Sync handlers; FastAPI runs them in its threadpool.
router = APIRouter(tags=["crypto"])


def _ok(body: Dict[str, Any]) -> JSONResponse:
    return JSONResponse({"success": True, **{k: v for k, v in body.items() if v is not None}})


@router.get("/algorithms")
def list_algorithms():
    return _ok({"algorithms": describe_all()})


@router.get("/algorithms/{algorithm}")
def get_algorithm(algorithm: str):
    return _ok(describe(parse_algorithm(algorithm)))


@router.post("/generate-keys")
def generate_keys(body: GenerateKeysRequest):
    with observe_operation("generate", body.algorithm):
        r = dispatch.generate_keypair(body.algorithm)
    return _ok({
        "algorithm": r.algorithm,
        "publicKey": r.public_key,
        "privateKey": r.private_key,
        "keySize": r.key_size,
        "curve": r.curve,
        "capabilities": r.capabilities,
    })


@router.post("/encrypt")
def encrypt(body: EncryptRequest):
    with observe_operation("encrypt", body.algorithm):
        r = dispatch.encrypt(body.algorithm, body.message, body.public_key)
    return _ok({
        "ciphertext": r.ciphertext,
        "encrypted": r.ciphertext,
        "algorithm": r.algorithm,
        "scheme": r.scheme,
        "padding": r.padding,
        "hash": r.hash,
    })


@router.post("/decrypt")
def decrypt(body: DecryptRequest):
    with observe_operation("decrypt", body.algorithm):
        r = dispatch.decrypt(body.algorithm, body.ciphertext, body.private_key)
    return _ok({
        "decrypted": r.text,
        "algorithm": r.algorithm,
        "scheme": r.scheme,
    })


@router.post("/sign")
def sign(body: SignRequest):
    with observe_operation("sign", body.algorithm):
        r = dispatch.sign(body.algorithm, body.message, body.private_key, hash_name=body.hash)
    return _ok({
        "signature": r.signature,
        "algorithm": r.algorithm,
        "scheme": r.scheme,
        "hash": r.hash,
        "curve": r.curve,
        "deterministic": r.deterministic,
    })


@router.post("/verify-signature")
@router.post("/verify")
def verify_signature(body: VerifyRequest):
    with observe_operation("verify", body.algorithm):
        r = dispatch.verify(body.algorithm, body.message, body.signature, body.public_key, hash_name=body.hash)
    return _ok({
        "verified": r.verified,
        "algorithm": r.algorithm,
        "scheme": r.scheme,
        "hash": r.hash,
        "curve": r.curve,
    })


@router.post("/key-exchange")
def key_exchange(body: KeyExchangeRequest):
    with observe_operation("key-exchange", body.algorithm):
        r = dispatch.key_exchange(body.algorithm, body.private_key, body.peer_public_key)
    return _ok({
        "sharedSecret": r.shared_secret,
        "algorithm": r.algorithm,
        "scheme": r.scheme,
        "curve": r.curve,
        "length": r.length,
        "notes": r.notes,
    })
