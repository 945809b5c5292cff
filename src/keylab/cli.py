"""Command line front end over the dispatcher.

Keys are read from PEM files; results are printed as JSON, e.g.::

    keylab generate Ed25519 --out-dir keys/
    keylab sign Ed25519 --key keys/ed25519_sk.pem --message hello
    keylab exchange X25519 --key alice_sk.pem --peer bob_pk.pem
"""
from __future__ import annotations

import argparse
import json
import sys
from dataclasses import asdict
from pathlib import Path
from typing import Any, Dict

from .crypto import dispatch
from .crypto.alg_registry import describe_all
from .crypto.errors import KeylabError


def _read(path: str) -> str:
    return Path(path).read_text(encoding="utf-8")


def _message(args) -> str:
    if args.message_file:
        return _read(args.message_file)
    if args.message is None:
        raise SystemExit("one of --message/--message-file is required")
    return args.message


def _write_keys(out_dir: str, result: dispatch.KeyPairResult) -> Dict[str, str]:
    base = Path(out_dir)
    base.mkdir(parents=True, exist_ok=True)
    stem = result.algorithm.lower().replace("-", "")
    sk_path = base / f"{stem}_sk.pem"
    pk_path = base / f"{stem}_pk.pem"
    sk_path.write_text(result.private_key, encoding="utf-8")
    pk_path.write_text(result.public_key, encoding="utf-8")
    return {"private_key_path": str(sk_path), "public_key_path": str(pk_path)}


def _run(args) -> Dict[str, Any]:
    cmd = args.command
    if cmd == "algorithms":
        return {"algorithms": describe_all()}
    if cmd == "generate":
        r = dispatch.generate_keypair(args.algorithm)
        if args.out_dir:
            out = {k: v for k, v in asdict(r).items() if k not in ("public_key", "private_key")}
            out.update(_write_keys(args.out_dir, r))
            return out
        return asdict(r)
    if cmd == "encrypt":
        return asdict(dispatch.encrypt(args.algorithm, _message(args), _read(args.key)))
    if cmd == "decrypt":
        r = dispatch.decrypt(args.algorithm, args.ciphertext, _read(args.key))
        return {"algorithm": r.algorithm, "scheme": r.scheme, "plaintext": r.text}
    if cmd == "sign":
        return asdict(dispatch.sign(args.algorithm, _message(args), _read(args.key), hash_name=args.hash))
    if cmd == "verify":
        return asdict(dispatch.verify(args.algorithm, _message(args), args.signature, _read(args.key), hash_name=args.hash))
    if cmd == "exchange":
        return asdict(dispatch.key_exchange(args.algorithm, _read(args.key), _read(args.peer)))
    raise SystemExit(f"unknown command {cmd}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="keylab", description="Asymmetric cryptography demo operations")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("algorithms", help="List algorithms and their capabilities")

    p = sub.add_parser("generate", help="Generate a key pair")
    p.add_argument("algorithm")
    p.add_argument("--out-dir", dest="out_dir", help="Write <alg>_sk.pem / <alg>_pk.pem here instead of printing keys")

    def with_message(p):
        p.add_argument("--message", "-m")
        p.add_argument("--message-file", dest="message_file")

    p = sub.add_parser("encrypt", help="RSA-OAEP encrypt a message")
    p.add_argument("algorithm")
    p.add_argument("--key", required=True, help="Public key PEM file")
    with_message(p)

    p = sub.add_parser("decrypt", help="RSA-OAEP decrypt base64 ciphertext")
    p.add_argument("algorithm")
    p.add_argument("--key", required=True, help="Private key PEM file")
    p.add_argument("--ciphertext", required=True)

    p = sub.add_parser("sign", help="Sign a message")
    p.add_argument("algorithm")
    p.add_argument("--key", required=True, help="Private key PEM file")
    p.add_argument("--hash")
    with_message(p)

    p = sub.add_parser("verify", help="Verify a base64 signature")
    p.add_argument("algorithm")
    p.add_argument("--key", required=True, help="Public key PEM file")
    p.add_argument("--signature", required=True)
    p.add_argument("--hash")
    with_message(p)

    p = sub.add_parser("exchange", help="Derive a shared secret")
    p.add_argument("algorithm")
    p.add_argument("--key", required=True, help="Own private key PEM file")
    p.add_argument("--peer", required=True, help="Peer public key PEM file")
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv if argv is not None else sys.argv[1:])
    try:
        out = _run(args)
    except KeylabError as e:
        print(json.dumps(e.to_dict(), indent=2))
        return 1
    except OSError as e:
        print(f"cannot read input: {e}")
        return 2
    print(json.dumps(out, indent=2))
    if args.command == "verify" and not out.get("verified"):
        return 3
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
