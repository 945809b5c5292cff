"""Error taxonomy for the crypto dispatcher.

Each error carries a machine-checkable ``kind`` and a human-readable message
naming the algorithm/operation involved. All of them are request-local: the
caller can retry with corrected inputs.
"""
from __future__ import annotations

from typing import Any, Dict, Iterable


class KeylabError(Exception):
    kind = "KeylabError"
    status_code = 400

    def __init__(self, message: str, **details: Any) -> None:
        super().__init__(message)
        self.message = message
        self.details: Dict[str, Any] = details

    def to_dict(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"success": False, "error": self.kind, "message": self.message}
        body.update(self.details)
        return body


class UnsupportedAlgorithm(KeylabError):
    """Raised when an algorithm name is not one of the known identifiers."""

    kind = "UnsupportedAlgorithm"

    def __init__(self, algorithm: str, known: Iterable[str]) -> None:
        known = list(known)
        super().__init__(
            f"Algorithm '{algorithm}' is not supported. Supported algorithms: {', '.join(known)}",
            algorithm=algorithm,
            supportedAlgorithms=known,
        )


class UnsupportedOperation(KeylabError):
    """Raised at the capability gate, before any key is parsed."""

    kind = "UnsupportedOperation"

    def __init__(self, algorithm: str, operation: str, supported: Iterable[str]) -> None:
        supported = list(supported)
        super().__init__(
            f"{algorithm} does not support {operation}. Supported operations: {', '.join(supported)}",
            algorithm=algorithm,
            operation=operation,
            supported=supported,
        )
        self.algorithm = algorithm
        self.operation = operation
        self.supported = supported


class UnsupportedParameter(KeylabError):
    """Raised when a caller asks for a hash other than the one fixed for the algorithm."""

    kind = "UnsupportedParameter"


class InvalidKeyFormat(KeylabError):
    kind = "InvalidKeyFormat"


class MessageTooLarge(KeylabError):
    kind = "MessageTooLarge"

    def __init__(self, algorithm: str, max_bytes: int, actual_bytes: int) -> None:
        super().__init__(
            f"Message is {actual_bytes} bytes; {algorithm} with OAEP/SHA-256 accepts at most {max_bytes} bytes",
            algorithm=algorithm,
            maxBytes=max_bytes,
            actualBytes=actual_bytes,
        )
        self.max_bytes = max_bytes
        self.actual_bytes = actual_bytes


class DecryptionError(KeylabError):
    kind = "DecryptionError"

    def __init__(self, algorithm: str) -> None:
        # Same message whatever the cause
        super().__init__(
            "Decryption failed: invalid private key or corrupted encrypted data",
            algorithm=algorithm,
        )


class KeyExchangeError(KeylabError):
    kind = "KeyExchangeError"


__all__ = [
    "KeylabError",
    "UnsupportedAlgorithm",
    "UnsupportedOperation",
    "UnsupportedParameter",
    "InvalidKeyFormat",
    "MessageTooLarge",
    "DecryptionError",
    "KeyExchangeError",
]
