"""Request bodies for the /api/crypto routes.

Field names follow the JSON the web UI sends (camelCase). ``algorithm`` is a
plain string so unknown names reach the dispatcher and come back as an
``UnsupportedAlgorithm`` error instead of a schema failure.
"""
from typing import Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from ..config import load_config

_CFG = load_config()


class _Body(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class _MessageBody(_Body):
    message: str = Field(min_length=1)

    @field_validator("message")
    @classmethod
    def _message_size(cls, v: str) -> str:
        # Limit is in UTF-8 bytes, not characters
        size = len(v.encode("utf-8"))
        if size > _CFG.max_message_bytes:
            raise ValueError(f"message is {size} bytes; at most {_CFG.max_message_bytes} are accepted")
        return v


class GenerateKeysRequest(_Body):
    algorithm: str = _CFG.default_algorithm


class EncryptRequest(_MessageBody):
    algorithm: str = _CFG.default_algorithm
    public_key: str = Field(alias="publicKey", min_length=1)


class DecryptRequest(_Body):
    algorithm: str = _CFG.default_algorithm
    ciphertext: str = Field(
        min_length=1,
        validation_alias=AliasChoices("ciphertext", "encryptedData", "encrypted"),
    )
    private_key: str = Field(alias="privateKey", min_length=1)


class SignRequest(_MessageBody):
    algorithm: str = _CFG.default_algorithm
    private_key: str = Field(alias="privateKey", min_length=1)
    hash: Optional[str] = None


class VerifyRequest(_MessageBody):
    algorithm: str = _CFG.default_algorithm
    signature: str = Field(min_length=1)
    public_key: str = Field(alias="publicKey", min_length=1)
    hash: Optional[str] = None


class KeyExchangeRequest(_Body):
    algorithm: str = _CFG.default_kx_algorithm
    private_key: str = Field(alias="privateKey", min_length=1)
    peer_public_key: str = Field(alias="peerPublicKey", min_length=1)
