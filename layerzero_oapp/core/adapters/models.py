from typing import Any

from hexbytes import HexBytes
from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator

from layerzero_oapp.core.constants.base import MAX_UINT16, MAX_UINT32


class EnforcedOptionParam(BaseModel):
    """One ``(eid, msgType, options)`` entry of ``setEnforcedOptions``."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    eid: int = Field(ge=0, le=MAX_UINT32)
    msg_type: int = Field(alias="msgType", ge=0, le=MAX_UINT16)
    options: bytes

    @field_validator("options", mode="before")
    @classmethod
    def coerce_options(cls, value: Any) -> bytes:
        if isinstance(value, (bytes, bytearray)):
            return bytes(value)
        if isinstance(value, str):
            return bytes(HexBytes(value))
        raise ValueError(
            f"options must be bytes or a hex string, got {type(value).__name__}"
        )

    @field_serializer("options")
    def serialize_options(self, value: bytes) -> str:
        return "0x" + value.hex()

    def as_abi_tuple(self) -> tuple[int, int, bytes]:
        return (self.eid, self.msg_type, self.options)


class OptionsUpdate(BaseModel):
    """Result of a ``setEnforcedOptions`` call."""

    transaction_hash: str
    transaction_chain_id: int
    oapp_address: str
    params: list[EnforcedOptionParam]
    explorer_url: str | None = None


class OwnershipUpdate(BaseModel):
    transaction_hash: str
    transaction_chain_id: int
    oapp_address: str
    previous_owner: str | None = None
    new_owner: str
    explorer_url: str | None = None
