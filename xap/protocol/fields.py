from __future__ import annotations

from typing import Annotated, Optional

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, StrictInt, field_validator

from .constants import SUPPORTED_VERSIONS


def _decimal(value: object) -> object:
    if isinstance(value, str):
        text = value.strip()
        if not (text.isascii() and text.isdigit()):
            raise ValueError(f"{value!r} is not a decimal integer")
        return int(text)
    return value


# Wire integers are plain ASCII digits; no signs, underscores or fractions.
DecimalInt = Annotated[StrictInt, BeforeValidator(_decimal)]


class _RequiredFields(BaseModel):
    """Items every header and heartbeat must carry, in canonical case."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    v: DecimalInt = Field(..., description="Protocol version (12 or 13)")
    hop: DecimalInt = Field(..., ge=1, description="Hop count")
    uid: str = Field(..., min_length=1, description="Sender identifier, uppercase")
    msg_class: str = Field(..., alias="class", min_length=1, description="Message class, lowercase")
    source: str = Field(..., min_length=1, description="Sender address, lowercase")

    @field_validator("v")
    @classmethod
    def _supported_version(cls, value: int) -> int:
        if value not in SUPPORTED_VERSIONS:
            raise ValueError(f"unsupported version {value}")
        return value

    @field_validator("uid", mode="before")
    @classmethod
    def _upper(cls, value: object) -> object:
        return value.upper() if isinstance(value, str) else value

    @field_validator("msg_class", "source", mode="before")
    @classmethod
    def _lower(cls, value: object) -> object:
        return value.lower() if isinstance(value, str) else value


class HeaderFields(_RequiredFields):
    target: Optional[str] = Field(default=None, min_length=1, description="Addressed device, lowercase")

    @field_validator("target", mode="before")
    @classmethod
    def _lower_target(cls, value: object) -> object:
        return value.lower() if isinstance(value, str) else value


class HeartbeatFields(_RequiredFields):
    interval: DecimalInt = Field(..., ge=1, description="Heartbeat interval in seconds")
    port: Optional[DecimalInt] = Field(default=None, ge=1, description="Listening port of the sender")
    pid: Optional[str] = Field(default=None, min_length=1, description="Process id of the sender")


__all__ = ["DecimalInt", "HeaderFields", "HeartbeatFields"]
