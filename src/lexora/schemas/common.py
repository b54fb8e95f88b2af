"""Response envelope and shared schema config."""

from typing import Generic, Literal, TypeVar

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

T = TypeVar("T")


class CamelModel(BaseModel):
    """Accepts snake_case or camelCase input; serializes camelCase."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Envelope(BaseModel, Generic[T]):
    """Success envelope: `{status: "success", data, message}`."""

    status: Literal["success"] = "success"
    data: T | None = None
    message: str = ""


class MessageEnvelope(BaseModel):
    status: Literal["success"] = "success"
    message: str


def success(data: T, message: str = "") -> Envelope[T]:
    return Envelope(data=data, message=message)
