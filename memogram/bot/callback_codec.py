"""Inline keyboard action payloads and their callback_data encoding.

The whole UI session (which page is shown, how to get back, which memo is
open) travels inside Telegram's callback_data, which is limited to 64 bytes.
Payloads are serialized as compact JSON, base64-encoded, and degraded step by
step when they do not fit:

1. full payload
2. payload without its history stack
3. bare action tag (handlers treat a missing memo id as an expired action)
"""

import base64
import json
import logging
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_serializer, field_validator

from ..models import Visibility

logger = logging.getLogger(__name__)

CALLBACK_DATA_LIMIT = 64

# One letter per level so a 22 character memo uid still fits the budget.
VISIBILITY_CODES = {
    Visibility.PUBLIC: "U",
    Visibility.PROTECTED: "R",
    Visibility.PRIVATE: "P",
}
VISIBILITY_BY_CODE = {code: visibility for visibility, code in VISIBILITY_CODES.items()}


class BaseAction(BaseModel):
    """Fields shared by every action: position in the memo list."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    token: str | None = Field(default=None, alias="t")
    history: tuple[str, ...] = Field(default=(), alias="h")


class ListAction(BaseAction):
    """Show a page of memos."""

    action: Literal["list"] = Field(default="list", alias="a")


class DetailAction(BaseAction):
    """Open a memo."""

    action: Literal["detail"] = Field(default="detail", alias="a")
    memo_id: str | None = Field(default=None, alias="i")


class VisibilityAction(BaseAction):
    """Change the visibility of a memo."""

    action: Literal["vis"] = Field(default="vis", alias="a")
    memo_id: str | None = Field(default=None, alias="i")
    visibility: Visibility | None = Field(default=None, alias="v")

    @field_validator("visibility", mode="before")
    @classmethod
    def _from_code(cls, value: Any) -> Any:
        return VISIBILITY_BY_CODE.get(value, value) if isinstance(value, str) else value

    @field_serializer("visibility")
    def _to_code(self, value: Visibility | None) -> str | None:
        return VISIBILITY_CODES[value] if value else None


class PinAction(BaseAction):
    """Toggle the pinned flag of a memo."""

    action: Literal["pin"] = Field(default="pin", alias="a")
    memo_id: str | None = Field(default=None, alias="i")


ActionPayload = Annotated[
    Union[ListAction, DetailAction, VisibilityAction, PinAction],
    Field(discriminator="action"),
]

_payload_adapter: TypeAdapter[Any] = TypeAdapter(ActionPayload)


def _to_wire(payload: BaseAction) -> dict[str, Any]:
    data = payload.model_dump(mode="json", by_alias=True, exclude_defaults=True)
    data.pop("a", None)
    return {"a": getattr(payload, "action"), **data}


def _encode(data: dict[str, Any]) -> str:
    raw = json.dumps(data, separators=(",", ":")).encode("utf-8")
    return base64.b64encode(raw).decode("ascii")


def encode_callback(payload: BaseAction, limit: int = CALLBACK_DATA_LIMIT) -> str:
    """Encode an action for use as callback_data.

    Args:
        payload: Action to encode.
        limit: Maximum encoded length.

    Returns:
        Base64 token no longer than limit, degraded if necessary.
    """
    encoded = _encode(_to_wire(payload))
    if len(encoded) <= limit:
        return encoded

    if payload.history:
        encoded = _encode(_to_wire(payload.model_copy(update={"history": ()})))
        if len(encoded) <= limit:
            logger.debug("Dropped history from %s callback payload", getattr(payload, "action"))
            return encoded

    logger.debug("Collapsed %s callback payload to its tag", getattr(payload, "action"))
    return _encode({"a": getattr(payload, "action")})


def decode_callback(data: str) -> ListAction | DetailAction | VisibilityAction | PinAction | None:
    """Decode callback_data back into an action.

    Returns:
        The decoded action, or None if data is not a valid payload.
    """
    try:
        raw = base64.b64decode(data, validate=True)
        return _payload_adapter.validate_json(raw)
    except ValueError as e:
        logger.debug(f"Rejected callback data {data!r}: {e}")
        return None
