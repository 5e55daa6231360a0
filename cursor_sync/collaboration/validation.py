"""
Payload validation for client-to-server messages.

Every check here is pure: a payload either parses into its model or it
does not. Callers decide what to log; nothing is reported to the client.
"""
import math
from typing import Annotated, Any, Optional, Type, TypeVar, Union

from pydantic import (
    AfterValidator,
    AliasChoices,
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    StringConstraints,
    ValidationError,
    ValidationInfo,
)

from ..core.config import Settings, get_settings

PayloadT = TypeVar("PayloadT", bound=BaseModel)


def _require_number(value: Any) -> Any:
    # bool is an int subclass but never a coordinate
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError("must be a number")
    if isinstance(value, float) and not math.isfinite(value):
        raise ValueError("must be finite")
    return value


def _within_bounds(value: Union[int, float], info: ValidationInfo) -> Union[int, float]:
    # Bounds come from the server that is validating, not the process default
    settings = (info.context or {}).get("settings") or get_settings()
    if not settings.coord_min <= value <= settings.coord_max:
        raise ValueError(f"outside [{settings.coord_min}, {settings.coord_max}]")
    return value


Number = Annotated[Union[int, float], BeforeValidator(_require_number)]
Coordinate = Annotated[Union[int, float], BeforeValidator(_require_number), AfterValidator(_within_bounds)]
ObjectId = Annotated[str, StringConstraints(min_length=1, max_length=128)]
DisplayName = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=64)]


class _Payload(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)


class CursorMovePayload(_Payload):
    """Throttled position report."""
    x: Coordinate
    y: Coordinate
    timestamp: Number = Field(validation_alias=AliasChoices("timestamp", "ts"))
    seq: Number


class JoinPayload(_Payload):
    display_name: DisplayName = Field(validation_alias=AliasChoices("displayName", "display_name", "name"))


class PickupPayload(_Payload):
    object_id: ObjectId = Field(alias="objectId")


class ObjectMovePayload(_Payload):
    object_id: ObjectId = Field(alias="objectId")
    x: Coordinate
    y: Coordinate


class DropPayload(ObjectMovePayload):
    pass


def parse_payload(
    model: Type[PayloadT],
    data: Any,
    settings: Optional[Settings] = None
) -> Optional[PayloadT]:
    """Parse ``data`` into ``model``; ``None`` when it is malformed or out of ``settings`` bounds."""
    if not isinstance(data, dict):
        return None
    try:
        return model.model_validate(data, context={"settings": settings})
    except ValidationError:
        return None


def validate_position_update(payload: Any, settings: Optional[Settings] = None) -> bool:
    """
    Check a cursor_move payload.

    Rejects non-numeric or out-of-bounds coordinates and a missing or
    non-numeric ``seq`` or ``timestamp``.
    """
    return parse_payload(CursorMovePayload, payload, settings) is not None
