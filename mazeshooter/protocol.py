"""Messages exchanged between clients and the server, and their wire encoding."""

from __future__ import annotations

import dataclasses
import enum
import json
from dataclasses import dataclass, field
from typing import Any, Union

from .components import SHARED_COMPONENTS, Despawn, Insert, InputState, Remove, Vec2
from .gamemap import Empty, Map, SolidColor, Textured, TexturedWall
from .gun import Gun


class DecodeError(ValueError):
    """Received bytes are not a valid message."""


# Messages sent by clients.


@dataclass(frozen=True)
class Ping:
    pass


@dataclass(frozen=True)
class Leave:
    pass


@dataclass(frozen=True)
class Join:
    username: str


@dataclass(frozen=True)
class UpdateInputs:
    input_state: InputState


# Messages sent by the server.


@dataclass(frozen=True)
class OwnId:
    user_id: int


@dataclass(frozen=True)
class SendMap:
    game_map: Map


@dataclass(frozen=True)
class Pong:
    pass


@dataclass
class EcsChanges:
    changes: list = field(default_factory=list)


FromClientMessage = Union[Ping, Leave, Join, UpdateInputs]
FromServerMessage = Union[OwnId, SendMap, Pong, EcsChanges]

_MESSAGE_TYPES = (Ping, Leave, Join, UpdateInputs, OwnId, SendMap, Pong, EcsChanges)

_RECORD_TYPES = {
    cls.__name__: cls
    for cls in (
        *_MESSAGE_TYPES,
        *SHARED_COMPONENTS,
        Vec2,
        InputState,
        Insert,
        Remove,
        Despawn,
        Map,
        Empty,
        SolidColor,
        TexturedWall,
    )
}
_ENUM_TYPES = {cls.__name__: cls for cls in (Gun, Textured)}
_COMPONENT_TYPES = {cls.__name__: cls for cls in SHARED_COMPONENTS}


def _to_data(value: Any) -> Any:
    if isinstance(value, enum.Enum):
        kind = type(value)
        if _ENUM_TYPES.get(kind.__name__) is kind:
            return {"$enum": kind.__name__, "member": value.name}
    elif isinstance(value, type):
        if _COMPONENT_TYPES.get(value.__name__) is value:
            return {"$type": value.__name__}
    elif value is None or isinstance(value, (bool, int, float, str)):
        return value
    elif isinstance(value, tuple):
        return {"$tuple": [_to_data(item) for item in value]}
    elif isinstance(value, list):
        return [_to_data(item) for item in value]
    elif dataclasses.is_dataclass(value):
        kind = type(value)
        if _RECORD_TYPES.get(kind.__name__) is kind:
            record = {"$": kind.__name__}
            for f in dataclasses.fields(value):
                record[f.name] = _to_data(getattr(value, f.name))
            return record
    raise TypeError(f"cannot encode {value!r}")


def _from_data(value: Any) -> Any:
    if isinstance(value, list):
        return [_from_data(item) for item in value]
    if not isinstance(value, dict):
        return value
    if "$enum" in value:
        return _ENUM_TYPES[value["$enum"]][value["member"]]
    if "$type" in value:
        return _COMPONENT_TYPES[value["$type"]]
    if "$tuple" in value:
        items = value["$tuple"]
        if not isinstance(items, list):
            raise DecodeError("tuple payload must be a list")
        return tuple(_from_data(item) for item in items)
    if "$" in value:
        kind = _RECORD_TYPES[value["$"]]
        fields = {name: _from_data(item) for name, item in value.items() if name != "$"}
        return kind(**fields)
    raise DecodeError("untagged object")


def encode(message: Any) -> bytes:
    """Serialise a client or server message to bytes."""
    if not isinstance(message, _MESSAGE_TYPES):
        raise TypeError(f"not a message: {message!r}")
    return json.dumps(_to_data(message), separators=(",", ":")).encode("utf-8")


def decode(data: bytes) -> Any:
    """Parse bytes produced by :func:`encode` back into a message."""
    try:
        message = _from_data(json.loads(data))
    except DecodeError:
        raise
    except (KeyError, TypeError, ValueError, RecursionError) as exc:
        raise DecodeError(f"invalid message: {exc}") from exc
    if not isinstance(message, _MESSAGE_TYPES):
        raise DecodeError(f"not a message: {type(message).__name__}")
    return message