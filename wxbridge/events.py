"""Matrix event and request bodies exchanged with the homeserver."""

from __future__ import annotations

import dataclasses
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

HTML_FORMAT = "org.matrix.custom.html"
DEFAULT_ROOM_VERSION = "9"


def _mapping(data: object, what: str) -> Mapping[str, Any]:
    if not isinstance(data, Mapping):
        raise ValueError(f"{what} must be a JSON object")
    return data


def _require_str(data: Mapping[str, Any], key: str) -> str:
    value = data.get(key)
    if not isinstance(value, str):
        raise ValueError(f"missing or invalid field {key!r}")
    return value


def _optional_str(data: Mapping[str, Any], key: str) -> str | None:
    value = data.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValueError(f"field {key!r} must be a string")
    return value


def _is_int(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _optional_int(data: Mapping[str, Any], key: str) -> int | None:
    value = data.get(key)
    if value is None:
        return None
    if not _is_int(value):
        raise ValueError(f"field {key!r} must be an integer")
    return value


def _int_or(data: Mapping[str, Any], key: str, default: int) -> int:
    value = _optional_int(data, key)
    return default if value is None else value


def _int_map(data: Mapping[str, Any], key: str) -> dict[str, int]:
    value = data.get(key)
    if value is None:
        return {}
    value = _mapping(value, key)
    if not all(isinstance(k, str) and _is_int(v) for k, v in value.items()):
        raise ValueError(f"field {key!r} must map strings to integers")
    return dict(value)


def _list(data: Mapping[str, Any], key: str, *, required: bool) -> list[Any]:
    value = data.get(key)
    if value is None:
        if required:
            raise ValueError(f"missing field {key!r}")
        return []
    if not isinstance(value, list):
        raise ValueError(f"field {key!r} must be a list")
    return value


def _compact(values: dict[str, Any]) -> dict[str, Any]:
    return {key: value for key, value in values.items() if value is not None}


@dataclass
class RoomEvent:
    """A room event as delivered by the homeserver."""

    event_type: str
    content: Any = None
    sender: str | None = None
    room_id: str | None = None
    event_id: str | None = None
    state_key: str | None = None
    origin_server_ts: int | None = None
    unsigned: Any = None
    redacts: str | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> RoomEvent:
        data = _mapping(data, "event")
        return cls(
            event_type=_require_str(data, "type"),
            content=data.get("content"),
            sender=_optional_str(data, "sender"),
            room_id=_optional_str(data, "room_id"),
            event_id=_optional_str(data, "event_id"),
            state_key=_optional_str(data, "state_key"),
            origin_server_ts=_optional_int(data, "origin_server_ts"),
            unsigned=data.get("unsigned"),
            redacts=_optional_str(data, "redacts"),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.event_type,
            **_compact(
                {
                    "content": self.content,
                    "sender": self.sender,
                    "room_id": self.room_id,
                    "event_id": self.event_id,
                    "state_key": self.state_key,
                    "origin_server_ts": self.origin_server_ts,
                    "unsigned": self.unsigned,
                    "redacts": self.redacts,
                }
            ),
        }


@dataclass
class EphemeralEvent:
    event_type: str
    content: Any = None
    room_id: str | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> EphemeralEvent:
        data = _mapping(data, "ephemeral event")
        return cls(
            event_type=_require_str(data, "type"),
            content=data.get("content"),
            room_id=_optional_str(data, "room_id"),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.event_type,
            **_compact({"content": self.content, "room_id": self.room_id}),
        }


@dataclass
class ToDeviceEvent:
    event_type: str
    content: Any = None
    sender: str | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> ToDeviceEvent:
        data = _mapping(data, "to-device event")
        return cls(
            event_type=_require_str(data, "type"),
            content=data.get("content"),
            sender=_optional_str(data, "sender"),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.event_type,
            **_compact({"content": self.content, "sender": self.sender}),
        }


@dataclass
class Transaction:
    """A batch of events pushed to the application service."""

    events: list[RoomEvent] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Transaction:
        data = _mapping(data, "transaction")
        return cls(
            events=[RoomEvent.from_dict(item) for item in _list(data, "events", required=True)]
        )


@dataclass
class EphemeralData:
    events: list[EphemeralEvent] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> EphemeralData:
        data = _mapping(data, "ephemeral data")
        return cls(
            events=[
                EphemeralEvent.from_dict(item) for item in _list(data, "events", required=False)
            ]
        )


@dataclass
class ToDeviceData:
    events: list[ToDeviceEvent] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> ToDeviceData:
        data = _mapping(data, "to-device data")
        return cls(
            events=[
                ToDeviceEvent.from_dict(item) for item in _list(data, "events", required=False)
            ]
        )


@dataclass
class EventContent:
    """The content of an ``m.room.message`` event."""

    msgtype: str
    body: str
    formatted_body: str | None = None
    format: str | None = None
    url: str | None = None
    info: Any = None

    @classmethod
    def text(cls, body: str) -> EventContent:
        return cls(msgtype="m.text", body=body)

    @classmethod
    def text_html(cls, body: str, html: str) -> EventContent:
        return cls(msgtype="m.text", body=body, formatted_body=html, format=HTML_FORMAT)

    @classmethod
    def notice(cls, body: str) -> EventContent:
        return cls(msgtype="m.notice", body=body)

    @classmethod
    def image(cls, body: str, url: str) -> EventContent:
        return cls(msgtype="m.image", body=body, url=url)

    @classmethod
    def file(cls, body: str, url: str) -> EventContent:
        return cls(msgtype="m.file", body=body, url=url)

    @classmethod
    def video(cls, body: str, url: str) -> EventContent:
        return cls(msgtype="m.video", body=body, url=url)

    @classmethod
    def audio(cls, body: str, url: str) -> EventContent:
        return cls(msgtype="m.audio", body=body, url=url)

    def to_dict(self) -> dict[str, Any]:
        return {
            "msgtype": self.msgtype,
            "body": self.body,
            **_compact(
                {
                    "formatted_body": self.formatted_body,
                    "format": self.format,
                    "url": self.url,
                    "info": self.info,
                }
            ),
        }


@dataclass
class RoomMemberContent:
    membership: str
    displayname: str | None = None
    avatar_url: str | None = None

    @classmethod
    def join(cls) -> RoomMemberContent:
        return cls(membership="join")

    @classmethod
    def join_with(cls, displayname: str, avatar_url: str) -> RoomMemberContent:
        return cls(membership="join", displayname=displayname, avatar_url=avatar_url)

    @classmethod
    def leave(cls) -> RoomMemberContent:
        return cls(membership="leave")

    @classmethod
    def invite(cls) -> RoomMemberContent:
        return cls(membership="invite")

    def to_dict(self) -> dict[str, Any]:
        return {
            "membership": self.membership,
            **_compact({"displayname": self.displayname, "avatar_url": self.avatar_url}),
        }


@dataclass
class RoomCreateContent:
    creator: str
    room_version: str = DEFAULT_ROOM_VERSION

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> RoomCreateContent:
        data = _mapping(data, "room create content")
        version = _optional_str(data, "room_version")
        return cls(
            creator=_require_str(data, "creator"),
            room_version=DEFAULT_ROOM_VERSION if version is None else version,
        )

    def to_dict(self) -> dict[str, Any]:
        return {"creator": self.creator, "room_version": self.room_version}


@dataclass
class RoomNameContent:
    name: str

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name}


@dataclass
class RoomTopicContent:
    topic: str

    def to_dict(self) -> dict[str, Any]:
        return {"topic": self.topic}


@dataclass
class RoomAvatarContent:
    url: str

    def to_dict(self) -> dict[str, Any]:
        return {"url": self.url}


@dataclass
class PowerLevelsContent:
    """Room power levels.

    A fresh instance uses a state default of 50, while fields missing from a
    parsed document fall back to 0 for the three ``*_default`` levels and 50
    for invite, kick, ban and redact.
    """

    users_default: int = 0
    events_default: int = 0
    state_default: int = 50
    invite: int = 50
    kick: int = 50
    ban: int = 50
    redact: int = 50
    users: dict[str, int] = field(default_factory=dict)
    events: dict[str, int] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> PowerLevelsContent:
        data = _mapping(data, "power levels")
        return cls(
            users_default=_int_or(data, "users_default", 0),
            events_default=_int_or(data, "events_default", 0),
            state_default=_int_or(data, "state_default", 0),
            invite=_int_or(data, "invite", 50),
            kick=_int_or(data, "kick", 50),
            ban=_int_or(data, "ban", 50),
            redact=_int_or(data, "redact", 50),
            users=_int_map(data, "users"),
            events=_int_map(data, "events"),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "users_default": self.users_default,
            "events_default": self.events_default,
            "state_default": self.state_default,
            "invite": self.invite,
            "kick": self.kick,
            "ban": self.ban,
            "redact": self.redact,
            "users": dict(self.users),
            "events": dict(self.events),
        }


@dataclass
class CreateRoomRequest:
    """The body of a ``createRoom`` request."""

    visibility: str | None = None
    room_alias_name: str | None = None
    name: str | None = None
    topic: str | None = None
    invite: list[str] = field(default_factory=list)
    invite_3pid: list[Any] = field(default_factory=list)
    room_version: str | None = None
    preset: str | None = None
    is_direct: bool = False
    initial_state: list[Any] | None = None
    power_level_content_override: PowerLevelsContent | None = None

    @classmethod
    def private(cls, name: str) -> CreateRoomRequest:
        return cls(visibility="private", name=name, preset="private_chat", is_direct=True)

    @classmethod
    def public(cls, name: str) -> CreateRoomRequest:
        return cls(visibility="public", name=name, preset="public_chat", is_direct=False)

    def with_invite(self, user_id: str) -> CreateRoomRequest:
        """Return a copy that also invites ``user_id``."""
        return dataclasses.replace(self, invite=[*self.invite, user_id])

    def to_dict(self) -> dict[str, Any]:
        override = self.power_level_content_override
        body = _compact(
            {
                "visibility": self.visibility,
                "room_alias_name": self.room_alias_name,
                "name": self.name,
                "topic": self.topic,
            }
        )
        body["invite"] = list(self.invite)
        body["invite_3pid"] = list(self.invite_3pid)
        if self.room_version is not None:
            body["room_version"] = self.room_version
        body["preset"] = self.preset
        body["is_direct"] = self.is_direct
        if self.initial_state is not None:
            body["initial_state"] = list(self.initial_state)
        body["power_level_content_override"] = None if override is None else override.to_dict()
        return body


@dataclass
class CreateRoomResponse:
    room_id: str

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> CreateRoomResponse:
        return cls(room_id=_require_str(_mapping(data, "create room response"), "room_id"))


@dataclass
class JoinedMember:
    displayname: str | None = None
    avatar_url: str | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> JoinedMember:
        data = _mapping(data, "joined member")
        return cls(
            displayname=_optional_str(data, "display_name"),
            avatar_url=_optional_str(data, "avatar_url"),
        )


@dataclass
class JoinedMembersResponse:
    joined: dict[str, JoinedMember] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> JoinedMembersResponse:
        data = _mapping(data, "joined members response")
        if "joined" not in data:
            raise ValueError("missing field 'joined'")
        joined = _mapping(data["joined"], "joined")
        return cls(joined={user: JoinedMember.from_dict(info) for user, info in joined.items()})


@dataclass
class ProfileResponse:
    displayname: str | None = None
    avatar_url: str | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> ProfileResponse:
        data = _mapping(data, "profile response")
        return cls(
            displayname=_optional_str(data, "displayname"),
            avatar_url=_optional_str(data, "avatar_url"),
        )


@dataclass
class ErrorResponse:
    errcode: str
    error: str

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> ErrorResponse:
        data = _mapping(data, "error response")
        return cls(errcode=_require_str(data, "errcode"), error=_require_str(data, "error"))