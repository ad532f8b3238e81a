"""Third-party protocol lookup payloads for the application service API."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

PROTOCOL = "wechat"


def _get(record: Any, name: str, default: Any = None) -> Any:
    """Read a field from a mapping or an object with attributes."""
    if isinstance(record, Mapping):
        return record.get(name, default)
    return getattr(record, name, default)


@dataclass
class ThirdPartyFieldType:
    field_type: str
    placeholder: str

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.field_type, "placeholder": self.placeholder}


@dataclass
class ThirdPartyInstance:
    network_id: str
    bot_user_id: str
    desc: str
    icon: str | None = None
    fields: dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "network_id": self.network_id,
            "bot_user_id": self.bot_user_id,
            "desc": self.desc,
            "icon": self.icon,
            "fields": dict(self.fields),
        }


@dataclass
class ThirdPartyProtocol:
    user_fields: list[str]
    location_fields: list[str]
    field_types: dict[str, ThirdPartyFieldType]
    instances: list[ThirdPartyInstance]

    def to_dict(self) -> dict[str, Any]:
        return {
            "user_fields": list(self.user_fields),
            "location_fields": list(self.location_fields),
            "field_types": {name: ft.to_dict() for name, ft in self.field_types.items()},
            "instances": [instance.to_dict() for instance in self.instances],
        }


@dataclass
class ThirdPartyLocation:
    alias: str
    protocol: str
    fields: dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {"alias": self.alias, "protocol": self.protocol, "fields": dict(self.fields)}


@dataclass
class ThirdPartyUser:
    userid: str
    protocol: str
    fields: dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {"userid": self.userid, "protocol": self.protocol, "fields": dict(self.fields)}


@dataclass
class ThirdPartyNetwork:
    name: str
    protocol: str
    fields: dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "protocol": self.protocol, "fields": dict(self.fields)}


def protocol_payload(bot_user_id: str, domain: str) -> ThirdPartyProtocol:
    """Describe the WeChat protocol and the bridge's single instance."""
    return ThirdPartyProtocol(
        user_fields=["user_id"],
        location_fields=["chat_id"],
        field_types={
            "chat_id": ThirdPartyFieldType("text", "WeChat chat id"),
            "user_id": ThirdPartyFieldType("text", "WeChat user id"),
        },
        instances=[
            ThirdPartyInstance(
                network_id=PROTOCOL,
                bot_user_id=bot_user_id,
                desc="WeChat",
                icon="mxc://maunium.net/wechat",
                fields={"domain": domain},
            )
        ],
    )


def networks_for_portals(portals: Iterable[Any]) -> list[ThirdPartyNetwork]:
    """List the networks (groups and/or users) that the portals belong to.

    A portal whose uid starts with ``@@`` is a group chat. With no portals,
    a single generic ``wechat`` network is returned.
    """
    networks: list[ThirdPartyNetwork] = []
    seen: set[str] = set()
    for portal in portals:
        is_group = str(_get(portal, "uid", "")).startswith("@@")
        name = "groups" if is_group else "users"
        if name in seen:
            continue
        seen.add(name)
        networks.append(
            ThirdPartyNetwork(
                name=name,
                protocol=PROTOCOL,
                fields={"type": "group" if is_group else "user"},
            )
        )
    if not networks:
        networks.append(ThirdPartyNetwork(name=PROTOCOL, protocol=PROTOCOL))
    return networks


def locations_for_portals(
    portals: Iterable[Any], chat_filter: str | None = None
) -> list[ThirdPartyLocation]:
    """List portal rooms, optionally only those whose uid contains ``chat_filter``."""
    locations = []
    for portal in portals:
        uid = _get(portal, "uid", "")
        if chat_filter is not None and chat_filter not in uid:
            continue
        mxid = _get(portal, "mxid")
        if mxid is None:
            continue
        locations.append(
            ThirdPartyLocation(
                alias=mxid,
                protocol=PROTOCOL,
                fields={"chat_id": uid, "receiver": _get(portal, "receiver", "")},
            )
        )
    return locations


def users_for_puppets(
    puppets: Iterable[Any], user_filter: str | None, user_prefix: str, domain: str
) -> list[ThirdPartyUser]:
    """List puppets, optionally only those whose uin contains ``user_filter``.

    A puppet without a custom mxid gets ``@<prefix><uin>:<domain>``.
    """
    users = []
    for puppet in puppets:
        uin = _get(puppet, "uin", "")
        if user_filter is not None and user_filter not in uin:
            continue
        mxid = _get(puppet, "custom_mxid")
        if mxid is None:
            mxid = f"@{user_prefix}{uin}:{domain}"
        displayname = _get(puppet, "displayname")
        users.append(
            ThirdPartyUser(
                userid=mxid,
                protocol=PROTOCOL,
                fields={"uin": uin, "displayname": displayname or ""},
            )
        )
    return users