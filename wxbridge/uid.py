"""Chat identifiers combining a WeChat uin with a user/group type tag."""

from __future__ import annotations

from dataclasses import dataclass

SEP_UID = "\x01"
USER_TYPE = "u"
GROUP_TYPE = "g"


@dataclass(frozen=True)
class UID:
    """A WeChat identifier with its kind (user or group)."""

    uin: str = ""
    uid_type: str = ""

    @classmethod
    def new_user(cls, uin: str) -> UID:
        return cls(uin=uin, uid_type=USER_TYPE)

    @classmethod
    def new_group(cls, uin: str) -> UID:
        return cls(uin=uin, uid_type=GROUP_TYPE)

    @classmethod
    def parse(cls, text: str) -> UID:
        """Parse the ``<uin><SEP><type>`` form produced by ``str()``."""
        parts = text.split(SEP_UID)
        if len(parts) != 2:
            raise ValueError(f"failed to parse UID: {text}")
        uin, uid_type = parts
        return cls(uin=uin, uid_type=uid_type)

    def is_user(self) -> bool:
        return self.uid_type == USER_TYPE

    def is_group(self) -> bool:
        return self.uid_type == GROUP_TYPE

    def is_empty(self) -> bool:
        return not self.uid_type

    def __str__(self) -> str:
        return f"{self.uin}{SEP_UID}{self.uid_type}"