"""Basic contact information."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class ContactInfo:
    """A contact's uin, display name and remark."""

    uin: str = ""
    name: str = ""
    remark: str = ""