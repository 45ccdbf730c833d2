"""
Record types shared by the storage backends.

URLRecord is the only persisted entity. The journal helpers define the
line format used by the file backend:

    {"short_url": "abcd1234", "original_url": "https://example.com", "user_id": "u1"}
    {"short_url": "abcd1234", "is_deleted": true}

The second form is a tombstone line appended by batch deletes.
"""

import json
from dataclasses import dataclass
from typing import Any, Dict


@dataclass
class URLRecord:
    short_code: str
    original_url: str
    owner_id: str = ""
    deleted: bool = False

    def to_journal(self) -> str:
        """Render the record as a single journal line (without the trailing newline)."""
        data: Dict[str, Any] = {"short_url": self.short_code, "original_url": self.original_url}
        if self.owner_id:
            data["user_id"] = self.owner_id
        if self.deleted:
            data["is_deleted"] = True
        return json.dumps(data, ensure_ascii=False)

    @classmethod
    def from_journal(cls, data: Dict[str, Any]) -> "URLRecord":
        """Build a record from a decoded journal object."""
        return cls(
            short_code=data["short_url"],
            original_url=data.get("original_url", ""),
            owner_id=data.get("user_id") or "",
            deleted=bool(data.get("is_deleted", False)),
        )


def tombstone_line(short_code: str) -> str:
    """Journal line marking an existing record as deleted."""
    return json.dumps({"short_url": short_code, "is_deleted": True})


@dataclass(frozen=True)
class UserURL:
    """An owner's record rendered with its externally addressable short URL."""
    short_url: str
    original_url: str


@dataclass(frozen=True)
class Stats:
    """Aggregate counts: all records (tombstones included) and distinct owners."""
    urls: int
    users: int
