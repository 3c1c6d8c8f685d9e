"""Core data models for DogWatcher."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator, List, Tuple

RESERVED_MARKER = "– RESERVED"
NAME_NOT_FOUND = "Name not found"
URL_NOT_FOUND = "URL not found"


@dataclass(frozen=True)
class Listing:
    """Represents a single dog listing scraped from an adoptions page."""

    name: str
    url: str

    def identity_key(self, marker: str = RESERVED_MARKER) -> str:
        """Name with the reservation marker removed, used to match across runs."""
        return self.name.replace(marker, "", 1).strip()

    def is_reserved(self, marker: str = RESERVED_MARKER) -> bool:
        return marker in self.name

    def to_dict(self) -> dict:
        return {"name": self.name, "url": self.url}

    @classmethod
    def from_dict(cls, data: dict) -> "Listing":
        return cls(name=data["name"], url=data.get("url", URL_NOT_FOUND))


@dataclass
class ChangeSet:
    """Holds the four-way classification of two snapshots."""

    new_entries: List[Listing] = field(default_factory=list)
    removed: List[Listing] = field(default_factory=list)
    became_reserved: List[Listing] = field(default_factory=list)
    no_longer_reserved: List[Listing] = field(default_factory=list)

    @property
    def has_changes(self) -> bool:
        return any(listings for _, listings in self.categories())

    def categories(self) -> Iterator[Tuple[str, List[Listing]]]:
        """Yield (title, listings) pairs in report order."""
        yield "New Entries", self.new_entries
        yield "Removed Entries", self.removed
        yield "Became Reserved", self.became_reserved
        yield "No Longer Reserved", self.no_longer_reserved


@dataclass(frozen=True)
class SiteConfig:
    """Describes one monitored adoptions page and how to read it."""

    id: str
    name: str
    url: str
    list_item_selector: str
    name_selector: str
    url_selector: str
    reserved_marker: str = RESERVED_MARKER


@dataclass
class SiteRunResult:
    """Outcome of processing a single site during a monitoring cycle."""

    site_id: str
    status: str
    changes: ChangeSet | None = None
    listing_count: int = 0
    notified: bool = False
    error: str | None = None
