"""JSON-file persistence for last-seen snapshots."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List

from openpyxl import Workbook
from openpyxl.workbook.child import INVALID_TITLE_REGEX

from .models import Listing, SiteConfig

logger = logging.getLogger(__name__)

SNAPSHOT_PREFIX = "last_seen_dogs_"
XLSX_HEADERS = ["name", "url", "reserved"]
MAX_SHEET_TITLE = 31


def resolve_data_dir(raw_path: str) -> Path:
    """Translate a DOG_LIST_DIR value into an absolute directory."""
    if not raw_path:
        raise ValueError("DOG_LIST_DIR must not be empty")

    path = Path(raw_path).expanduser()
    if not path.is_absolute():
        path = Path.cwd() / path
    return path.resolve()


def _sheet_title(site_id: str, used: set[str]) -> str:
    """Turn a site id into a valid worksheet title not already in ``used``."""
    base = INVALID_TITLE_REGEX.sub("_", site_id)
    title = base[:MAX_SHEET_TITLE]
    suffix = 1
    while title.lower() in used:
        suffix += 1
        tail = f"~{suffix}"
        title = base[:MAX_SHEET_TITLE - len(tail)] + tail
    return title


@dataclass
class SnapshotStore:
    """Stores one JSON snapshot file per monitored site."""

    directory: Path

    def path_for(self, site_id: str) -> Path:
        return self.directory / f"{SNAPSHOT_PREFIX}{site_id}.json"

    def load(self, site_id: str) -> List[Listing]:
        """Return the last saved snapshot, or an empty list on the first run."""
        path = self.path_for(site_id)
        try:
            raw = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            logger.info("No previous state file for %s at %s; assuming first run", site_id, path)
            return []

        payload = json.loads(raw)
        if not isinstance(payload, list):
            raise ValueError(f"Snapshot file {path} must contain a JSON array")

        listings: List[Listing] = []
        for idx, item in enumerate(payload):
            if not isinstance(item, dict) or not isinstance(item.get("name"), str):
                raise ValueError(f"Snapshot file {path} has a malformed entry at index {idx}: {item!r}")
            listings.append(Listing.from_dict(item))
        logger.debug("Loaded %d listings for %s from %s", len(listings), site_id, path)
        return listings

    def save(self, site_id: str, listings: Iterable[Listing]) -> None:
        path = self.path_for(site_id)
        self.directory.mkdir(parents=True, exist_ok=True)
        records = [listing.to_dict() for listing in listings]
        path.write_text(json.dumps(records, ensure_ascii=False, indent=2), encoding="utf-8")
        logger.info("Saved %d listings for %s to %s", len(records), site_id, path)

    def export_to_xlsx(self, path: Path, sites: Iterable[SiteConfig]) -> None:
        """Write every site's stored snapshot to a workbook, one sheet per site."""
        workbook = Workbook()
        workbook.remove(workbook.active)

        used_titles: set[str] = set()
        for site in sites:
            title = _sheet_title(site.id, used_titles)
            used_titles.add(title.lower())
            worksheet = workbook.create_sheet(title=title)
            worksheet.append(XLSX_HEADERS)
            for listing in self.load(site.id):
                worksheet.append([
                    listing.name,
                    listing.url,
                    listing.is_reserved(site.reserved_marker),
                ])

        if not workbook.worksheets:
            workbook.create_sheet(title="empty").append(XLSX_HEADERS)

        path.parent.mkdir(parents=True, exist_ok=True)
        workbook.save(path)
