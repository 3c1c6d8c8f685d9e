"""Core execution workflow for DogWatcher."""

from __future__ import annotations

import datetime as dt
import logging
from dataclasses import dataclass
from typing import Any, AsyncContextManager, Iterable, List, Protocol

from .diff import diff_snapshots
from .models import ChangeSet, Listing, SiteConfig, SiteRunResult
from .notifications import Notifier, notify_changes
from .store import SnapshotStore

logger = logging.getLogger(__name__)


class Observer(Protocol):
    """Anything that can open a page and read a site's listings from it."""

    def open_page(self) -> AsyncContextManager[Any]:
        ...

    async def observe(self, page: Any, site: SiteConfig) -> List[Listing]:
        ...


@dataclass
class DogWatcherRunner:
    """Coordinates load, scrape, diff, persistence and notification per site."""

    store: SnapshotStore
    observer: Observer
    notifier: Notifier | None = None

    async def run(self, sites: Iterable[SiteConfig], dry_run: bool = False) -> List[SiteRunResult]:
        """Process every site in order; a failing site never stops the rest."""
        results: List[SiteRunResult] = []
        for site in sites:
            try:
                result = await self.run_site(site, dry_run=dry_run)
            except Exception as exc:  # noqa: BLE001
                logger.exception("Monitoring failed for %s: %s", site.name, exc)
                result = SiteRunResult(site_id=site.id, status="error", error=str(exc))
            results.append(result)
        return results

    async def run_site(self, site: SiteConfig, dry_run: bool = False) -> SiteRunResult:
        """Execute a single monitoring cycle for one site."""
        logger.info("Starting monitor cycle for %s (%s)", site.name, site.url)
        executed_at = dt.datetime.now().isoformat(timespec="seconds")

        async with self.observer.open_page() as page:
            previous = self.store.load(site.id)
            current = await self.observer.observe(page, site)
            changes = diff_snapshots(previous, current, marker=site.reserved_marker)
            logger.info("%s", format_change_log(changes, site, executed_at))

            if dry_run:
                logger.info("Dry run; snapshot for %s left untouched", site.id)
                return SiteRunResult(
                    site_id=site.id,
                    status="dry_run",
                    changes=changes,
                    listing_count=len(current),
                )

            self.store.save(site.id, current)
            notified = notify_changes(self.notifier, changes, site)

        return SiteRunResult(
            site_id=site.id,
            status="success",
            changes=changes,
            listing_count=len(current),
            notified=notified,
        )


def format_change_log(changes: ChangeSet, site: SiteConfig, executed_at: str) -> str:
    """Render per-category counts and names for the run log."""
    lines = [f"--- Change Report for {site.name} ({executed_at}) ---"]
    for title, listings in changes.categories():
        lines.append(f"{title}: {len(listings)}")
        lines.extend(f"- {listing.name}" for listing in listings)
    return "\n".join(lines)
