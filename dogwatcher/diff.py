"""Diff utilities for comparing scraped snapshots."""

from __future__ import annotations

from typing import Dict, Iterable

from .models import RESERVED_MARKER, ChangeSet, Listing


def _index_by_key(listings: Iterable[Listing], marker: str) -> Dict[str, Listing]:
    # Duplicate keys: the last listing wins, the first position is kept.
    return {listing.identity_key(marker): listing for listing in listings}


def diff_snapshots(
    previous: Iterable[Listing],
    current: Iterable[Listing],
    marker: str = RESERVED_MARKER,
) -> ChangeSet:
    """Classify new, removed and reservation-changed listings.

    Listings are matched by their identity key, so toggling the reservation
    marker is seen as a state change rather than a removal plus an addition.
    A listing missing from ``current`` is only ever reported as removed,
    whatever its reservation state was.
    """
    previous_map = _index_by_key(previous, marker)
    current_map = _index_by_key(current, marker)
    changes = ChangeSet()

    for key, listing in current_map.items():
        before = previous_map.get(key)
        if before is None:
            changes.new_entries.append(listing)
        elif not before.is_reserved(marker) and listing.is_reserved(marker):
            changes.became_reserved.append(listing)

    for key, before in previous_map.items():
        listing = current_map.get(key)
        if listing is None:
            changes.removed.append(before)
        elif before.is_reserved(marker) and not listing.is_reserved(marker):
            changes.no_longer_reserved.append(listing)

    return changes
