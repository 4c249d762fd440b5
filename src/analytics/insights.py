"""Read-side views over the current snapshot.

Dashboard statistics, plus the search/sort/paginate helpers behind the app
browser and the changes view. All of these operate on lists already held
in the snapshot and never touch storage.
"""

from typing import List, Sequence

from src.api.schemas import AppRecord, Snapshot, SnapshotSummary

SORT_FIELDS = ("name", "appid")


def get_summary(snapshot: Snapshot) -> SnapshotSummary:
    """Counts shown on the dashboard."""
    return SnapshotSummary(
        has_data=snapshot.has_data,
        total_apps=len(snapshot.current_list),
        added_count=len(snapshot.diff.added),
        removed_count=len(snapshot.diff.removed),
        last_updated=snapshot.last_updated,
    )


def search_apps(apps: Sequence[AppRecord], term: str) -> List[AppRecord]:
    """Case-insensitive match on name, or substring match on the appid."""
    if not term:
        return list(apps)

    needle = term.lower()
    return [
        app for app in apps
        if needle in app.name.lower() or term in str(app.appid)
    ]


def sort_apps(apps: Sequence[AppRecord], sort_by: str = "name", order: str = "asc") -> List[AppRecord]:
    """Sort by case-folded name or by appid."""
    if sort_by not in SORT_FIELDS:
        raise ValueError(f"Cannot sort by '{sort_by}'. Available: {list(SORT_FIELDS)}")

    if sort_by == "name":
        return sorted(apps, key=lambda app: (app.name.casefold(), app.appid), reverse=(order == "desc"))
    return sorted(apps, key=lambda app: app.appid, reverse=(order == "desc"))


def paginate(apps: Sequence[AppRecord], page: int = 1, limit: int = 50) -> List[AppRecord]:
    offset = (page - 1) * limit
    return list(apps[offset:offset + limit])


def get_changes(snapshot: Snapshot, kind: str) -> List[AppRecord]:
    """The added or removed entries of the last diff."""
    if kind == "added":
        return list(snapshot.diff.added)
    if kind == "removed":
        return list(snapshot.diff.removed)
    raise ValueError(f"Unknown change kind: '{kind}'. Available: ['added', 'removed']")
