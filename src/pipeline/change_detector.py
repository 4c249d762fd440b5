"""Change detection between catalog snapshots.

Compares the previously stored app list against a freshly fetched one,
identifying added and removed apps by appid alone. A changed name under
the same appid is neither an addition nor a removal.
"""

from typing import Dict, Sequence

from src.api.schemas import AppRecord, DiffResult
from src.pipeline.normalizer import index_by_appid


def diff_app_lists(
    previous: Sequence[AppRecord],
    current: Sequence[AppRecord],
) -> DiffResult:
    """Diff two app lists to find added and removed records.

    Args:
        previous: Records from the last stored snapshot.
        current: Records from the current fetch.

    Returns:
        DiffResult whose ``added`` holds records of ``current`` with no
        matching appid in ``previous``, and whose ``removed`` holds records
        of ``previous`` with no matching appid in ``current``.
    """
    previous_map = index_by_appid(previous)
    current_map = index_by_appid(current)

    return DiffResult(
        added=[app for appid, app in current_map.items() if appid not in previous_map],
        removed=[app for appid, app in previous_map.items() if appid not in current_map],
    )


def build_change_summary(diff: DiffResult, current: Sequence[AppRecord]) -> Dict[str, int]:
    """Summarize a diff into counts for logging and the dashboard."""
    total = len(index_by_appid(current))
    return {
        "added_count": len(diff.added),
        "removed_count": len(diff.removed),
        "retained_count": total - len(diff.added),
        "total_count": total,
    }
