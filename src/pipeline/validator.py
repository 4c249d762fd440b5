"""Sanity checks for fetched catalogs.

An empty or sharply shrunken catalog is still applied, but it is an
implausible real-world event and usually points at an upstream problem,
so it is flagged for the caller and logged.
"""

from typing import List, Sequence

from src.api.schemas import AppRecord

# Flag a fetch that lost more than this fraction of the previous catalog
SHRINK_THRESHOLD = 0.5


def is_empty_fetch(fetched: Sequence[AppRecord]) -> bool:
    return len(fetched) == 0


def check_fetch(previous: Sequence[AppRecord], fetched: Sequence[AppRecord]) -> List[str]:
    """Return a list of issues found with a fetch result. Empty means clean."""
    if is_empty_fetch(fetched):
        if previous:
            return [f"Catalog returned no apps; all {len(previous)} known apps would be reported as removed"]
        return ["Catalog returned no apps"]

    issues = []
    if previous and len(fetched) < len(previous) * (1 - SHRINK_THRESHOLD):
        issues.append(
            f"Catalog shrank from {len(previous)} to {len(fetched)} apps "
            f"(more than {int(SHRINK_THRESHOLD * 100)}% fewer)"
        )

    unnamed = sum(1 for app in fetched if not app.name)
    if unnamed == len(fetched):
        issues.append("No apps in the catalog have a name")

    return issues
