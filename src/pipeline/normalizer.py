"""Normalization of raw catalog entries into AppRecords.

The remote catalog can repeat an appid. Duplicates are collapsed with a
plain insertion-ordered dict: the last occurrence supplies the record,
the first occurrence fixes its position in the list.
"""

import logging
from typing import Dict, Iterable, List

from src.api.schemas import AppRecord, RawAppEntry

logger = logging.getLogger(__name__)


def index_by_appid(records: Iterable[AppRecord]) -> Dict[int, AppRecord]:
    """Map appid -> record, last occurrence wins."""
    index: Dict[int, AppRecord] = {}
    for record in records:
        index[record.appid] = record
    return index


def dedupe_records(records: Iterable[AppRecord]) -> List[AppRecord]:
    """Drop repeated appids, keeping the last-seen record for each id."""
    return list(index_by_appid(records).values())


def normalize_entries(entries: Iterable[RawAppEntry]) -> List[AppRecord]:
    """Convert parsed wire entries to unique AppRecords in received order."""
    raw = [AppRecord(appid=e.appid, name=e.name) for e in entries]
    records = dedupe_records(raw)

    dropped = len(raw) - len(records)
    if dropped:
        logger.info("Collapsed %d duplicate appid entries", dropped)
    return records
