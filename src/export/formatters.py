"""Export formatting for app lists, and the matching importers.

Three formats are supported:

- ``json``: pretty-printed array of ``{"appid": ..., "name": ...}`` objects
- ``csv``: header row ``appid,name``, one row per record
- ``txt``: one line per record, ``AppID: <id> | Name: <name>``

Each ``parse_*`` function rebuilds the same records from its format's
output. The txt format is line based, so names containing newlines do
not survive it; use json or csv for those.
"""

import csv
import io
import json
import re
from typing import List, Sequence

from src.api.schemas import AppRecord

CSV_FIELDS = ["appid", "name"]
TXT_LINE = re.compile(r"^AppID: (-?\d+) \| Name: (.*)$")

MEDIA_TYPES = {
    "json": "application/json",
    "csv": "text/csv; charset=utf-8",
    "txt": "text/plain; charset=utf-8",
}


def to_json(apps: Sequence[AppRecord]) -> str:
    return json.dumps([app.model_dump() for app in apps], indent=2, ensure_ascii=False)


def to_csv(apps: Sequence[AppRecord]) -> str:
    buf = io.StringIO()
    writer = csv.DictWriter(buf, fieldnames=CSV_FIELDS, lineterminator="\n")
    writer.writeheader()
    for app in apps:
        writer.writerow(app.model_dump())
    return buf.getvalue()


def to_txt(apps: Sequence[AppRecord]) -> str:
    return "".join(f"AppID: {app.appid} | Name: {app.name}\n" for app in apps)


def parse_json(text: str) -> List[AppRecord]:
    return [AppRecord.model_validate(item) for item in json.loads(text)]


def parse_csv(text: str) -> List[AppRecord]:
    reader = csv.DictReader(io.StringIO(text))
    return [AppRecord(appid=int(row["appid"]), name=row["name"]) for row in reader]


def parse_txt(text: str) -> List[AppRecord]:
    apps = []
    for line in text.split("\n"):
        if not line:
            continue
        match = TXT_LINE.match(line)
        if not match:
            raise ValueError(f"Not an export line: {line!r}")
        apps.append(AppRecord(appid=int(match.group(1)), name=match.group(2)))
    return apps


EXPORTERS = {
    "json": to_json,
    "csv": to_csv,
    "txt": to_txt,
}


def export_apps(apps: Sequence[AppRecord], fmt: str) -> str:
    """Render ``apps`` in the given format."""
    exporter = EXPORTERS.get(fmt)
    if not exporter:
        raise ValueError(f"Unknown export format: '{fmt}'. Available: {list(EXPORTERS.keys())}")
    return exporter(apps)


def export_filename(dataset: str, fmt: str, timestamp_ms: int) -> str:
    return f"steam-{dataset}-apps-{timestamp_ms}.{fmt}"
