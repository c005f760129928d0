"""
CSV file emission.

Rows are dicts; the header is the union of their keys in first-seen
order, optionally renamed through a display-name mapping. Quoting
follows the csv module's minimal dialect, so fields with commas,
quotes or newlines survive a round trip through any standard reader.

Filenames follow:
    <data-type-slug>-<YYYY-MM-DD>[-approved|-unmasked][-<request-id>].csv
"""

import csv
import io
import logging
import re
from pathlib import Path
from typing import Any, Mapping, Optional, Sequence, Union

from shared.expiry import Clock, iso_date, now_ms

from .exceptions import ExportWriteError, NoDataToExportError
from .models import EmittedFile, FileVariant

logger = logging.getLogger(__name__)


def slugify_data_type(data_type: str) -> str:
    """'Attendance Data' -> 'attendance-data'. Only [a-z0-9-] survive."""
    slug = re.sub(r"[^a-z0-9]+", "-", data_type.lower()).strip("-")
    return slug or "export"


def build_export_filename(
    data_type: str,
    timestamp_ms: int,
    variant: Optional[FileVariant] = None,
    request_id: Optional[Union[int, str]] = None,
) -> str:
    parts = [slugify_data_type(data_type), iso_date(timestamp_ms)]
    if variant is not None:
        parts.append(variant.value)
    if request_id is not None:
        parts.append(str(request_id))
    return "-".join(parts) + ".csv"


def collect_headers(records: Sequence[Mapping[str, Any]]) -> list[str]:
    keys: dict[str, None] = {}
    for record in records:
        for key in record:
            keys.setdefault(key, None)
    return list(keys)


def to_csv(
    records: Sequence[Mapping[str, Any]],
    headers: Optional[Mapping[str, str]] = None,
) -> str:
    """
    Render records as CSV text.

    Args:
        records: Rows keyed by column
        headers: Optional display names for columns (key -> header)
    """
    keys = collect_headers(records)
    headers = headers or {}

    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow([headers.get(key) or key for key in keys])
    for record in records:
        writer.writerow(["" if record.get(key) is None else record.get(key) for key in keys])
    return buffer.getvalue()


class CsvExporter:
    """Writes export files into a directory."""

    def __init__(self, output_dir: Path, clock: Clock = now_ms):
        self._output_dir = Path(output_dir)
        self._clock = clock

    @property
    def output_dir(self) -> Path:
        return self._output_dir

    def emit(
        self,
        records: Sequence[Mapping[str, Any]],
        data_type: str,
        variant: Optional[FileVariant] = None,
        request_id: Optional[Union[int, str]] = None,
        headers: Optional[Mapping[str, str]] = None,
    ) -> EmittedFile:
        """
        Write records to a new CSV file.

        Raises:
            NoDataToExportError: If there are no records
            ExportWriteError: If the directory or file cannot be written
        """
        if not records:
            raise NoDataToExportError(data_type)

        filename = build_export_filename(data_type, self._clock(), variant, request_id)
        path = self._output_dir / filename
        try:
            self._output_dir.mkdir(parents=True, exist_ok=True)
            path.write_text(to_csv(records, headers), encoding="utf-8", newline="")
        except OSError as e:
            logger.error(f"Failed to write {path}: {e}")
            raise ExportWriteError(str(path), e.strerror or str(e))

        logger.info(f"Exported {len(records)} {data_type} records to {path}")
        return EmittedFile(path=path, row_count=len(records))
