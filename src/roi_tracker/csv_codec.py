"""CSV import/export for task collections."""

import asyncio
import logging
import math
from collections.abc import Iterable, Iterator
from datetime import date
from pathlib import Path

from roi_tracker.collection import coerce_number, generate_id, utc_timestamp
from roi_tracker.errors import CsvFormatError, FileUnreadableError
from roi_tracker.metrics import compute_roi
from roi_tracker.models import Priority, Status, Task

logger = logging.getLogger(__name__)

HEADERS: tuple[str, ...] = (
    "Title",
    "Description",
    "Revenue",
    "Time Taken",
    "ROI",
    "Priority",
    "Status",
    "Notes",
    "Created At",
    "Updated At",
)
UNTITLED = "Untitled Task"

_NEEDS_QUOTING = (",", '"', "\n", "\r")


def escape_field(value: str) -> str:
    """Quote a field if it contains a comma, quote or line break."""
    if any(ch in value for ch in _NEEDS_QUOTING):
        return '"' + value.replace('"', '""') + '"'
    return value


def format_number(value: float) -> str:
    """Canonical decimal text: integral values drop the fraction (50000, 11666.67)."""
    if math.isfinite(value) and float(value).is_integer():
        return str(int(value))
    return repr(float(value))


def encode(tasks: Iterable[Task]) -> str:
    """Serialize tasks to CSV text with a header line.

    Args:
        tasks: Tasks to export

    Returns:
        CSV document, lines joined by newline
    """
    lines = [",".join(HEADERS)]
    for task in tasks:
        row = [
            escape_field(task.title),
            escape_field(task.description),
            format_number(task.revenue),
            format_number(task.time_taken),
            format_number(task.roi),
            str(task.priority),
            str(task.status),
            escape_field(task.notes),
            escape_field(task.created_at),
            escape_field(task.updated_at),
        ]
        lines.append(",".join(row))
    return "\n".join(lines)


def split_records(text: str) -> Iterator[str]:
    """Split a document into records, keeping line breaks inside quoted fields.

    Raises:
        CsvFormatError: If a quoted field is never closed
    """
    current: list[str] = []
    in_quotes = False
    for ch in text:
        if ch == '"':
            # A doubled quote toggles twice, so quote state stays correct
            in_quotes = not in_quotes
            current.append(ch)
        elif ch == "\n" and not in_quotes:
            yield "".join(current).removesuffix("\r")
            current = []
        else:
            current.append(ch)

    if in_quotes:
        raise CsvFormatError("Unterminated quoted field")
    if current:
        yield "".join(current).removesuffix("\r")


def parse_row(row: str) -> list[str]:
    """Split one record into trimmed fields, honoring quotes.

    A quote toggles quoted mode; inside quoted mode a doubled quote is a
    literal quote. Commas only separate fields outside quoted mode.
    """
    fields: list[str] = []
    current: list[str] = []
    in_quotes = False
    i = 0
    while i < len(row):
        ch = row[i]
        if ch == '"':
            if in_quotes and row[i + 1 : i + 2] == '"':
                current.append('"')
                i += 1
            else:
                in_quotes = not in_quotes
        elif ch == "," and not in_quotes:
            fields.append("".join(current).strip())
            current = []
        else:
            current.append(ch)
        i += 1

    fields.append("".join(current).strip())
    return fields


def normalize_priority(value: str) -> Priority:
    """Case-insensitive priority lookup, defaulting to medium."""
    try:
        return Priority(value.strip().lower())
    except ValueError:
        return Priority.MEDIUM


def normalize_status(value: str) -> Status:
    """Case-insensitive status lookup, defaulting to pending."""
    try:
        return Status(value.strip().lower())
    except ValueError:
        return Status.PENDING


def _row_to_task(values: list[str], now: str) -> Task:
    """Build a task from parsed CSV fields with best-effort defaults."""

    def field(index: int) -> str:
        return values[index] if index < len(values) else ""

    revenue = max(coerce_number(field(2)), 0.0)
    time_taken = coerce_number(field(3))
    created_at = field(8) or now
    updated_at = field(9) or now

    return Task(
        id=generate_id(),
        title=field(0) or UNTITLED,
        description=field(1),
        revenue=revenue,
        time_taken=time_taken,
        # ROI column is ignored; it may be stale or edited by hand
        roi=compute_roi(revenue, time_taken),
        priority=normalize_priority(field(5)),
        status=normalize_status(field(6)),
        notes=field(7),
        created_at=created_at,
        updated_at=max(updated_at, created_at),
    )


def decode(text: str) -> list[Task]:
    """Parse CSV text into tasks.

    The first non-blank record is the header and is skipped. Every row gets a
    new ID and a recomputed ROI.

    Args:
        text: CSV document

    Returns:
        Decoded tasks, in file order

    Raises:
        CsvFormatError: If a quoted field is never closed
    """
    records = [record for record in split_records(text) if record.strip()]
    if len(records) < 2:
        return []

    now = utc_timestamp()
    return [_row_to_task(parse_row(record), now) for record in records[1:]]


def export_filename(today: date | None = None) -> str:
    """Export filename embedding the date, e.g. tasks-2024-01-15.csv."""
    return f"tasks-{(today or date.today()).isoformat()}.csv"


def _read_text(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise FileUnreadableError(f"Failed to read file: {path.name}") from e


def parse_document(text: str) -> list[Task]:
    """Decode a user-supplied document, rejecting empty or garbled input.

    Raises:
        CsvFormatError: If the document is empty, binary or malformed
    """
    if not text.strip():
        raise CsvFormatError("Document is empty")
    if "\x00" in text:
        raise CsvFormatError("Document contains binary data")
    return decode(text)


async def read_csv_file(path: Path) -> list[Task]:
    """Read and decode a CSV file without blocking the event loop.

    Args:
        path: File to import

    Returns:
        All decoded tasks

    Raises:
        FileUnreadableError: If the file cannot be read as UTF-8 text
        CsvFormatError: If the content cannot be parsed
    """
    text = await asyncio.to_thread(_read_text, path)
    tasks = parse_document(text)
    logger.info(f"[CsvCodec] Decoded {len(tasks)} tasks from {path.name}")
    return tasks


async def write_csv_file(tasks: Iterable[Task], directory: Path, today: date | None = None) -> Path:
    """Write an export under a dated filename and return its path."""
    path = directory / export_filename(today)
    content = encode(tasks)
    await asyncio.to_thread(path.write_text, content, encoding="utf-8")
    logger.info(f"[CsvCodec] Exported tasks to {path}")
    return path
