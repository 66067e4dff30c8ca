import io
import logging
import zipfile
from datetime import datetime, timezone

from openpyxl import Workbook, load_workbook
from openpyxl.cell.cell import ILLEGAL_CHARACTERS_RE
from openpyxl.styles import Font, PatternFill
from openpyxl.utils.exceptions import InvalidFileException

from jobtracker.errors import CorruptTableError
from jobtracker.models.application import (
    ApplicationPriority,
    ApplicationRecord,
    ApplicationStatus,
    DEFAULT_PRIORITY,
    DEFAULT_STATUS,
)

logger = logging.getLogger(__name__)

# Canonical column order on write: (header, record attribute).
COLUMNS: list[tuple[str, str]] = [
    ("id", "id"),
    ("url", "url"),
    ("linkTitle", "link_title"),
    ("company", "company"),
    ("roleTitle", "role_title"),
    ("location", "location"),
    ("status", "status"),
    ("priority", "priority"),
    ("notes", "notes"),
    ("appliedDate", "applied_date"),
    ("interviewDate", "interview_date"),
    ("offerDate", "offer_date"),
    ("rejectedDate", "rejected_date"),
    ("createdAt", "created_at"),
    ("updatedAt", "updated_at"),
]
HEADER = [name for name, _ in COLUMNS]

_DATE_ATTRS = {"applied_date", "interview_date", "offer_date", "rejected_date", "created_at", "updated_at"}
_HEADER_FONT = Font(bold=True)
_HEADER_FILL = PatternFill(fill_type="solid", fgColor="FFE0E0E0")
# ParseError and lxml XMLSyntaxError both derive from SyntaxError; pydantic
# ValidationError derives from ValueError.
_PARSE_ERRORS = (zipfile.BadZipFile, InvalidFileException, KeyError, OSError, ValueError, SyntaxError)


def _to_cell(value) -> str | None:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, (ApplicationStatus, ApplicationPriority)):
        return value.value
    return ILLEGAL_CHARACTERS_RE.sub("", str(value))


def _parse_datetime(value) -> datetime | None:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        text = str(value).strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _parse_text(value) -> str | None:
    if value is None:
        return None
    text = str(value)
    return text or None


def _coerce_enum(enum_cls, value, default):
    try:
        return enum_cls(str(value).strip().upper())
    except ValueError:
        return default


class TableCodec:
    """Converts between a list of records and xlsx bytes."""

    def __init__(self, sheet_name: str = "Applications"):
        self.sheet_name = sheet_name

    def encode(self, records: list[ApplicationRecord]) -> bytes:
        wb = Workbook()
        ws = wb.active
        ws.title = self.sheet_name
        ws.append(HEADER)
        for cell in ws[1]:
            cell.font = _HEADER_FONT
            cell.fill = _HEADER_FILL

        for row_idx, record in enumerate(records, start=2):
            for col_idx, (_, attr) in enumerate(COLUMNS, start=1):
                cell = ws.cell(row=row_idx, column=col_idx, value=_to_cell(getattr(record, attr)))
                # Free text starting with "=" must stay text, not a formula.
                if cell.data_type == "f":
                    cell.data_type = "s"

        buf = io.BytesIO()
        wb.save(buf)
        return buf.getvalue()

    def decode(self, data: bytes) -> list[ApplicationRecord]:
        if not data:
            raise CorruptTableError("Table blob is empty")
        # Sheet XML is parsed lazily, so bad content can surface while iterating rows.
        try:
            rows = self._read_rows(data)
            if not rows:
                return []
            columns = self._column_index(rows[0])
            records = []
            for values in rows[1:]:
                record = self._row_to_record(values, columns)
                if record is not None:
                    records.append(record)
            return records
        except _PARSE_ERRORS as exc:
            raise CorruptTableError(f"Table blob could not be parsed: {exc}") from exc

    def _read_rows(self, data: bytes) -> list[tuple]:
        wb = load_workbook(io.BytesIO(data), read_only=True, data_only=True)
        try:
            if self.sheet_name in wb.sheetnames:
                ws = wb[self.sheet_name]
            else:
                ws = wb.worksheets[0] if wb.worksheets else None
            if ws is None:
                return []
            return list(ws.iter_rows(values_only=True))
        finally:
            wb.close()

    def _column_index(self, header_row) -> dict[str, int]:
        by_name = {}
        for idx, name in enumerate(header_row):
            if name is not None:
                by_name[str(name).strip()] = idx
        if "id" not in by_name:
            raise CorruptTableError("Table header has no id column")
        # Unknown headers are ignored; missing ones simply read as absent.
        return {attr: by_name[header] for header, attr in COLUMNS if header in by_name}

    def _row_to_record(self, values, columns: dict[str, int]) -> ApplicationRecord | None:
        def cell(attr):
            idx = columns.get(attr)
            if idx is None or idx >= len(values):
                return None
            return values[idx]

        record_id = _parse_text(cell("id"))
        if not record_id or not record_id.strip():
            return None

        fields = {}
        for _, attr in COLUMNS:
            raw = cell(attr)
            if attr in _DATE_ATTRS:
                fields[attr] = _parse_datetime(raw)
            elif attr == "status":
                fields[attr] = _coerce_enum(ApplicationStatus, raw, DEFAULT_STATUS)
            elif attr == "priority":
                fields[attr] = _coerce_enum(ApplicationPriority, raw, DEFAULT_PRIORITY)
            else:
                fields[attr] = _parse_text(raw)

        now = datetime.now(timezone.utc)
        created_at = fields["created_at"] or fields["updated_at"] or now
        updated_at = fields["updated_at"] or created_at
        fields["created_at"] = created_at
        fields["updated_at"] = max(updated_at, created_at)
        fields["id"] = record_id.strip()
        fields["url"] = fields["url"] or ""
        return ApplicationRecord(**fields)
