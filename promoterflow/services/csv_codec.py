"""Schedule CSV codec - quoted-field tolerant encode/decode for bulk import and export."""

from typing import Any, Iterable, Mapping, Optional, Sequence

from promoterflow.models.activity import SCHEDULED_STATUS
from promoterflow.utils.errors import SchemaError
from promoterflow.utils.ids import generate_id

SCHEDULE_COLUMNS = (
    "id",
    "promoterId",
    "date",
    "time",
    "community",
    "objective",
    "status",
    "place",
    "notes",
)
REQUIRED_COLUMNS = ("promoterId", "date", "objective")

_QUOTE = '"'
_NEEDS_QUOTING = (",", '"', "\n", "\r")


def _encode_field(value: Any) -> str:
    text = "" if value is None else str(value)
    if any(ch in text for ch in _NEEDS_QUOTING):
        return _QUOTE + text.replace(_QUOTE, _QUOTE * 2) + _QUOTE
    return text


def encode(columns: Sequence[str], rows: Iterable[Mapping[str, Any]]) -> str:
    """Encode rows as CSV text with the header row first.

    Fields containing a comma, quote, or line break are quoted and their
    internal quotes doubled. Missing keys encode as empty fields.
    """
    lines = [",".join(_encode_field(column) for column in columns)]
    for row in rows:
        lines.append(",".join(_encode_field(row.get(column)) for column in columns))
    return "\n".join(lines) + "\n"


def _flush_row(rows: list[list[str]], row: list[str]) -> None:
    # Entirely blank rows are dropped
    if any(field.strip() for field in row):
        rows.append(row)


def tokenize(text: str) -> list[list[str]]:
    """Split CSV text into rows of raw field strings.

    Single pass with an ``in_quotes`` flag. Inside quotes a doubled quote is a
    literal quote; otherwise a quote toggles quoting. Commas and line breaks
    only separate outside quotes, and CRLF counts as one terminator.
    """
    if text.startswith("\ufeff"):
        text = text[1:]

    rows: list[list[str]] = []
    row: list[str] = []
    field: list[str] = []
    in_quotes = False
    i = 0
    length = len(text)

    while i < length:
        ch = text[i]
        if ch == _QUOTE:
            if in_quotes and i + 1 < length and text[i + 1] == _QUOTE:
                field.append(_QUOTE)
                i += 2
                continue
            in_quotes = not in_quotes
        elif ch == "," and not in_quotes:
            row.append("".join(field))
            field = []
        elif ch in ("\r", "\n") and not in_quotes:
            row.append("".join(field))
            field = []
            _flush_row(rows, row)
            row = []
            if ch == "\r" and i + 1 < length and text[i + 1] == "\n":
                i += 1
        else:
            field.append(ch)
        i += 1

    if field or row:
        row.append("".join(field))
        _flush_row(rows, row)

    return rows


def _mint_row_id(taken: set[str]) -> str:
    row_id = generate_id("csv-")
    while row_id in taken:
        row_id = generate_id("csv-")
    return row_id


def decode_schedule(text: str) -> list[dict[str, str]]:
    """Decode schedule CSV text into row mappings keyed by ``SCHEDULE_COLUMNS``.

    Raises:
        SchemaError: if any of ``promoterId``, ``date``, ``objective`` is
            absent from the header. ``SchemaError.missing`` lists exactly the
            absent columns.
    """
    table = tokenize(text)
    if not table:
        raise SchemaError(list(REQUIRED_COLUMNS))

    column_index: dict[str, int] = {}
    for position, name in enumerate(table[0]):
        column_index.setdefault(name.strip(), position)

    missing = [column for column in REQUIRED_COLUMNS if column not in column_index]
    if missing:
        raise SchemaError(missing)

    taken: set[str] = set()
    decoded: list[dict[str, str]] = []
    for raw in table[1:]:
        row: dict[str, str] = {}
        for column in SCHEDULE_COLUMNS:
            position: Optional[int] = column_index.get(column)
            row[column] = raw[position] if position is not None and position < len(raw) else ""

        if not row["status"].strip():
            row["status"] = SCHEDULED_STATUS
        if not row["id"].strip():
            row["id"] = _mint_row_id(taken)
        taken.add(row["id"])
        decoded.append(row)

    return decoded


def encode_schedule(rows: Iterable[Mapping[str, Any]]) -> str:
    """Encode schedule rows with the full exchange header."""
    return encode(SCHEDULE_COLUMNS, rows)
