"""Turn raw CSV text or loosely-typed JSON rows into ``BillingRecord`` objects.

CSV parsing is deliberately naive: the first line is the header, every other
non-blank line is split on commas and mapped positionally onto the header
names. Quoted values are not understood, so a value containing a comma shifts
the columns after it. Missing cells become ``""`` and unparseable numbers
become ``0``; nothing is rejected at this layer.
"""
import json
import logging
import math
import re
from collections.abc import Mapping
from typing import Any

from billintel.core.exceptions import InputError
from billintel.modules.analysis.schemas import BillingRecord

logger = logging.getLogger(__name__)

CSV_DELIMITER = ","
STRING_FIELDS = ("customer_id", "plan", "billing_date")
NUMERIC_FIELDS = ("data_used", "amount_billed")

_LINE_BREAK = re.compile(r"\r?\n")


def to_number(value: Any) -> float:
    if value is None:
        return 0.0
    if isinstance(value, bool):
        return 1.0 if value else 0.0
    if not isinstance(value, (int, float)):
        value = str(value).strip()
        # float() accepts "1_000"; plain decimal notation only
        if not value or "_" in value:
            return 0.0
    try:
        number = float(value)
    except (ValueError, OverflowError):
        return 0.0
    return number if math.isfinite(number) else 0.0


def to_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def coerce_record(raw: Mapping[str, Any]) -> BillingRecord:
    values: dict[str, Any] = {}
    for field in STRING_FIELDS:
        values[field] = to_text(raw.get(field))
    for field in NUMERIC_FIELDS:
        values[field] = to_number(raw.get(field))
    return BillingRecord(**values)


def parse_csv_rows(csv_text: str) -> list[dict[str, str]]:
    lines = _LINE_BREAK.split(csv_text.strip())
    if not lines:
        return []
    headers = [name.strip() for name in lines[0].split(CSV_DELIMITER)]

    rows: list[dict[str, str]] = []
    for line in lines[1:]:
        if not line.strip():
            continue
        cells = line.split(CSV_DELIMITER)
        rows.append({
            header: (cells[index] if index < len(cells) else "").strip()
            for index, header in enumerate(headers)
        })
    return rows


def normalize_csv(csv_text: str) -> list[BillingRecord]:
    return [coerce_record(row) for row in parse_csv_rows(csv_text)]


def normalize_json(json_data: list[Any] | str) -> list[BillingRecord]:
    payload: Any = json_data
    if isinstance(json_data, str):
        try:
            payload = json.loads(json_data)
        except json.JSONDecodeError as exc:
            raise InputError(f"json_data is not valid JSON: {exc.msg}") from exc

    if not isinstance(payload, list):
        raise InputError("json_data must be an array of billing records.")

    records: list[BillingRecord] = []
    for index, item in enumerate(payload):
        if not isinstance(item, Mapping):
            raise InputError(f"json_data[{index}] is not an object.")
        records.append(coerce_record(item))
    return records


def normalize_input(
    csv_data: str | None = None,
    json_data: list[Any] | str | None = None,
) -> list[BillingRecord]:
    """Normalize whichever payload was supplied; JSON wins when both are."""
    has_json = bool(json_data.strip()) if isinstance(json_data, str) else bool(json_data)
    has_csv = bool(csv_data and csv_data.strip())

    if has_json:
        if has_csv:
            logger.warning("Both json_data and csv_data supplied, ignoring csv_data")
        return normalize_json(json_data)
    if has_csv:
        return normalize_csv(csv_data)
    raise InputError("No billing data supplied. Provide csv_data or json_data.")
