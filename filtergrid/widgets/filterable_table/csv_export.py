#!/usr/bin/env python3
"""
CSV Export - Serialize table rows for spreadsheet applications

Output is comma separated with "\\n" line breaks and a UTF-8 byte order mark.
A field is quoted only when it contains a comma, a quote or a newline.
"""

from datetime import datetime
from pathlib import Path
from typing import Any, Optional, Sequence, Union

from filtergrid.utils.errors import ExportError
from filtergrid.utils.log import get_logger

from .table_types import ColumnDefinition, Row

logger = get_logger("export")

UTF8_BOM = "\ufeff"
DEFAULT_BASE_NAME = "export"
TIMESTAMP_FORMAT = "%Y-%m-%d_%H-%M-%S"


def format_cell(value: Any) -> str:
    """Text of a cell before quoting"""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "Yes" if value else "No"
    return str(value)


def escape_field(text: str) -> str:
    if "," in text or '"' in text or "\n" in text:
        return '"' + text.replace('"', '""') + '"'
    return text


def build_csv_content(rows: Sequence[Row], columns: Sequence[ColumnDefinition]) -> str:
    """CSV document without the byte order mark"""
    lines = [",".join(escape_field(col.label) for col in columns)]
    for row in rows:
        lines.append(",".join(escape_field(format_cell(row.get(col.key))) for col in columns))
    return "\n".join(lines)


def build_csv_document(rows: Sequence[Row], columns: Sequence[ColumnDefinition]) -> str:
    return UTF8_BOM + build_csv_content(rows, columns)


def export_file_name(base_name: Optional[str] = None, now: Optional[datetime] = None) -> str:
    """{base}_{YYYY-MM-DD_HH-mm-ss}.csv, stamped at call time unless now is given"""
    stamp = (now or datetime.now()).strftime(TIMESTAMP_FORMAT)
    return f"{base_name or DEFAULT_BASE_NAME}_{stamp}.csv"


def write_csv(rows: Sequence[Row], columns: Sequence[ColumnDefinition],
              directory: Optional[Union[str, Path]] = None, base_name: Optional[str] = None,
              now: Optional[datetime] = None) -> Path:
    """Write the CSV document to directory and return its path"""
    target_dir = Path(directory) if directory else Path.cwd()
    target_path = target_dir / export_file_name(base_name, now)

    try:
        target_dir.mkdir(parents=True, exist_ok=True)
        with open(target_path, 'w', encoding='utf-8', newline='') as f:
            f.write(build_csv_document(rows, columns))
    except OSError as e:
        raise ExportError(f"Failed to write {target_path}: {e}")

    logger.info("Exported %d rows x %d columns to %s", len(rows), len(columns), target_path)
    return target_path
