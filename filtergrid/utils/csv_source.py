"""Read CSV files into row dictionaries for the table model."""

import csv
from pathlib import Path
from typing import Any, Dict, List, Tuple, Union

from .errors import ConfigurationError
from .log import get_logger

logger = get_logger("csv_source")

SNIFF_BYTES = 8192


def detect_delimiter(sample: str) -> str:
    """Guess the delimiter from a sample of the file"""
    sniffer = csv.Sniffer()
    try:
        dialect = sniffer.sniff(sample, delimiters=',;\t|')
        return dialect.delimiter
    except csv.Error:
        return ','  # fallback


def convert_value(value: Any) -> Any:
    """Turn numeric text into int/float so it sorts as a number"""
    if value is None:
        return None
    text = str(value).strip()
    if not text:
        return value
    try:
        return int(text)
    except ValueError:
        pass
    try:
        return float(text)
    except ValueError:
        return value


def load_rows(file_path: Union[str, Path], convert_numbers: bool = True) -> Tuple[List[str], List[Dict[str, Any]]]:
    """Load (headers, rows) from a CSV file"""
    file_path = Path(file_path)
    if not file_path.exists():
        raise ConfigurationError(f"CSV file not found: {file_path}")

    try:
        with open(file_path, 'r', encoding='utf-8-sig', newline='') as f:
            sample = f.read(SNIFF_BYTES)
            f.seek(0)
            reader = csv.DictReader(f, delimiter=detect_delimiter(sample))
            headers = list(reader.fieldnames) if reader.fieldnames else []
            rows = []
            for row_data in reader:
                clean = {}
                for header in headers:
                    raw = row_data.get(header)
                    clean[header] = convert_value(raw) if convert_numbers else raw
                rows.append(clean)
    except (OSError, UnicodeDecodeError, csv.Error) as e:
        raise ConfigurationError(f"Failed to read CSV {file_path}: {e}")

    logger.info("Loaded %d rows with %d columns from %s", len(rows), len(headers), file_path)
    return headers, rows
