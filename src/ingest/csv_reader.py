"""CSV source reader.

This module loads a CSV file into the table model. Headers and cells
are trimmed, blank lines are skipped, and ragged rows are rejected
with the CSV line number.
"""

from __future__ import annotations

import csv
from pathlib import Path
from typing import Sequence

from core.errors import SchemaError, SheetsIngestError
from core.table import Table, resolve_primary_key


def read_csv_table(source_path: Path, primary_key: Sequence[str] = ()) -> Table:
    """Read a CSV file into a table.

    Args:
        source_path: CSV file path.
        primary_key: Key columns as header names or index strings.

    Returns:
        Validated table.

    Raises:
        SheetsIngestError: If the file is missing, undecodable, or empty.
        SchemaError: If a row length or key column is invalid.
    """
    if not source_path.is_file():
        raise SheetsIngestError(
            f"Failed to read source at {source_path}: file does not exist. "
            "Provide an existing CSV file."
        )
    headers, rows = _read_records(source_path)
    key_indices = resolve_primary_key(headers, primary_key) if primary_key else ()
    return Table(headers=headers, rows=rows, primary_key=key_indices)


def _read_records(
    source_path: Path,
) -> tuple[tuple[str, ...], tuple[tuple[str, ...], ...]]:
    """Parse header and data records.

    Args:
        source_path: CSV file path.

    Returns:
        Pair of trimmed headers and trimmed rows.

    Raises:
        SheetsIngestError: If the CSV cannot be parsed or holds no header.
        SchemaError: If a data row has the wrong number of cells.
    """
    headers: tuple[str, ...] | None = None
    rows: list[tuple[str, ...]] = []
    try:
        with source_path.open("r", encoding="utf-8-sig", newline="") as handle:
            reader = csv.reader(handle)
            for record in reader:
                if not record:
                    continue
                cells = tuple(cell.strip() for cell in record)
                if headers is None:
                    headers = cells
                    continue
                if len(cells) != len(headers):
                    raise SchemaError(
                        f"{source_path}:{reader.line_num}: row has {len(cells)} cells "
                        f"but the header has {len(headers)}. Fix the row and retry."
                    )
                rows.append(cells)
    except UnicodeDecodeError as error:
        raise SheetsIngestError(
            f"Failed to decode {source_path} as UTF-8: {error.reason}. "
            "Re-export the sheet as UTF-8 CSV."
        ) from error
    except csv.Error as error:
        raise SheetsIngestError(f"Failed to parse CSV {source_path}: {error}.") from error
    except OSError as error:
        raise SheetsIngestError(f"Failed to read source at {source_path}: {error}.") from error
    if headers is None:
        raise SheetsIngestError(
            f"Source {source_path} is empty. A CSV header row is required."
        )
    return headers, tuple(rows)
