"""
Catalog file parser.

Reads a spreadsheet-style catalog (CSV or Excel) into raw rows. Every
cell comes back as text and blanks as "", so the row mapper sees exactly
what the merchant typed.
"""

from dataclasses import dataclass, field
from io import BytesIO, StringIO
from pathlib import Path
from typing import Optional, Union
import structlog

import pandas as pd

from exceptions import CatalogParseError

logger = structlog.get_logger(__name__)

EXCEL_SUFFIXES = (".xlsx", ".xlsm")


@dataclass
class CatalogParseResult:
    """Rows read from one catalog file."""
    headers: list[str] = field(default_factory=list)
    rows: list[dict[str, str]] = field(default_factory=list)

    @property
    def row_count(self) -> int:
        return len(self.rows)


def _is_excel(file: Union[str, Path, BytesIO, StringIO], filename: Optional[str]) -> bool:
    name = filename or (str(file) if isinstance(file, (str, Path)) else "")
    return name.lower().endswith(EXCEL_SUFFIXES)


def parse_catalog_file(
    file: Union[str, Path, BytesIO, StringIO],
    filename: Optional[str] = None,
) -> CatalogParseResult:
    """
    Parse a catalog upload.

    Args:
        file: File path (str/Path) or file-like object
        filename: Original upload name, used to pick CSV vs Excel for
                  file-like objects

    Returns:
        CatalogParseResult with headers in file order and one dict per row

    Raises:
        CatalogParseError: If the file cannot be read
    """
    excel = _is_excel(file, filename)
    logger.info(
        "parsing_catalog",
        file_type=type(file).__name__,
        format="excel" if excel else "csv"
    )

    try:
        if excel:
            df = pd.read_excel(file, engine="openpyxl", dtype=str)
        else:
            df = pd.read_csv(
                file,
                dtype=str,
                keep_default_na=False,
                encoding="utf-8-sig",
                skipinitialspace=False,
            )
    except pd.errors.EmptyDataError:
        logger.warning("catalog_empty")
        return CatalogParseResult()
    except Exception as e:
        logger.error("catalog_read_failed", error=str(e))
        raise CatalogParseError(
            message="Failed to read catalog file",
            details={"original_error": str(e)}
        )

    df = df.fillna("")
    headers = [str(col) for col in df.columns]
    df.columns = headers

    # Fully blank lines carry no product
    df = df[(df != "").any(axis=1)]

    result = CatalogParseResult(
        headers=headers,
        rows=df.to_dict(orient="records"),
    )

    logger.info(
        "catalog_parsed",
        headers=len(result.headers),
        rows=result.row_count
    )

    return result
