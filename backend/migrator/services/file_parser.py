"""
File Parser — CSV / Excel uploads to an array of records

pandas does the byte-level parsing and dynamic typing; this module only picks
the reader from the file extension and normalises cells to plain scalars
(str, int, float, bool or None) so the profiler sees the same value kinds
whatever the source format.
"""

import io
import logging
from dataclasses import dataclass, field
from datetime import date, datetime, time
from pathlib import Path
from typing import Any, Dict, List, Optional

import numpy as np
import pandas as pd

from ..core.config import settings
from ..core.exceptions import FileParseError, FileTooLargeError, UnsupportedFormatError
from .values import canonical_number_string

logger = logging.getLogger("migrator.file_parser")

SAMPLE_DATASET_NAME = "baltimore_incidents.csv"
_BUNDLED_SAMPLE = Path(__file__).resolve().parent.parent / "sample_data" / SAMPLE_DATASET_NAME

# Only empty cells are missing; "NA", "null" and "None" stay text.
_CSV_OPTIONS = dict(
    skip_blank_lines=True,
    on_bad_lines="warn",
    keep_default_na=False,
    na_values=[""],
)

_CSV_EXTENSIONS = {"csv"}
_EXCEL_EXTENSIONS = {"xlsx", "xls"}


@dataclass
class ParsedFile:
    """A parsed upload ready for profiling."""
    file_name: str
    file_type: str
    records: List[Dict[str, Any]] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)


def file_extension(filename: str) -> str:
    if "." not in filename:
        return ""
    return filename.rsplit(".", 1)[-1].lower()


def parse_file(content: bytes, filename: str) -> ParsedFile:
    """
    Parse uploaded bytes into records.

    Args:
        content: Raw file bytes
        filename: Original file name; its extension selects the reader

    Returns:
        ParsedFile with one dict per data row

    Raises:
        UnsupportedFormatError: Extension is not csv/xlsx/xls (or disabled)
        FileTooLargeError: Content exceeds MAX_FILE_SIZE_MB
        FileParseError: The reader rejected the content
    """
    extension = file_extension(filename)
    supported = {fmt.lower() for fmt in settings.SUPPORTED_FORMATS}
    if extension not in supported or extension not in (_CSV_EXTENSIONS | _EXCEL_EXTENSIONS):
        raise UnsupportedFormatError(
            f"Unsupported file format: .{extension}",
            {"file_name": filename, "supported_formats": sorted(supported)},
        )

    max_bytes = settings.MAX_FILE_SIZE_MB * 1024 * 1024
    if len(content) > max_bytes:
        raise FileTooLargeError(
            f"File exceeds the {settings.MAX_FILE_SIZE_MB} MB upload limit",
            {"file_name": filename, "size_bytes": len(content)},
        )

    logger.info("Parsing %s (%d bytes, type=%s)", filename, len(content), extension)
    if extension in _CSV_EXTENSIONS:
        df, warnings = _read_csv(content, filename)
    else:
        df, warnings = _read_excel(content, filename)

    records = dataframe_to_records(df)
    logger.info("Parsed %s: %d records, %d columns", filename, len(records), len(df.columns))
    return ParsedFile(file_name=filename, file_type=extension, records=records, warnings=warnings)


def load_sample_dataset(path: Optional[str] = None) -> ParsedFile:
    """Parse the bundled sample incidents CSV (or SAMPLE_DATA_PATH when set)."""
    sample_path = Path(path or settings.SAMPLE_DATA_PATH or _BUNDLED_SAMPLE)
    try:
        content = sample_path.read_bytes()
    except OSError as e:
        raise FileParseError(
            f"Sample dataset unavailable: {sample_path.name}",
            {"path": str(sample_path)},
        ) from e
    return parse_file(content, sample_path.name)


def dataframe_to_records(df: pd.DataFrame) -> List[Dict[str, Any]]:
    """Convert a DataFrame to records with plain-Python cell values."""
    columns = [str(c) for c in df.columns]
    records = []
    for row in df.itertuples(index=False, name=None):
        records.append({col: to_scalar(val) for col, val in zip(columns, row)})
    return records


def to_scalar(value: Any) -> Any:
    """Normalise one cell: NaN/NaT -> None, inf -> text, numpy -> Python, timestamps -> ISO text."""
    if value is None:
        return None
    if isinstance(value, (pd.Timestamp, datetime, date, time)):
        if pd.isna(value):
            return None
        return value.isoformat()
    if isinstance(value, (float, np.floating)) and np.isnan(value):
        return None
    if isinstance(value, np.bool_):
        return bool(value)
    if isinstance(value, (float, np.floating)) and np.isinf(value):
        # JSON has no infinity; keep it as text like any other unparsed cell
        return canonical_number_string(value)
    if isinstance(value, np.integer):
        return int(value)
    if isinstance(value, np.floating):
        return float(value)
    if value is pd.NA or value is pd.NaT:
        return None
    return value


# ─── Readers ─────────────────────────────────────────────────────────────


def _read_csv(content: bytes, filename: str):
    encoding = _detect_encoding(content[:8192])
    try:
        df = pd.read_csv(io.BytesIO(content), encoding=encoding, **_CSV_OPTIONS)
    except pd.errors.EmptyDataError:
        logger.warning("CSV %s has no columns", filename)
        return pd.DataFrame(), ["File contains no data"]
    except (pd.errors.ParserError, UnicodeDecodeError, ValueError) as e:
        logger.error("CSV parsing failed for %s: %s", filename, e)
        raise FileParseError(f"Could not parse CSV file: {e}", {"file_name": filename}) from e

    if _has_non_finite(df):
        df = _restore_non_finite_text(df, content, encoding)

    warnings = []
    if df.empty:
        warnings.append("File contains a header but no data rows")
    return df, warnings


def _read_excel(content: bytes, filename: str):
    try:
        df = pd.read_excel(io.BytesIO(content), sheet_name=0)
    except ImportError:
        raise
    except Exception as e:
        logger.error("Excel parsing failed for %s: %s", filename, e)
        raise FileParseError(f"Could not parse Excel file: {e}", {"file_name": filename}) from e

    df = df.dropna(how="all")
    warnings = []
    if df.empty:
        warnings.append("First sheet contains no data rows")
    return df, warnings


def _detect_encoding(sample: bytes) -> str:
    """Detect text encoding from sample bytes."""
    for encoding in ("utf-8-sig", "utf-8", "latin-1", "cp1252"):
        try:
            sample.decode(encoding)
            return encoding
        except (UnicodeDecodeError, LookupError):
            continue
    return "utf-8"


def _has_non_finite(df: pd.DataFrame) -> bool:
    numeric = df.select_dtypes(include="number")
    if numeric.empty:
        return False
    return bool(np.isinf(numeric.to_numpy(dtype=float, na_value=np.nan)).any())


def _restore_non_finite_text(df: pd.DataFrame, content: bytes, encoding: str) -> pd.DataFrame:
    """Put the source text back into cells pandas read as +/-inf."""
    raw = pd.read_csv(io.BytesIO(content), encoding=encoding, dtype=str, **_CSV_OPTIONS)
    df = df.copy()
    for column in df.select_dtypes(include="number").columns:
        mask = np.isinf(df[column].to_numpy(dtype=float, na_value=np.nan))
        if mask.any():
            logger.debug("Column '%s' holds %d non-finite cells; keeping them as text", column, mask.sum())
            df[column] = df[column].astype(object)
            df.loc[mask, column] = raw.loc[mask, column]
    return df
