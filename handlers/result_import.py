import logging

import pandas as pd
from typing import List, Tuple

from handlers.result_models import ResultRecord

logger = logging.getLogger(__name__)

# ------------------------
# CSV helpers (admin upload)
# ------------------------

_NO_ALIASES = ("student_no", "id", "number", "رقم")


def _normalise_cols(df: pd.DataFrame) -> pd.DataFrame:
    df = df.copy()
    df.columns = [str(c).strip().lower() for c in df.columns]
    # allow other spellings of the student number column
    if "no" not in df.columns:
        for alias in _NO_ALIASES:
            if alias in df.columns:
                df = df.rename(columns={alias: "no"})
                break
    return df


def read_csv_upload(uploaded_file) -> pd.DataFrame:
    df = pd.read_csv(uploaded_file, encoding="utf-8-sig")
    return _normalise_cols(df)


def validate_results_csv(df: pd.DataFrame) -> pd.DataFrame:
    required = {"no", "name", "category", "grade"}
    missing = required - set(df.columns)
    if missing:
        raise ValueError(f"Missing columns: {sorted(missing)}. Expected: no, name, category, grade.")
    return df[["no", "name", "category", "grade"]].copy()


def _clean_category(value):
    if pd.isna(value):
        return None
    text = str(value).strip()
    # "5.0" from a numeric column is the same category as "5"
    try:
        number = float(text)
    except ValueError:
        return text or None
    return str(int(number)) if number.is_integer() else text


def _clean_grade(value):
    grade = pd.to_numeric(value, errors="coerce")
    if pd.isna(grade):
        return None
    return float(grade)


def _clean_no(value):
    """Student number as a positive int, None when empty; ValueError otherwise."""
    if pd.isna(value):
        return None
    try:
        number = float(str(value).strip())
    except ValueError:
        raise ValueError(f"invalid student number {value!r}") from None
    if not number.is_integer() or number <= 0:
        raise ValueError(f"invalid student number {value!r}")
    return int(number)


def parse_results(df: pd.DataFrame) -> Tuple[List[ResultRecord], List[str]]:
    """
    Turn the validated frame into records.

    Rows without a name are dropped silently. Rows with a bad student number
    are skipped and described in the second list by their line in the file.
    """
    rows, skipped = [], []
    for idx, row in df.iterrows():
        name = row.get("name")
        if pd.isna(name) or not str(name).strip():
            continue
        # header is line 1
        line = idx + 2
        try:
            no = _clean_no(row.get("no"))
        except ValueError as e:
            logger.warning("Skipping results row %d: %s", line, e)
            skipped.append(f"line {line}: {e}")
            continue
        rows.append(ResultRecord(
            identifier=no,
            name=str(name).strip(),
            category=_clean_category(row.get("category")),
            grade=_clean_grade(row.get("grade")),
        ))
    return rows, skipped


def load_results_csv(uploaded_file) -> Tuple[List[ResultRecord], List[str]]:
    return parse_results(validate_results_csv(read_csv_upload(uploaded_file)))
