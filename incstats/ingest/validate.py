import logging

import pandas as pd

logger = logging.getLogger(__name__)

# Columns the replay engine LOGICALLY needs, whatever the CSV calls them.
SAMPLE_COLUMNS = ["value", "weight"]


def _check_columns(df: pd.DataFrame, required: list):
    """Checks if a dataframe contains all required columns."""
    missing = [c for c in required if c not in df.columns]
    if missing:
        raise ValueError(f"Missing columns: {missing}")


def validate_samples(df: pd.DataFrame, value_col: str = "value", weight_col: str = None) -> pd.DataFrame:
    """
    Selects and coerces the sample columns of a raw frame.
    Without a weight column every sample gets weight 1.0.
    """
    required = [value_col] if weight_col is None else [value_col, weight_col]
    _check_columns(df, required)

    out = pd.DataFrame({"value": pd.to_numeric(df[value_col], errors="coerce").astype(float)})
    if weight_col is None:
        out["weight"] = 1.0
    else:
        out["weight"] = pd.to_numeric(df[weight_col], errors="coerce").astype(float)

    bad = out["value"].isna() | out["weight"].isna()
    if bad.any():
        logger.warning(f"Dropping {bad.sum()} rows with missing or non-numeric samples "
                       f"(first 5 indices): {list(out[bad].index[:5])}")
        out = out[~bad]

    # The moment engine does not reject negative weights; warn and keep rows.
    negative = out["weight"] < 0
    if negative.any():
        logger.warning(f"{negative.sum()} rows have negative weights, moments will be unreliable")

    if not out.empty and out["weight"].sum() <= 0:
        logger.warning("Total weight is not positive, finalized statistics will be NaN")

    return out.reset_index(drop=True)


def validate_samples_csv(path: str, value_col: str = "value", weight_col: str = None) -> pd.DataFrame:
    """
    Validates a CSV of samples. Assumes the file contains a header row.
    """
    df = pd.read_csv(path)
    return validate_samples(df, value_col, weight_col)
