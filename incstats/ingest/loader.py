# incstats/ingest/loader.py
"""
Loads weighted samples from CSV for replay. Exposes `load_samples`.
"""

import logging

import pandas as pd

from incstats.ingest.validate import validate_samples, _check_columns

logger = logging.getLogger(__name__)


def load_samples(path: str, value_col: str = "value", weight_col: str = None,
                 sort_by: str = None) -> pd.DataFrame:
    raw = pd.read_csv(path)

    # Replay order changes the running sums slightly, so allow a stable sort key.
    if sort_by is not None:
        _check_columns(raw, [sort_by])
        raw = raw.sort_values(sort_by, kind="mergesort").reset_index(drop=True)

    samples = validate_samples(raw, value_col, weight_col)
    logger.info(f"Loaded {len(samples)} samples from {path}")
    return samples
