"""
I/O helpers for the summary driver: the per-snapshot table goes to parquet
(one row per recorded sample, `cm_k`/`sm_k` moment columns), the final
RunningMoments.to_dict() summary goes to JSON.
"""

import pandas as pd
import json


def save_parquet(df, path, compression="snappy"):
    df = pd.DataFrame(df)
    df.to_parquet(path, compression=compression)
    return path


def load_parquet(path):
    return pd.read_parquet(path)


def save_json(obj, path):
    with open(path, "w") as f:
        json.dump(obj, f, indent=2)
    return path


def load_json(path):
    with open(path) as f:
        return json.load(f)
