from typing import Any

import numpy as np
import pandas as pd


def is_missing(value: Any) -> bool:
    """Return whether given cell value should be treated as missing

    Args:
        value (Any): cell value

    Returns:
        bool: True for None, NaN and pandas NA values
    """
    if value is None:
        return True
    if isinstance(value, str):
        return False
    return bool(pd.isna(value))


def get_numerical_mask(df: pd.DataFrame) -> np.ndarray:
    """Return mask of numerical columns in given dataframe. Column is numerical if
    every non-missing value in it could be parsed as a real number.

    Args:
        df (pd.DataFrame): DataFrame

    Returns:
        np.ndarray: boolean mask, True for numerical columns
    """
    mask: list[bool] = []
    for column_name in df.columns:
        column: pd.Series = df[column_name]
        present: pd.Series = column[column.notna()]
        if pd.api.types.is_bool_dtype(present):
            mask.append(False)
            continue
        parsed: pd.Series = pd.to_numeric(present, errors="coerce")
        mask.append(bool(parsed.notna().all()))
    return np.array(mask, dtype=bool)
