import logging

import numpy as np
import pandas as pd
from pandas.api.types import is_numeric_dtype

from caimdisc.discretization.errors import UnknownColumn

arguments_logger = logging.getLogger("caimdisc.arguments")


def check_dataframe(X, feature_names=None):
    """Process X argument for fit and transform methods.
    """
    if isinstance(X, pd.DataFrame):
        return X
    if isinstance(X, pd.Series):
        return X.to_frame()
    X = np.asarray(X)
    if X.ndim == 1:
        X = X.reshape(-1, 1)
    if feature_names is None:
        feature_names = ['X' + str(i) for i in range(X.shape[1])]
    assert len(feature_names) == X.shape[1], 'feature_names should be same size as X.shape[1]'
    return pd.DataFrame(X, columns=feature_names)


def to_numeric(values, column=None):
    """Float array of ``values``; entries that cannot be converted become NaN."""
    series = pd.Series(values)
    if is_numeric_dtype(series.dtype) and not series.dtype == bool:
        return series.to_numpy(dtype=float, na_value=np.nan)
    converted = pd.to_numeric(series, errors='coerce')
    n_failed = int((converted.isna() & series.notna()).sum())
    if n_failed:
        arguments_logger.warning("Column %s: %d value(s) could not be converted to a number "
                                 "and are treated as missing", column, n_failed)
    return converted.to_numpy(dtype=float, na_value=np.nan)


def to_labels(y):
    """Class labels as an object array of str, missing labels as None."""
    series = pd.Series(y)
    missing = series.isna().to_numpy()
    labels = series.astype(object).to_numpy()
    out = np.empty(len(labels), dtype=object)
    for i, (label, is_missing) in enumerate(zip(labels, missing)):
        out[i] = None if is_missing else str(label)
    return out


def check_columns(columns, available, role='column to bin'):
    """Raise UnknownColumn for the first entry of ``columns`` not in ``available``."""
    available = set(available)
    for column in columns:
        if column not in available:
            raise UnknownColumn(column, role=role)
