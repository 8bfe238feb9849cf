import logging

import numpy as np
import pandas as pd

from caimdisc.discretization.model import DiscretizationModel
from caimdisc.discretization.scheme import DiscretizationScheme
from caimdisc.util.arguments import to_numeric

projection_logger = logging.getLogger("caimdisc.projection")

VALID_OUT_OF_RANGE = ('clamp', 'missing')


def project_column(values, scheme: DiscretizationScheme, out_of_range='clamp', column=None):
    """Replace numeric values by the label of their interval.

    Missing values stay missing (None). Values outside the scheme's
    ``[min, max]`` are put into the first or last interval with
    ``out_of_range='clamp'`` and become missing with ``out_of_range='missing'``.

    Returns
    -------
    labels : ndarray of dtype object and shape (n_samples,)
    """
    if out_of_range not in VALID_OUT_OF_RANGE:
        raise ValueError("Valid options for 'out_of_range' are {}. Got out_of_range={!r} instead."
                         .format(VALID_OUT_OF_RANGE, out_of_range))
    if scheme.labels is None:
        scheme.set_labels()
    values = to_numeric(values, column=column)
    missing = np.isnan(values)
    outside = ~missing & ((values < scheme.min_value) | (values > scheme.max_value))
    if outside.any():
        projection_logger.warning("Column %s: %d value(s) outside the training range [%r, %r] (%s)",
                                  column, int(outside.sum()), scheme.min_value, scheme.max_value,
                                  'clamped' if out_of_range == 'clamp' else 'set to missing')

    labels = np.asarray(scheme.labels, dtype=object)
    result = np.full(values.shape, None, dtype=object)
    keep = ~missing
    if out_of_range == 'missing':
        keep &= ~outside
    result[keep] = labels[scheme.interval_indices(values[keep])]
    return result


def filter_known_schemes(model: DiscretizationModel, columns):
    """Schemes of ``model`` whose column is in ``columns``, in ``columns`` order."""
    return [(column, model.get_scheme(column)) for column in columns if column in model]


def create_result_table(X: pd.DataFrame, model: DiscretizationModel, out_of_range='clamp') -> pd.DataFrame:
    """Copy of ``X`` with every modelled column replaced by nominal labels.

    Columns of ``X`` without a scheme are returned unchanged.
    """
    result = X.copy()
    for column, scheme in filter_known_schemes(model, X.columns):
        result[column] = pd.Series(project_column(X[column], scheme, out_of_range=out_of_range, column=column),
                                   index=X.index, dtype=object)
    return result
