'''
# Discretization CAIM
Supervised discretization of continuous columns with the Class-Attribute
Interdependence Maximization criterion.

**Reference:**
Kurgan, Lukasz A., and Krzysztof J. Cios. "CAIM discretization algorithm."
IEEE Transactions on Knowledge and Data Engineering 16.2 (2004): 145-153.
'''
import logging
import time
import warnings

import numpy as np
from pandas.api.types import is_numeric_dtype
from sklearn.base import BaseEstimator, TransformerMixin
from sklearn.utils.validation import check_is_fitted

from caimdisc.discretization.boundaries import make_boundary_generator
from caimdisc.discretization.model import DiscretizationModel
from caimdisc.discretization.projection import VALID_OUT_OF_RANGE, create_result_table
from caimdisc.discretization.quanta import ClassIndex, QuantaMatrix
from caimdisc.discretization.search import CAIMSearch
from caimdisc.util.arguments import check_columns, check_dataframe, to_labels, to_numeric
from caimdisc.util.progress import ExecutionMonitor

caim_logger = logging.getLogger("caimdisc")

WARNING_NO_COLS_SELECTED = "No columns selected for binning. Output table will be the same."


class CAIMDiscretizer(TransformerMixin, BaseEstimator):
    """
    Discretize numeric columns into intervals that best separate the classes.

    Params
    ------
    dcols : list of strings
        The names of the columns to be discretized; by default,
        discretize all numeric columns in X except the class column.

    class_col : str, default=None
        Name of the class column in X. If None, the class labels are
        taken from the ``y`` argument of fit.

    class_optimized : boolean, default=True
        If True, candidate boundaries are only created where the class
        label changes. Otherwise every midpoint between adjacent distinct
        values is a candidate.

    sort_in_memory : boolean, default=True
        Sort each column at once; if False, sort runs of
        ``sort_chunk_size`` rows and merge them.

    sort_chunk_size : int, default=100000
        Number of rows per sorted run when ``sort_in_memory`` is False.

    out_of_range : {'clamp', 'missing'}, default='clamp'
        Handling of values outside the training range in transform.

        clamp
            Put the value into the first or last interval.
        missing
            Return a missing value.

    n_jobs : int, default=None
        Number of joblib workers scoring the candidate boundaries.

    verbose : boolean, default=False
        Show progress bars.

    Attributes
    ----------
    model_ : DiscretizationModel
        Learned schemes of the included columns.

    schemes_ : dict
        Column name -> DiscretizationScheme.

    caim_ : dict
        Column name -> CAIM value of the final scheme.

    search_history_ : dict
        Column name -> list of (boundary, caim) in order of acceptance.
    """

    def __init__(self, dcols=[], class_col=None, class_optimized=True,
                 sort_in_memory=True, sort_chunk_size=100000,
                 out_of_range='clamp', n_jobs=None, verbose=False):
        self.dcols = dcols
        self.class_col = class_col
        self.class_optimized = class_optimized
        self.sort_in_memory = sort_in_memory
        self.sort_chunk_size = sort_chunk_size
        self.out_of_range = out_of_range
        self.n_jobs = n_jobs
        self.verbose = verbose

    def _validate_args(self):
        """
        Check if out_of_range, sort_chunk_size arguments are valid.
        """
        if self.out_of_range not in VALID_OUT_OF_RANGE:
            raise ValueError("Valid options for 'out_of_range' are {}. Got out_of_range={!r} instead."
                             .format(VALID_OUT_OF_RANGE, self.out_of_range))
        if int(self.sort_chunk_size) < 1:
            raise ValueError("sort_chunk_size must be a positive int. Got {!r}."
                             .format(self.sort_chunk_size))

    def _resolve_dcols(self, columns, dtypes=None):
        if len(self.dcols) == 0:
            if dtypes is None:
                return []
            return [col for col in columns
                    if col != self.class_col and is_numeric_dtype(dtypes[col])]
        # the class column is never discretized
        return [col for col in self.dcols if col != self.class_col]

    def configure(self, columns, dtypes=None):
        """
        Output column types computed without data.

        Parameters
        ----------
        columns : list
            Column names of the input table.

        dtypes : mapping, optional
            Column name -> dtype, used to select the default columns.

        Returns
        -------
        column_types : dict
            Column name -> 'nominal' for discretized columns, the input
            dtype (or None) for all others.
        """
        self._validate_args()
        if self.class_col is not None:
            check_columns([self.class_col], columns, role='class column')
        dcols = self._resolve_dcols(columns, dtypes)
        check_columns(dcols, columns)
        if len(dcols) == 0:
            warnings.warn(WARNING_NO_COLS_SELECTED)
        return {col: ('nominal' if col in dcols else (None if dtypes is None else dtypes[col]))
                for col in columns}

    def fit(self, X, y=None, monitor=None):
        """
        Fit the estimator.

        Parameters
        ----------
        X : data frame of shape (n_samples, n_features)
            (Training) data to be discretized.

        y : array-like of shape (n_samples,), optional
            Class labels; required if class_col is None.

        monitor : ExecutionMonitor, optional
            Receives progress and may cancel the fit.

        Returns
        -------
        self
        """
        start_time = time.time()
        X = check_dataframe(X)
        self._validate_args()
        if self.class_col is not None:
            check_columns([self.class_col], X.columns, role='class column')
            y = X[self.class_col]
        elif y is None:
            raise ValueError("Class labels are required: pass y or set class_col.")
        if len(y) != len(X):
            raise ValueError("X has {} rows but y has {}.".format(len(X), len(y)))

        dcols = self._resolve_dcols(X.columns, X.dtypes)
        check_columns(dcols, X.columns)
        if len(dcols) == 0:
            warnings.warn(WARNING_NO_COLS_SELECTED)

        own_monitor = monitor is None
        if own_monitor:
            monitor = ExecutionMonitor(verbose=self.verbose, desc='CAIM')
        caim_logger.debug("Start discretizing.")
        monitor.set_progress(0.0, "Preparing...")
        labels = to_labels(y)
        generator = make_boundary_generator(class_optimized=self.class_optimized,
                                            sort_in_memory=self.sort_in_memory,
                                            chunk_size=int(self.sort_chunk_size))
        schemes, caims, histories = [], {}, {}
        try:
            for col in dcols:
                caim_logger.debug("Process column: %s", col)
                column_monitor = monitor.create_sub_monitor(1.0 / len(dcols))
                column_monitor.set_progress(message="Discretizing column '{}'".format(col))
                column_monitor.check_cancelled()

                values = to_numeric(X[col], column=col)
                sort_monitor = column_monitor.create_sub_monitor(0.1)
                sort_monitor.set_progress(message="Find possible boundaries.")
                candidates = generator.generate(values, labels, column=col)
                sort_monitor.set_progress(1.0)

                usable = ~np.isnan(values) & np.array([label is not None for label in labels], dtype=bool)
                class_index = ClassIndex(labels[usable])
                class_codes = class_index.encode(labels)
                class_codes[~usable] = -1

                search = CAIMSearch(values, class_codes, len(class_index), candidates,
                                    column_name=str(col), n_jobs=self.n_jobs)
                scheme = search.run(column_monitor.create_sub_monitor(0.9))
                scheme.set_labels()
                column_monitor.set_progress(1.0)

                schemes.append(scheme)
                caims[col] = QuantaMatrix(scheme, len(class_index)) \
                    .count_data(values, class_codes).calculate_caim()
                histories[col] = list(search.history)
        finally:
            if own_monitor:
                monitor.close()

        self.dcols_ = list(dcols)
        self.class_col_ = self.class_col
        self.model_ = DiscretizationModel([str(col) for col in dcols], schemes)
        self.schemes_ = dict(zip(dcols, schemes))
        self.caim_ = caims
        self.search_history_ = histories
        caim_logger.debug("Binning runtime: %0.3f sec.", time.time() - start_time)
        return self

    def transform(self, X):
        """
        Discretize the data.

        Parameters
        ----------
        X : data frame of shape (n_samples, n_features)
            Data to be discretized.

        Returns
        -------
        X_discretized : data frame
            Data with features in dcols replaced by their interval labels.
            All other features remain unchanged.
        """
        check_is_fitted(self, 'model_')
        X = check_dataframe(X)
        return create_result_table(X, self.model_, out_of_range=self.out_of_range)

    def save(self, path):
        """Save the learned model (gzip compressed JSON)."""
        check_is_fitted(self, 'model_')
        return self.model_.save(path)


def load_discretizer(path, **kwargs):
    """A fitted CAIMDiscretizer built from a saved model.

    Only the schemes are restored; ``caim_`` and ``search_history_`` are empty.
    """
    model = DiscretizationModel.load(path)
    discretizer = CAIMDiscretizer(dcols=list(model.column_names), **kwargs)
    discretizer.dcols_ = list(model.column_names)
    discretizer.class_col_ = discretizer.class_col
    discretizer.model_ = model
    discretizer.schemes_ = dict(zip(model.column_names, model.schemes))
    discretizer.caim_ = {}
    discretizer.search_history_ = {}
    return discretizer
