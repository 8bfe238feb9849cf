import logging
from enum import Enum
from typing import List, Optional, Tuple

import numpy as np
from joblib import Parallel, delayed

from caimdisc.discretization.boundaries import BoundaryCandidateList
from caimdisc.discretization.errors import EmptyColumn, IllegalBoundary
from caimdisc.discretization.quanta import QuantaMatrix
from caimdisc.discretization.scheme import DiscretizationScheme
from caimdisc.util.progress import ExecutionMonitor, _counter

search_logger = logging.getLogger("caimdisc.search")


class SearchState(Enum):
    SEARCHING = 'searching'
    CONVERGED = 'converged'


def _score_boundary(scheme, boundary, values, class_codes, n_classes):
    tentative = scheme.copy()
    tentative.insert_bound(boundary)
    return QuantaMatrix(tentative, n_classes).count_data(values, class_codes).calculate_caim()


class CAIMSearch:
    """Greedy CAIM boundary insertion for one column.

    Each pass scores every remaining candidate by inserting it into a copy of
    the current scheme. The first candidate with the highest CAIM is kept and
    accepted while the CAIM improves or fewer boundaries than class labels
    have been inserted.

    Params
    ------
    values : array-like of shape (n_samples,)
        Column values, NaN for missing.

    class_codes : array-like of shape (n_samples,)
        Class index per row, -1 for a missing label.

    n_classes : int
        Number of class labels of the column.

    candidates : BoundaryCandidateList
        Candidate boundaries; accepted nodes are removed from it.

    n_jobs : int, optional
        joblib workers for scoring the candidates of one pass.
    """

    def __init__(self, values, class_codes, n_classes: int, candidates: BoundaryCandidateList,
                 column_name: Optional[str] = None, n_jobs: Optional[int] = None):
        self.values = np.asarray(values, dtype=float)
        self.class_codes = np.asarray(class_codes, dtype=np.int64)
        self.n_classes = n_classes
        self.candidates = candidates
        self.column_name = column_name
        self.n_jobs = n_jobs

        usable = ~np.isnan(self.values) & (self.class_codes >= 0)
        if not usable.any():
            raise EmptyColumn(column_name)
        self.scheme = DiscretizationScheme(self.values[usable].min(), self.values[usable].max(),
                                           column_name=column_name)
        self.state = SearchState.SEARCHING
        self.global_caim = 0.0
        self.current_caim = 0.0
        self.inserted_bound_count = 0
        self.history: List[Tuple[float, float]] = []

    def _keep_searching(self) -> bool:
        return self.current_caim > self.global_caim or self.inserted_bound_count < self.n_classes

    def _score_all(self):
        nodes = list(self.candidates.nodes())
        if self.n_jobs is None or self.n_jobs == 1 or len(nodes) < 2:
            scores = [_score_boundary(self.scheme, value, self.values, self.class_codes, self.n_classes)
                      for _, value in _counter(nodes, countevery=1000, logger=search_logger)]
        else:
            scores = Parallel(n_jobs=self.n_jobs)(
                delayed(_score_boundary)(self.scheme, value, self.values, self.class_codes, self.n_classes)
                for _, value in nodes)
        return nodes, scores

    def step(self, monitor: Optional[ExecutionMonitor] = None) -> SearchState:
        """One outer iteration of the search."""
        if self.state is SearchState.CONVERGED:
            return self.state
        if not self._keep_searching():
            self.state = SearchState.CONVERGED
            return self.state
        if monitor is not None:
            monitor.check_cancelled()

        nodes, scores = self._score_all()
        self.current_caim = 0.0
        best_node = None
        for (node, _), caim in zip(nodes, scores):
            # strict comparison keeps the first of equal scores
            if caim > self.current_caim:
                self.current_caim = caim
                best_node = node

        if best_node is None:
            self.state = SearchState.CONVERGED
            return self.state

        if self._keep_searching():
            boundary = self.candidates.value(best_node)
            n_intervals = self.scheme.interval_count()
            self.scheme.insert_bound(boundary)
            if self.scheme.interval_count() != n_intervals + 1:
                raise IllegalBoundary(boundary, "insertion did not add an interval")
            self.candidates.remove(best_node)
            self.global_caim = self.current_caim
            self.inserted_bound_count += 1
            self.history.append((boundary, self.current_caim))
            search_logger.debug("Column %s: inserted boundary %r (CAIM %0.6f)",
                                self.column_name, boundary, self.current_caim)
            if monitor is not None:
                monitor.set_progress(min(self.inserted_bound_count / max(self.n_classes, 1), 1.0),
                                     "Inserted bound {}".format(self.inserted_bound_count))
        else:
            self.state = SearchState.CONVERGED
        return self.state

    def run(self, monitor: Optional[ExecutionMonitor] = None) -> DiscretizationScheme:
        while self.step(monitor) is SearchState.SEARCHING:
            pass
        if monitor is not None:
            monitor.set_progress(1.0)
        return self.scheme
