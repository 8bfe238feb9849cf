'''
Quanta matrix and CAIM criterion.

**Reference:**
Kurgan, Lukasz A., and Krzysztof J. Cios. "CAIM discretization algorithm."
IEEE Transactions on Knowledge and Data Engineering 16.2 (2004): 145-153.
'''
from typing import Dict, Sequence

import numpy as np

from caimdisc.discretization.scheme import DiscretizationScheme


class ClassIndex:
    """Immutable mapping between class labels and row indices of the quanta matrix.

    Labels are sorted so the same set of labels always yields the same index.
    """

    def __init__(self, labels: Sequence[str]):
        self.labels = tuple(sorted(set(str(label) for label in labels)))
        self._label_to_index: Dict[str, int] = {label: i for i, label in enumerate(self.labels)}

    def __len__(self):
        return len(self.labels)

    def __contains__(self, label):
        return label in self._label_to_index

    def index_of(self, label: str) -> int:
        return self._label_to_index[label]

    def encode(self, labels: Sequence[str]) -> np.ndarray:
        """Integer codes of ``labels``; unknown labels get -1."""
        return np.array([self._label_to_index.get(label, -1) for label in labels], dtype=np.int64)


class QuantaMatrix:
    """Contingency table of class label x interval counts for one scheme.

    Params
    ------
    scheme : DiscretizationScheme
        Tentative or final scheme whose intervals form the columns.

    n_classes : int
        Number of class labels (rows of the matrix).
    """

    def __init__(self, scheme: DiscretizationScheme, n_classes: int):
        self.scheme = scheme
        self.n_classes = n_classes
        self.counts = np.zeros((n_classes, scheme.interval_count()), dtype=np.int64)

    def count_data(self, values: np.ndarray, class_codes: np.ndarray) -> 'QuantaMatrix':
        """Fill the matrix with a single pass over the column.

        Rows with a missing value or without a class code (-1) are skipped.
        """
        values = np.asarray(values, dtype=float)
        class_codes = np.asarray(class_codes)
        usable = ~np.isnan(values) & (class_codes >= 0)
        intervals = self.scheme.interval_indices(values[usable])
        flat = class_codes[usable] * self.counts.shape[1] + intervals
        self.counts = np.bincount(flat, minlength=self.counts.size) \
            .reshape(self.counts.shape).astype(np.int64)
        return self

    @property
    def interval_sums(self) -> np.ndarray:
        return self.counts.sum(axis=0)

    @property
    def class_sums(self) -> np.ndarray:
        return self.counts.sum(axis=1)

    @property
    def total(self) -> int:
        return int(self.counts.sum())

    def _squared_max_ratio_sum(self) -> float:
        maxima = self.counts.max(axis=0) if self.n_classes > 0 else np.zeros(self.counts.shape[1])
        sums = self.interval_sums
        total = 0.0
        for m, s in zip(maxima.tolist(), sums.tolist()):
            # empty intervals contribute nothing
            if s > 0:
                total += float(m) * float(m) / float(s)
        return total

    def calculate_caim(self) -> float:
        """CAIM = (1 / R) * sum_r max_r ** 2 / M_r over non-empty intervals."""
        return self._squared_max_ratio_sum() / self.counts.shape[1]

    def normalized_caim(self) -> float:
        """Sum of ``max_r ** 2 / M_r`` divided by the number of counted rows.

        Lies in ``[0, 1]`` and equals 1 exactly when every non-empty interval
        holds a single class.
        """
        total = self.total
        if total == 0:
            return 0.0
        return self._squared_max_ratio_sum() / total

    def __repr__(self):
        return 'QuantaMatrix(intervals={}, classes={}, total={})'.format(
            self.counts.shape[1], self.n_classes, self.total)
