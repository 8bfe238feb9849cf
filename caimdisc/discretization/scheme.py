from bisect import bisect_left, bisect_right
from dataclasses import dataclass
from typing import List, Optional

import numpy as np

from caimdisc.discretization.errors import IllegalBoundary

DEFAULT_LABEL_PREFIX = 'Interval_'


@dataclass(frozen=True)
class Interval:
    """A contiguous piece of a column's value range."""
    lower_bound: float
    upper_bound: float
    lower_inclusive: bool = True
    upper_inclusive: bool = False

    def __post_init__(self):
        if self.lower_bound > self.upper_bound:
            raise ValueError("Lower bound {} is greater than upper bound {}"
                             .format(self.lower_bound, self.upper_bound))

    def contains(self, value: float) -> bool:
        if value < self.lower_bound or value > self.upper_bound:
            return False
        if value == self.lower_bound and not self.lower_inclusive:
            return False
        if value == self.upper_bound and not self.upper_inclusive:
            return False
        return True

    def __str__(self):
        left = '[' if self.lower_inclusive else '('
        right = ']' if self.upper_inclusive else ')'
        return '{}{} ... {}{}'.format(left, self.lower_bound, self.upper_bound, right)

    def to_dict(self):
        return {'lower_bound': self.lower_bound,
                'upper_bound': self.upper_bound,
                'lower_inclusive': self.lower_inclusive,
                'upper_inclusive': self.upper_inclusive}

    @classmethod
    def from_dict(cls, d):
        return cls(float(d['lower_bound']), float(d['upper_bound']),
                   bool(d['lower_inclusive']), bool(d['upper_inclusive']))


class DiscretizationScheme:
    """Ordered, contiguous intervals covering ``[min, max]`` of one column.

    Params
    ------
    min_value, max_value : float
        Observed range of the column. The initial scheme is the single
        interval ``[min_value, max_value]``.

    column_name : str, optional
        Name of the column the scheme applies to.

    Notes
    -----
    ``insert_bound`` is the only mutation. It splits the interval containing
    the new boundary into ``[lo, v)`` and ``[v, hi]``, the right piece keeping
    the upper inclusivity of the split interval.
    """

    def __init__(self, min_value: float, max_value: float, column_name: Optional[str] = None):
        min_value, max_value = float(min_value), float(max_value)
        self.intervals: List[Interval] = [Interval(min_value, max_value, True, True)]
        # lower bounds, kept sorted for bisection
        self._lower_bounds: List[float] = [min_value]
        self.labels: Optional[List[str]] = None
        self.column_name = column_name

    @property
    def min_value(self) -> float:
        return self.intervals[0].lower_bound

    @property
    def max_value(self) -> float:
        return self.intervals[-1].upper_bound

    @property
    def bounds(self) -> List[float]:
        """Inner boundaries separating adjacent intervals, ascending."""
        return self._lower_bounds[1:]

    def interval_count(self) -> int:
        return len(self.intervals)

    def __len__(self):
        return len(self.intervals)

    def copy(self) -> 'DiscretizationScheme':
        other = DiscretizationScheme.__new__(DiscretizationScheme)
        other.intervals = list(self.intervals)
        other._lower_bounds = list(self._lower_bounds)
        other.labels = None if self.labels is None else list(self.labels)
        other.column_name = self.column_name
        return other

    def insert_bound(self, value: float):
        value = float(value)
        if not (self.min_value < value < self.max_value):
            raise IllegalBoundary(value, "must lie strictly inside [{}, {}]"
                                  .format(self.min_value, self.max_value))
        pos = bisect_left(self._lower_bounds, value)
        if pos < len(self._lower_bounds) and self._lower_bounds[pos] == value:
            raise IllegalBoundary(value, "already a boundary of the scheme")
        index = pos - 1
        old = self.intervals[index]
        left = Interval(old.lower_bound, value, old.lower_inclusive, False)
        right = Interval(value, old.upper_bound, True, old.upper_inclusive)
        self.intervals[index:index + 1] = [left, right]
        self._lower_bounds.insert(pos, value)
        # labels no longer match the intervals
        self.labels = None

    def interval_index(self, value: float, out_of_range: str = 'clamp') -> int:
        """Index of the interval containing ``value``.

        Values below ``min_value`` or above ``max_value`` map to the first or
        last interval with ``out_of_range='clamp'`` and to -1 with
        ``out_of_range='missing'``.
        """
        if value < self.min_value or value > self.max_value:
            if out_of_range == 'missing':
                return -1
            return 0 if value < self.min_value else len(self.intervals) - 1
        return max(bisect_right(self._lower_bounds, value) - 1, 0)

    def interval_indices(self, values: np.ndarray) -> np.ndarray:
        """Vectorized ``interval_index`` with clamping; NaN maps to -1."""
        values = np.asarray(values, dtype=float)
        idx = np.searchsorted(np.asarray(self.bounds, dtype=float), values, side='right')
        idx[np.isnan(values)] = -1
        return idx

    def interval_for(self, value: float) -> Interval:
        return self.intervals[self.interval_index(value)]

    def set_labels(self, labels=None):
        """Assign one nominal label per interval (``Interval_1`` ... by default)."""
        if labels is None:
            labels = [DEFAULT_LABEL_PREFIX + str(i + 1) for i in range(len(self.intervals))]
        labels = [str(label) for label in labels]
        if len(labels) != len(self.intervals):
            raise ValueError("Expected {} labels, got {}".format(len(self.intervals), len(labels)))
        self.labels = labels
        return self

    def discrete_value_for(self, value: float, out_of_range: str = 'clamp') -> Optional[str]:
        if self.labels is None:
            self.set_labels()
        if value is None or np.isnan(value):
            return None
        index = self.interval_index(value, out_of_range=out_of_range)
        if index < 0:
            return None
        return self.labels[index]

    def __eq__(self, other):
        if not isinstance(other, DiscretizationScheme):
            return NotImplemented
        return (self.intervals == other.intervals and self.labels == other.labels
                and self.column_name == other.column_name)

    def __repr__(self):
        return 'DiscretizationScheme({!r}, {})'.format(
            self.column_name, ', '.join(str(interval) for interval in self.intervals))

    def to_dict(self):
        return {'column_name': self.column_name,
                'intervals': [interval.to_dict() for interval in self.intervals],
                'labels': self.labels}

    @classmethod
    def from_dict(cls, d):
        intervals = [Interval.from_dict(i) for i in d['intervals']]
        if not intervals:
            raise ValueError("A discretization scheme needs at least one interval")
        scheme = cls(intervals[0].lower_bound, intervals[-1].upper_bound, d.get('column_name'))
        scheme.intervals = intervals
        scheme._lower_bounds = [interval.lower_bound for interval in intervals]
        if d.get('labels') is not None:
            scheme.set_labels(d['labels'])
        return scheme
