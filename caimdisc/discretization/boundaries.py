"""Candidate boundary generation.

A candidate boundary is the midpoint between two adjacent distinct values of
a sorted column. Two policies exist:

    - exhaustive: every midpoint is a candidate
    - class optimized: only midpoints near a change of the class label
"""
import heapq
import math
from abc import ABC, abstractmethod
from typing import Iterator, List, Optional, Tuple

import numpy as np

from caimdisc.discretization.errors import EmptyColumn


class BoundaryCandidateList:
    """Doubly linked list of ascending boundary values stored in index arrays.

    Node 0 is a sentinel holding ``-inf``. Nodes are appended in ascending
    order and removed in O(1); removed nodes are never re-inserted.
    """

    HEAD = 0

    def __init__(self):
        self._values: List[float] = [-math.inf]
        self._next: List[int] = [-1]
        self._prev: List[int] = [-1]
        self._tail = self.HEAD
        self._size = 0

    def append(self, value: float) -> int:
        value = float(value)
        if value <= self._values[self._tail]:
            raise ValueError("Boundaries must be appended in strictly increasing order: "
                             "{} after {}".format(value, self._values[self._tail]))
        node = len(self._values)
        self._values.append(value)
        self._next.append(-1)
        self._prev.append(self._tail)
        self._next[self._tail] = node
        self._tail = node
        self._size += 1
        return node

    def remove(self, node: int):
        if node == self.HEAD:
            raise ValueError("The head sentinel cannot be removed")
        prev, nxt = self._prev[node], self._next[node]
        if prev == -1:
            raise ValueError("Node {} is not part of the list".format(node))
        self._next[prev] = nxt
        if nxt != -1:
            self._prev[nxt] = prev
        else:
            self._tail = prev
        self._prev[node] = self._next[node] = -1
        self._size -= 1

    def value(self, node: int) -> float:
        return self._values[node]

    def nodes(self) -> Iterator[Tuple[int, float]]:
        """Yield ``(node, value)`` pairs from head to tail, sentinel excluded."""
        node = self._next[self.HEAD]
        while node != -1:
            yield node, self._values[node]
            node = self._next[node]

    def values(self) -> List[float]:
        return [value for _, value in self.nodes()]

    def __iter__(self):
        return iter(self.values())

    def __len__(self):
        return self._size

    def __bool__(self):
        return self._size > 0

    def __repr__(self):
        return 'BoundaryCandidateList({})'.format(self.values())


def sort_rows(values, labels=None, by_label=False, in_memory=True, chunk_size=100000):
    """Row order ascending by value, ties broken by label when ``by_label``.

    With ``in_memory=False`` the rows are sorted in runs of ``chunk_size``
    which are then merged, so only one run has to be sorted at a time. Both
    strategies yield the same key order.
    """
    values = np.asarray(values, dtype=float)
    keys = [values]
    if by_label:
        # lexsort uses the last key as primary
        keys = [np.asarray(labels, dtype=object).astype(str), values]
    n = len(values)
    if in_memory or n <= chunk_size:
        return np.lexsort(keys) if by_label else np.argsort(values, kind='mergesort')

    runs = []
    for start in range(0, n, chunk_size):
        stop = min(start + chunk_size, n)
        chunk_keys = [k[start:stop] for k in keys]
        order = np.lexsort(chunk_keys) if by_label else np.argsort(values[start:stop], kind='mergesort')
        order = order + start
        if by_label:
            runs.append([(values[i], keys[0][i], i) for i in order])
        else:
            runs.append([(values[i], i) for i in order])
    return np.array([row[-1] for row in heapq.merge(*runs)], dtype=np.int64)


class BoundaryGenerator(ABC):
    """Builds a :class:`BoundaryCandidateList` from a column and its class labels.

    Params
    ------
    sort_in_memory : bool
        Sort the whole column at once or in merged runs.

    chunk_size : int
        Run length when ``sort_in_memory`` is False.
    """

    #: whether rows are additionally sorted by class label
    sort_by_label = False

    def __init__(self, sort_in_memory=True, chunk_size=100000):
        self.sort_in_memory = sort_in_memory
        self.chunk_size = chunk_size

    def generate(self, values, labels, column: Optional[str] = None) -> BoundaryCandidateList:
        """Candidates for ``values`` paired 1:1 with ``labels``.

        Rows with a missing value or a missing label are skipped. Raises
        :class:`EmptyColumn` when no row is left.
        """
        values = np.asarray(values, dtype=float)
        labels = np.asarray(labels, dtype=object)
        usable = ~np.isnan(values) & ~_is_missing(labels)
        if not usable.any():
            raise EmptyColumn(column)
        values, labels = values[usable], labels[usable]
        order = sort_rows(values, labels, by_label=self.sort_by_label,
                          in_memory=self.sort_in_memory, chunk_size=self.chunk_size)
        candidates = BoundaryCandidateList()
        self._walk(values[order], labels[order], candidates)
        return candidates

    @abstractmethod
    def _walk(self, values, labels, candidates: BoundaryCandidateList):
        """Append candidates for the sorted rows."""


class ExhaustiveBoundaryGenerator(BoundaryGenerator):
    """Every midpoint between adjacent distinct values."""

    def _walk(self, values, labels, candidates):
        last_different = values[0]
        for value in values[1:]:
            if value != last_different:
                _append_midpoint(candidates, last_different, value)
                last_different = value


class ClassOptimizedBoundaryGenerator(BoundaryGenerator):
    """Midpoints only where the class label changed since the last value change.

    Rows are sorted by value and then by label. A midpoint skipped because the
    label did not change is remembered; if the label changes inside the run of
    the following value, the remembered midpoint is emitted before the current
    one.
    """

    sort_by_label = True

    def _walk(self, values, labels, candidates):
        last_different = values[0]
        first_label_of_value = labels[0]
        skipped_value = math.nan
        class_changed = False
        for value, label in zip(values[1:], labels[1:]):
            if not class_changed and first_label_of_value != label:
                class_changed = True
                if value != last_different:
                    skipped_value = math.nan

            if value != last_different:
                if class_changed:
                    if not math.isnan(skipped_value):
                        _append_midpoint(candidates, skipped_value, last_different)
                    _append_midpoint(candidates, last_different, value)
                    skipped_value = math.nan
                else:
                    skipped_value = last_different
                last_different = value
                first_label_of_value = label
                class_changed = False


def _append_midpoint(candidates, low, high):
    # adjacent doubles have no value strictly between them
    mid = low + (high - low) / 2.0
    if math.isinf(mid):
        mid = low / 2.0 + high / 2.0
    if low < mid < high:
        candidates.append(mid)


def make_boundary_generator(class_optimized=True, sort_in_memory=True, chunk_size=100000):
    generator_cls = ClassOptimizedBoundaryGenerator if class_optimized else ExhaustiveBoundaryGenerator
    return generator_cls(sort_in_memory=sort_in_memory, chunk_size=chunk_size)


def _is_missing(labels: np.ndarray) -> np.ndarray:
    return np.array([label is None or (isinstance(label, float) and math.isnan(label))
                     for label in labels], dtype=bool)
