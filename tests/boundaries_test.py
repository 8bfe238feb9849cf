import random
import unittest

import numpy as np
import pytest

from caimdisc.discretization.boundaries import BoundaryCandidateList, ExhaustiveBoundaryGenerator, \
    ClassOptimizedBoundaryGenerator, make_boundary_generator, sort_rows
from caimdisc.discretization.errors import EmptyColumn

VALUES_A = [1, 2, 3, 4, 10, 11, 12, 13]
LABELS_A = ['A', 'A', 'A', 'A', 'B', 'B', 'B', 'B']


class TestBoundaryCandidateList(unittest.TestCase):

    def test_append_and_remove(self):
        candidates = BoundaryCandidateList()
        nodes = [candidates.append(v) for v in [1.5, 2.5, 3.5, 4.5]]
        assert len(candidates) == 4
        assert candidates.values() == [1.5, 2.5, 3.5, 4.5]

        candidates.remove(nodes[1])
        assert candidates.values() == [1.5, 3.5, 4.5]
        candidates.remove(nodes[0])
        candidates.remove(nodes[3])
        assert candidates.values() == [3.5]
        assert len(candidates) == 1

        # appending after removing the tail continues after the new tail
        candidates.append(5.5)
        assert candidates.values() == [3.5, 5.5]

    def test_remove_twice_fails(self):
        candidates = BoundaryCandidateList()
        node = candidates.append(1.0)
        candidates.remove(node)
        assert not candidates
        with pytest.raises(ValueError):
            candidates.remove(node)
        with pytest.raises(ValueError):
            candidates.remove(BoundaryCandidateList.HEAD)

    def test_values_must_increase(self):
        candidates = BoundaryCandidateList()
        candidates.append(2.0)
        with pytest.raises(ValueError):
            candidates.append(2.0)
        with pytest.raises(ValueError):
            candidates.append(1.0)


def test_scenario_a_candidates():
    exhaustive = ExhaustiveBoundaryGenerator().generate(VALUES_A, LABELS_A)
    assert exhaustive.values() == [1.5, 2.5, 3.5, 7.0, 10.5, 11.5, 12.5]

    optimized = ClassOptimizedBoundaryGenerator().generate(VALUES_A, LABELS_A)
    assert optimized.values() == [7.0]


def test_single_distinct_value_has_no_candidates():
    for class_optimized in [True, False]:
        generator = make_boundary_generator(class_optimized=class_optimized)
        candidates = generator.generate([5.0] * 6, ['A', 'B', 'A', 'B', 'B', 'A'])
        assert len(candidates) == 0


def test_missing_rows_are_skipped():
    values = [1.0, np.nan, 2.0, 3.0, np.nan]
    labels = ['A', 'B', None, 'B', 'A']
    candidates = ExhaustiveBoundaryGenerator().generate(values, labels)
    # only (1, A) and (3, B) are usable
    assert candidates.values() == [2.0]


def test_empty_column():
    with pytest.raises(EmptyColumn) as e:
        ExhaustiveBoundaryGenerator().generate([np.nan, np.nan], ['A', 'B'], column='x')
    assert "'x'" in str(e.value)
    with pytest.raises(EmptyColumn):
        ClassOptimizedBoundaryGenerator().generate([1.0, 2.0], [None, np.nan], column='x')


def test_deferred_candidate_is_emitted():
    # the label changes inside the run of value 3, so the skipped
    # midpoint 2.5 is emitted before 3.5
    values = [5, 3, 1, 4, 3, 2]
    labels = ['B', 'B', 'A', 'B', 'A', 'A']
    optimized = ClassOptimizedBoundaryGenerator().generate(values, labels)
    assert optimized.values() == [2.5, 3.5]

    exhaustive = ExhaustiveBoundaryGenerator().generate(values, labels)
    assert exhaustive.values() == [1.5, 2.5, 3.5, 4.5]


def test_label_change_within_value_run():
    values = [1, 2, 2, 3]
    labels = ['A', 'A', 'B', 'B']
    optimized = ClassOptimizedBoundaryGenerator().generate(values, labels)
    assert optimized.values() == [1.5, 2.5]


def test_midpoint_stays_between_values():
    labels = ['A', 'A', 'B', 'B']
    for class_optimized in [True, False]:
        generator = make_boundary_generator(class_optimized=class_optimized)
        # no double lies strictly between adjacent doubles
        tiny = generator.generate([1.0, 1.0, np.nextafter(1.0, 2.0), np.nextafter(1.0, 2.0)], labels)
        assert len(tiny) == 0

        huge = generator.generate([1e308, 1e308, 1.5e308, 1.5e308], labels).values()
        assert len(huge) == 1 and 1e308 < huge[0] < 1.5e308

        wide = generator.generate([-1.5e308, -1.5e308, 1.5e308, 1.5e308], labels).values()
        assert wide == [0.0]


class TestGeneratedProperties(unittest.TestCase):

    def setUp(self):
        np.random.seed(13)
        random.seed(13)
        self.values = np.round(np.random.randn(300), 1)
        self.labels = np.random.choice(['a', 'b', 'c'], size=300)

    def test_strictly_increasing_and_subset(self):
        exhaustive = ExhaustiveBoundaryGenerator().generate(self.values, self.labels).values()
        optimized = ClassOptimizedBoundaryGenerator().generate(self.values, self.labels).values()
        for candidates in [exhaustive, optimized]:
            assert all(a < b for a, b in zip(candidates[:-1], candidates[1:]))
        assert set(optimized).issubset(set(exhaustive))
        assert len(exhaustive) == len(np.unique(self.values)) - 1

    def test_sort_strategy_does_not_change_candidates(self):
        for class_optimized in [True, False]:
            in_memory = make_boundary_generator(class_optimized, sort_in_memory=True)
            chunked = make_boundary_generator(class_optimized, sort_in_memory=False, chunk_size=7)
            assert in_memory.generate(self.values, self.labels).values() == \
                chunked.generate(self.values, self.labels).values()

    def test_sort_rows_orders_by_value_then_label(self):
        for in_memory in [True, False]:
            order = sort_rows(self.values, self.labels, by_label=True, in_memory=in_memory, chunk_size=11)
            keys = [(self.values[i], self.labels[i]) for i in order]
            assert keys == sorted(keys)
            assert sorted(order.tolist()) == list(range(len(self.values)))
