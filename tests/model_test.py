import gzip
import os
import struct
import tempfile

import numpy as np
import pandas as pd
import pytest

from caimdisc.discretization.model import DiscretizationModel, save_model, load_model, \
    SAVE_INTERNALS_FILE_NAME
from caimdisc.discretization.projection import create_result_table, filter_known_schemes, project_column
from caimdisc.discretization.scheme import DiscretizationScheme


def bits(value):
    return struct.pack('<d', value)


def make_schemes():
    first = DiscretizationScheme(0.1, 1 / 3 + 7)
    first.insert_bound(0.1 + 0.2)
    first.insert_bound(2 / 3)
    first.set_labels()
    second = DiscretizationScheme(-1e-300, 5e300)
    second.insert_bound(1e-300)
    second.set_labels(['klein', 'größer'])
    return [first, second]


def test_round_trip_is_bit_exact():
    schemes = make_schemes()
    columns, loaded = load_model(save_model(['a', 'b'], schemes))
    assert columns == ['a', 'b']
    for original, restored in zip(schemes, loaded):
        assert restored.labels == original.labels
        for i, j in zip(original.intervals, restored.intervals):
            assert bits(i.lower_bound) == bits(j.lower_bound)
            assert bits(i.upper_bound) == bits(j.upper_bound)
            assert (i.lower_inclusive, i.upper_inclusive) == (j.lower_inclusive, j.upper_inclusive)


def test_save_model_does_not_touch_schemes():
    scheme = DiscretizationScheme(0, 1)
    save_model(['a'], [scheme])
    assert scheme.labels is None
    assert scheme.column_name is None


def test_file_round_trip():
    model = DiscretizationModel(['a', 'b'], make_schemes())
    with tempfile.TemporaryDirectory() as tmp_dir:
        path = model.save(tmp_dir)
        assert os.path.basename(path) == SAVE_INTERNALS_FILE_NAME
        with gzip.open(path, 'rb') as f:
            assert f.read(1) == b'{'
        assert DiscretizationModel.load(tmp_dir) == model
        assert DiscretizationModel.load(path) == model


def test_load_missing_file():
    with tempfile.TemporaryDirectory() as tmp_dir:
        with pytest.raises(IOError):
            DiscretizationModel.load(os.path.join(tmp_dir, 'nothing.model'))


def test_mismatched_model():
    with pytest.raises(ValueError):
        DiscretizationModel(['a'], [])


def test_model_lookup():
    model = DiscretizationModel(['a', 'b'], make_schemes())
    assert model.included_column_names == ['a', 'b']
    assert model.get_scheme('b').column_name == 'b'
    assert 'a' in model
    with pytest.raises(KeyError):
        model.get_scheme('c')


def test_filter_known_schemes_follows_table_order():
    model = DiscretizationModel(['a', 'b'], make_schemes())
    known = filter_known_schemes(model, ['c', 'b', 'a'])
    assert [column for column, _ in known] == ['b', 'a']


def test_result_table():
    scheme = DiscretizationScheme(0, 10)
    scheme.insert_bound(5)
    model = DiscretizationModel(['x'], [scheme])
    X = pd.DataFrame({'x': [1.0, np.nan, 7.0], 'other': ['p', 'q', 'r']})
    Xd = create_result_table(X, model)
    assert Xd['x'].tolist()[0] == 'Interval_1'
    assert pd.isna(Xd['x'].tolist()[1])
    assert Xd['x'].tolist()[2] == 'Interval_2'
    assert Xd['other'].equals(X['other'])
    # input is not modified
    assert X['x'].tolist()[2] == 7.0


def test_project_column_rejects_unknown_policy():
    scheme = DiscretizationScheme(0, 10)
    with pytest.raises(ValueError):
        project_column([1.0], scheme, out_of_range='wrap')
