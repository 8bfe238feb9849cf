import gzip
import json
import os
from typing import List, Sequence, Tuple

from caimdisc.discretization.scheme import DiscretizationScheme

SAVE_INTERNALS_FILE_NAME = 'Binning.model'
FORMAT_VERSION = 1


class DiscretizationModel:
    """Learned discretization schemes keyed by the column they apply to.

    Params
    ------
    column_names : sequence of str
        Included columns, in the order they were discretized.

    schemes : sequence of DiscretizationScheme
        One finished scheme (intervals and labels) per column.
    """

    def __init__(self, column_names: Sequence[str] = (), schemes: Sequence[DiscretizationScheme] = ()):
        if len(column_names) != len(schemes):
            raise ValueError("Got {} column names for {} schemes".format(len(column_names), len(schemes)))
        self.column_names = [str(c) for c in column_names]
        self.schemes = list(schemes)
        for name, scheme in zip(self.column_names, self.schemes):
            scheme.column_name = name
            if scheme.labels is None:
                scheme.set_labels()

    @property
    def included_column_names(self) -> List[str]:
        return list(self.column_names)

    def get_scheme(self, column) -> DiscretizationScheme:
        try:
            return self.schemes[self.column_names.index(str(column))]
        except ValueError:
            raise KeyError(column)

    def __contains__(self, column):
        return str(column) in self.column_names

    def __len__(self):
        return len(self.schemes)

    def __eq__(self, other):
        if not isinstance(other, DiscretizationModel):
            return NotImplemented
        return self.column_names == other.column_names and self.schemes == other.schemes

    def __repr__(self):
        return 'DiscretizationModel({})'.format(self.column_names)

    def to_dict(self):
        return {'version': FORMAT_VERSION,
                'included_columns': self.column_names,
                'schemes': [scheme.to_dict() for scheme in self.schemes]}

    @classmethod
    def from_dict(cls, d):
        if d.get('version', FORMAT_VERSION) != FORMAT_VERSION:
            raise ValueError("Unsupported model version {}".format(d.get('version')))
        schemes = [DiscretizationScheme.from_dict(s) for s in d['schemes']]
        return cls(d['included_columns'], schemes)

    def save(self, path):
        """Write the model as gzip compressed JSON.

        ``path`` may be a directory, in which case the file is named
        ``Binning.model``.
        """
        if os.path.isdir(path):
            path = os.path.join(path, SAVE_INTERNALS_FILE_NAME)
        with gzip.open(path, 'wb') as f:
            f.write(save_model(self.column_names, self.schemes))
        return path

    @classmethod
    def load(cls, path):
        if os.path.isdir(path):
            path = os.path.join(path, SAVE_INTERNALS_FILE_NAME)
        if not os.path.exists(path):
            raise IOError('Internal model could not be loaded, file "{}" does not exist.'
                          .format(os.path.abspath(path)))
        with gzip.open(path, 'rb') as f:
            columns, schemes = load_model(f.read())
        return cls(columns, schemes)


def save_model(columns: Sequence[str], schemes: Sequence[DiscretizationScheme]) -> bytes:
    """Serialize columns and schemes; floats keep their exact binary value."""
    model = DiscretizationModel(columns, [scheme.copy() for scheme in schemes])
    # json writes floats with repr, which round-trips exactly
    return json.dumps(model.to_dict(), allow_nan=False).encode('utf-8')


def load_model(blob: bytes) -> Tuple[List[str], List[DiscretizationScheme]]:
    model = DiscretizationModel.from_dict(json.loads(blob.decode('utf-8')))
    return model.column_names, model.schemes
