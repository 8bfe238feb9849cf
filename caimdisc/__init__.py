"""
.. include:: ../readme.md
"""
# Python `caimdisc` package for supervised CAIM discretization compatible with scikit-learn.

from .discretization.boundaries import BoundaryCandidateList, ExhaustiveBoundaryGenerator, \
    ClassOptimizedBoundaryGenerator, make_boundary_generator
from .discretization.caim import CAIMDiscretizer, load_discretizer
from .discretization.errors import CAIMError, Cancelled, EmptyColumn, IllegalBoundary, UnknownColumn
from .discretization.model import DiscretizationModel, save_model, load_model
from .discretization.projection import create_result_table, project_column
from .discretization.quanta import ClassIndex, QuantaMatrix
from .discretization.scheme import DiscretizationScheme, Interval
from .discretization.search import CAIMSearch, SearchState
from .util.progress import ExecutionMonitor

DISCRETIZERS = [CAIMDiscretizer]
