from .builders import Query as Query
from .encoder import (
    PointerEncoder as PointerEncoder,
    build_parameters as build_parameters,
)
from .expressions import Conditions as Conditions, ConstraintSet as ConstraintSet
from .merge import merge_constraints as merge_constraints
from .protocols import (
    ObjectMaterializerProtocol as ObjectMaterializerProtocol,
    PointerProtocol as PointerProtocol,
    QueryExecutorProtocol as QueryExecutorProtocol,
)
from .state import QueryState as QueryState
