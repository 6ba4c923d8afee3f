"""
objectquery SDK - immutable query composition for remote object stores.

This module provides the main entry points:

- **Query**: The fluent, immutable query builder.
- **QueryClient**: The execution façade delegating to an external executor.
- **Models**: Remote objects, geo values and raw object states.

Example:
    >>> from objectquery import Query
    >>> Query("Item").where_greater_than("price", 10).limit(5).build_parameters()
    {'where': {'price': {'$gt': 10}}, 'limit': 5}
"""

import logging as _logging

# --- Builders ---
from .models.query import (
    Query as Query,
    QueryState as QueryState,
    Conditions as Conditions,
    merge_constraints as merge_constraints,
    build_parameters as build_parameters,
)

# --- Execution ---
from .comm import (
    QueryClient as QueryClient,
    QueryClientConfig as QueryClientConfig,
    CancellationToken as CancellationToken,
)

# --- Models ---
from .models import (
    GeoPoint as GeoPoint,
    GeoDistance as GeoDistance,
    ObjectState as ObjectState,
    RemoteObject as RemoteObject,
)

# --- Errors ---
from .exceptions import (
    QueryConstructionError as QueryConstructionError,
    QueryConflictError as QueryConflictError,
    QueryValidationError as QueryValidationError,
    InvalidQueryOperationError as InvalidQueryOperationError,
    ObjectNotFoundError as ObjectNotFoundError,
    QueryCancelledError as QueryCancelledError,
)

# --- Logging ---
from .logging_config import (
    setup_sdk_logging as setup_sdk_logging,
    get_logger as get_logger,
)

# Silent until the application calls setup_sdk_logging()
_logging.getLogger("objectquery").addHandler(_logging.NullHandler())
