"""
Configuration Module.

This module defines the configuration structure used to control the behavior
of the [`QueryClient`][objectquery.comm.QueryClient].
"""

from dataclasses import dataclass
from typing import Tuple

INSTALLATION_CLASS_NAME = "_Installation"


@dataclass(frozen=True)
class QueryClientConfig:
    """
    Configuration settings for the query execution façade.

    The defaults match the remote service's conventions and rarely need to
    change; a custom instance can be passed to the
    [`QueryClient`][objectquery.comm.QueryClient] constructor.
    """

    reserved_class_names: Tuple[str, ...] = (INSTALLATION_CLASS_NAME,)
    """
    Collections that cannot be queried through the façade.

    The installation collection holds per-device records with special
    semantics on the server; querying it directly is rejected with an
    [`InvalidQueryOperationError`][objectquery.exceptions.InvalidQueryOperationError]
    before anything is sent.
    """

    object_id_key: str = "objectId"
    """The field used by [`get()`][objectquery.comm.QueryClient.get] to look up an object."""
