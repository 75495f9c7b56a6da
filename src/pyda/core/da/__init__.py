"""
Data Availability (DA) layer integration.

This package provides the DA client contract, its cancellation context and
the available backends.
"""

from pyda.core.da.client import (
    BlockRetriever,
    ClientState,
    ClientStateError,
    ConfigError,
    DAClientError,
    DataAvailabilityLayerClient,
    DecodeError,
    StillProcessingError,
    TransportError,
    supports_block_retrieval,
)
from pyda.core.da.context import Context
from pyda.core.da.registry import get_client, register_client, registered_clients

__all__ = [
    "BlockRetriever",
    "ClientState",
    "ClientStateError",
    "ConfigError",
    "Context",
    "DAClientError",
    "DataAvailabilityLayerClient",
    "DecodeError",
    "StillProcessingError",
    "TransportError",
    "get_client",
    "register_client",
    "registered_clients",
    "supports_block_retrieval",
]
