"""
Process-boundary exposure of the DA layer client.
"""

from pyda.server.client import (
    RemoteBlockRetrieverClient,
    RemoteDAClient,
    RPCConnection,
    connect,
)
from pyda.server.rpc import RPCError
from pyda.server.service import DAServer, DAService

__all__ = [
    "DAServer",
    "DAService",
    "RPCConnection",
    "RPCError",
    "RemoteBlockRetrieverClient",
    "RemoteDAClient",
    "connect",
]
