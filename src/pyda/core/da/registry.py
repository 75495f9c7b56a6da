"""
Registry of DA layer client backends, selectable by name.
"""
from typing import Callable, Dict, List

from pyda.core.da.avail.client import AvailClient
from pyda.core.da.client import DataAvailabilityLayerClient
from pyda.core.da.mock import MockDAClient

_clients: Dict[str, Callable[[], DataAvailabilityLayerClient]] = {
    "avail": AvailClient,
    "mock": MockDAClient,
}


def get_client(name: str) -> DataAvailabilityLayerClient:
    """Create a new, uninitialized client for the named backend.

    Raises:
        KeyError: If no backend is registered under name
    """
    if name not in _clients:
        raise KeyError(f"unknown DA backend '{name}', available: {', '.join(registered_clients())}")
    return _clients[name]()


def register_client(name: str, factory: Callable[[], DataAvailabilityLayerClient]) -> None:
    if name in _clients:
        raise ValueError(f"DA backend already registered: {name}")
    _clients[name] = factory


def registered_clients() -> List[str]:
    return sorted(_clients)
