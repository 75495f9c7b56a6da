"""
Data availability layer client contract.

Every DA backend implements DataAvailabilityLayerClient. Backends that can
also read block data back from the DA layer implement BlockRetriever, which
callers detect with supports_block_retrieval() before syncing from DA.
"""
import enum
import logging
from abc import ABC, abstractmethod
from typing import Optional

from pyda.core.da.context import Context
from pyda.core.db.kvstore import KVStore
from pyda.core.models.block import Block
from pyda.core.models.result import (
    ResultCheckBlock,
    ResultRetrieveBlocks,
    ResultSubmitBlock,
)


class DAClientError(Exception):
    """Base exception for DA client failures."""

    pass


class ConfigError(DAClientError):
    """Raised by init when the backend configuration is malformed."""

    pass


class TransportError(DAClientError):
    """Raised when a call to the DA layer fails at the network level."""

    pass


class DecodeError(DAClientError):
    """Raised when the DA layer returns a payload that cannot be decoded."""

    def __init__(self, message: str, payload: bytes = b""):
        super().__init__(message)
        self.payload = payload


class StillProcessingError(DAClientError):
    """Raised when the DA layer keeps reporting a height as processing
    until the retry budget is used up."""

    pass


class ClientStateError(DAClientError):
    """Raised when lifecycle methods are called out of order."""

    pass


class ClientState(enum.Enum):
    NEW = "new"
    INITIALIZED = "initialized"
    STARTED = "started"
    STOPPED = "stopped"


class DataAvailabilityLayerClient(ABC):
    """
    Generic interface for DA layer block submission, with lifecycle methods.

    init is the only method allowed to raise on bad input. Every other
    operation reports failures through its result's code and message.
    """

    state: ClientState = ClientState.NEW

    @abstractmethod
    def init(
        self,
        namespace_id: bytes,
        config: bytes,
        kv_store: Optional[KVStore],
        logger: Optional[logging.Logger],
    ) -> None:
        """Read configuration and wire in resources. Called exactly once.

        Raises:
            ConfigError: If config cannot be parsed
        """

    @abstractmethod
    def start(self) -> None:
        """Start operation. Called once, after init."""

    @abstractmethod
    def stop(self) -> None:
        """Release resources. Called once, when the client is no longer needed."""

    @abstractmethod
    def submit_block(self, ctx: Context, block: Block) -> ResultSubmitBlock:
        """Serialize block and submit it to the DA layer."""

    @abstractmethod
    def check_block_availability(self, ctx: Context, da_height: int) -> ResultCheckBlock:
        """Query the DA layer for availability of data at da_height."""

    def _transition(self, expected: ClientState, target: ClientState) -> None:
        if self.state != expected:
            raise ClientStateError(
                f"cannot move to {target.value}: client is {self.state.value}, "
                f"expected {expected.value}"
            )
        self.state = target

    def _not_running_reason(self) -> Optional[str]:
        """Why operations must be refused right now, or None when serving."""
        if self.state == ClientState.STOPPED:
            return "client is stopped"
        if self.state == ClientState.NEW:
            return "client is not initialized"
        return None


class BlockRetriever(ABC):
    """
    Optional capability of clients that can read block data back from the
    DA layer, which makes them usable for block synchronization.
    """

    @abstractmethod
    def retrieve_blocks(self, ctx: Context, da_height: int) -> ResultRetrieveBlocks:
        """Return the blocks stored at da_height on the DA layer."""


def supports_block_retrieval(client: DataAvailabilityLayerClient) -> bool:
    return isinstance(client, BlockRetriever)


def height_error(da_height: int) -> str:
    """Reason da_height cannot be queried, empty if it is valid."""
    return "" if da_height >= 0 else f"invalid DA height {da_height}"


def call_timeout(ctx: Context, default: float) -> float:
    """Timeout for the next outbound call, bounded by ctx.

    Raises:
        TransportError: If ctx is done or has no time left for the call
    """
    timeout = ctx.timeout(default)
    if timeout <= 0 or ctx.done():
        raise TransportError(ctx.error() or "context deadline exceeded")
    return timeout
