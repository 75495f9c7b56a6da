"""
Mock DA layer client.

Keeps submitted blocks in the key-value store handed to init, one block per
DA height. Used for local development and tests in place of a real DA layer.
"""
import hashlib
import logging
import threading
from typing import Optional

from pydantic import BaseModel, Field, ValidationError

from pyda.core.da.client import (
    BlockRetriever,
    ClientState,
    ClientStateError,
    ConfigError,
    DataAvailabilityLayerClient,
    height_error,
)
from pyda.core.da.context import Context
from pyda.core.db.kvstore import KVStore, MemoryKVStore
from pyda.core.models.block import Block
from pyda.core.models.namespace import validate_namespace_id
from pyda.core.models.result import (
    ResultCheckBlock,
    ResultRetrieveBlocks,
    ResultSubmitBlock,
    StatusCode,
)

logger = logging.getLogger(__name__)

HEIGHT_KEY = "mock/height"
BLOCK_KEY_PREFIX = "mock/blocks/"


class MockConfig(BaseModel):
    start_height: int = Field(default=0, ge=0, description="DA height before the first submission")

    model_config = {
        "frozen": True,
    }


class MockDAClient(DataAvailabilityLayerClient, BlockRetriever):
    """In-process DA layer: every submission creates a new DA height."""

    def __init__(self):
        self.namespace_id = b""
        self.config: Optional[MockConfig] = None
        self.kv_store: Optional[KVStore] = None
        self.logger = logger
        self.state = ClientState.NEW
        self._lock = threading.Lock()

    def init(
        self,
        namespace_id: bytes,
        config: bytes,
        kv_store: Optional[KVStore] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        if self.state != ClientState.NEW:
            raise ClientStateError(f"init called on a client that is {self.state.value}")
        try:
            namespace_id = validate_namespace_id(namespace_id)
            parsed = MockConfig.model_validate_json(config) if config else MockConfig()
        except ValidationError as e:
            raise ConfigError(f"invalid mock config: {str(e)}") from e
        except ValueError as e:
            raise ConfigError(str(e)) from e

        self.namespace_id = namespace_id
        self.config = parsed
        self.kv_store = kv_store if kv_store is not None else MemoryKVStore()
        if logger is not None:
            self.logger = logger
        if not self.kv_store.has(HEIGHT_KEY):
            self.kv_store.put(HEIGHT_KEY, str(self.config.start_height).encode())
        self.state = ClientState.INITIALIZED

    def start(self) -> None:
        self._transition(ClientState.INITIALIZED, ClientState.STARTED)
        self.logger.info(f"Starting mock Data Availability Layer Client at height {self.current_height()}")

    def stop(self) -> None:
        if self.state not in (ClientState.INITIALIZED, ClientState.STARTED):
            raise ClientStateError(f"stop called on a client that is {self.state.value}")
        self.state = ClientState.STOPPED
        self.logger.info("Stopping mock Data Availability Layer Client")

    def current_height(self) -> int:
        return int(self.kv_store.get(HEIGHT_KEY) or b"0")

    def submit_block(self, ctx: Context, block: Block) -> ResultSubmitBlock:
        reason = self._not_running_reason() or ctx.error()
        if reason:
            return ResultSubmitBlock(code=StatusCode.ERROR, message=reason)

        data = block.marshal_binary()
        with self._lock:
            da_height = self.current_height() + 1
            self.kv_store.put(f"{BLOCK_KEY_PREFIX}{da_height}", data)
            self.kv_store.put(HEIGHT_KEY, str(da_height).encode())

        self.logger.debug(f"Block {block.height} stored at mock DA height {da_height}")
        return ResultSubmitBlock(
            code=StatusCode.SUCCESS,
            message=f"tx hash: {hashlib.sha256(data).hexdigest()}",
            da_height=da_height,
        )

    def check_block_availability(self, ctx: Context, da_height: int) -> ResultCheckBlock:
        reason = self._not_running_reason() or ctx.error() or height_error(da_height)
        if reason:
            return ResultCheckBlock(code=StatusCode.ERROR, message=reason)
        return ResultCheckBlock(
            code=StatusCode.SUCCESS,
            da_height=da_height,
            data_available=self.kv_store.has(f"{BLOCK_KEY_PREFIX}{da_height}"),
        )

    def retrieve_blocks(self, ctx: Context, da_height: int) -> ResultRetrieveBlocks:
        reason = self._not_running_reason() or ctx.error() or height_error(da_height)
        if reason:
            return ResultRetrieveBlocks(code=StatusCode.ERROR, message=reason)

        data = self.kv_store.get(f"{BLOCK_KEY_PREFIX}{da_height}")
        if data is None:
            # Nothing was posted at this height.
            block = Block.from_height_and_txs(da_height, [])
        else:
            block = Block.unmarshal_binary(data)
        return ResultRetrieveBlocks(code=StatusCode.SUCCESS, da_height=da_height, blocks=[block])
