"""
Rollup-node side of the DA service.

RemoteDAClient implements the DA layer client contract by forwarding every
call to a DA service over one TCP connection. Use connect() to get a client
whose type reflects whether the served backend can retrieve blocks.
"""
import itertools
import json
import logging
import socket
import threading
from typing import Any, Dict, Optional

from pydantic import ValidationError

from pyda.core.da.client import (
    BlockRetriever,
    ClientState,
    ClientStateError,
    ConfigError,
    DataAvailabilityLayerClient,
    TransportError,
    call_timeout,
)
from pyda.core.da.context import Context
from pyda.core.db.kvstore import KVStore
from pyda.core.models.block import Block
from pyda.core.models.result import (
    BaseResult,
    ResultCheckBlock,
    ResultRetrieveBlocks,
    ResultSubmitBlock,
    StatusCode,
)
from pyda.server.rpc import (
    INTERNAL_ERROR,
    JSONRPC_VERSION,
    METHOD_CAPABILITIES,
    METHOD_CHECK_BLOCK_AVAILABILITY,
    METHOD_INIT,
    METHOD_RETRIEVE_BLOCKS,
    METHOD_START,
    METHOD_STOP,
    METHOD_SUBMIT_BLOCK,
    RPCError,
    encode_message,
)

logger = logging.getLogger(__name__)


class RPCConnection:
    """A single line-oriented JSON-RPC connection.

    Calls are serialized; a connection that fails mid-call is dropped and
    re-opened on the next call so a late answer can never be mistaken for
    the response to another request.
    """

    def __init__(self, host: str, port: int, timeout: float = 60.0):
        self.host = host
        self.port = port
        self.timeout = timeout
        self._sock: Optional[socket.socket] = None
        self._file = None
        self._ids = itertools.count(1)
        self._lock = threading.Lock()

    def _open(self) -> None:
        self._sock = socket.create_connection((self.host, self.port), timeout=self.timeout)
        self._file = self._sock.makefile("rwb")

    def close(self) -> None:
        with self._lock:
            self._drop()

    def _drop(self) -> None:
        if self._file is not None:
            try:
                self._file.close()
            except OSError:
                pass
        if self._sock is not None:
            self._sock.close()
        self._sock = None
        self._file = None

    def call(self, method: str, params: Dict[str, Any], timeout: Optional[float] = None) -> Any:
        """Send one request and wait for its response.

        Raises:
            RPCError: If the service answers with an error
            OSError: If the connection fails or times out
        """
        request_id = next(self._ids)
        request = {"jsonrpc": JSONRPC_VERSION, "id": request_id, "method": method, "params": params}

        with self._lock:
            try:
                if self._sock is None:
                    self._open()
                self._sock.settimeout(timeout if timeout is not None else self.timeout)
                self._file.write(encode_message(request))
                self._file.flush()
                line = self._file.readline()
            except OSError:
                self._drop()
                raise
            if not line:
                self._drop()
                raise ConnectionError(f"DA service at {self.host}:{self.port} closed the connection")

        try:
            response = json.loads(line)
        except ValueError as e:
            raise RPCError(INTERNAL_ERROR, f"invalid response from DA service: {str(e)}")

        if not isinstance(response, dict):
            raise RPCError(INTERNAL_ERROR, f"DA service response is not an object: {line[:200]!r}")
        if response.get("id") != request_id:
            raise RPCError(INTERNAL_ERROR, f"response id {response.get('id')} does not match {request_id}")
        if response.get("error"):
            error = response["error"]
            if not isinstance(error, dict):
                raise RPCError(INTERNAL_ERROR, f"malformed error from DA service: {error!r}")
            raise RPCError(error.get("code", INTERNAL_ERROR), error.get("message", ""), error.get("data"))
        return response.get("result")


class RemoteDAClient(DataAvailabilityLayerClient):
    """DA layer client served by a remote DA service."""

    def __init__(self, connection: RPCConnection):
        self.connection = connection
        self.logger = logger
        self.state = ClientState.NEW

    def init(
        self,
        namespace_id: bytes,
        config: bytes,
        kv_store: Optional[KVStore] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        # The service owns its key-value store; kv_store stays local.
        if logger is not None:
            self.logger = logger
        try:
            config_text = config.decode("utf-8")
        except UnicodeDecodeError as e:
            raise ConfigError(f"config must be UTF-8 text: {str(e)}") from e

        try:
            self.connection.call(
                METHOD_INIT, {"namespace_id": bytes(namespace_id).hex(), "config": config_text}
            )
        except RPCError as e:
            raise ConfigError(e.message) from e
        except OSError as e:
            raise ConfigError(f"DA service unreachable: {str(e)}") from e
        self.state = ClientState.INITIALIZED

    def start(self) -> None:
        self._lifecycle_call(METHOD_START)
        self.state = ClientState.STARTED
        self.logger.info(f"Remote DA client started against {self.connection.host}:{self.connection.port}")

    def stop(self) -> None:
        self._lifecycle_call(METHOD_STOP)
        self.state = ClientState.STOPPED
        self.connection.close()

    def _lifecycle_call(self, method: str) -> None:
        try:
            self.connection.call(method, {})
        except (RPCError, OSError) as e:
            raise ClientStateError(f"{method} failed: {str(e)}") from e

    def submit_block(self, ctx: Context, block: Block) -> ResultSubmitBlock:
        return self._result_call(
            ResultSubmitBlock, ctx, METHOD_SUBMIT_BLOCK, {"block": block.model_dump(mode="json")}
        )

    def check_block_availability(self, ctx: Context, da_height: int) -> ResultCheckBlock:
        return self._result_call(
            ResultCheckBlock, ctx, METHOD_CHECK_BLOCK_AVAILABILITY, {"height": da_height}
        )

    def _result_call(self, result_cls, ctx: Context, method: str, params: Dict[str, Any]) -> BaseResult:
        try:
            timeout = call_timeout(ctx, self.connection.timeout)
        except TransportError as e:
            return result_cls(code=StatusCode.ERROR, message=str(e))

        remaining = ctx.remaining()
        if remaining is not None:
            params = dict(params, timeout=remaining)

        try:
            result = self.connection.call(method, params, timeout=timeout)
            return result_cls.model_validate(result)
        except (RPCError, OSError, ValidationError) as e:
            self.logger.error(f"{method} failed: {str(e)}")
            return result_cls(code=StatusCode.ERROR, message=f"{method} failed: {str(e)}")


class RemoteBlockRetrieverClient(RemoteDAClient, BlockRetriever):
    """Remote client for services whose backend can retrieve blocks."""

    def retrieve_blocks(self, ctx: Context, da_height: int) -> ResultRetrieveBlocks:
        return self._result_call(
            ResultRetrieveBlocks, ctx, METHOD_RETRIEVE_BLOCKS, {"height": da_height}
        )


def connect(host: str, port: int, timeout: float = 60.0) -> RemoteDAClient:
    """Connect to a DA service and return a client matching its capabilities.

    Raises:
        OSError: If the service cannot be reached
        RPCError: If the service rejects the capability query
    """
    connection = RPCConnection(host, port, timeout=timeout)
    capabilities = connection.call(METHOD_CAPABILITIES, {})
    logger.info(f"Connected to DA service at {host}:{port} serving {capabilities.get('backend')}")
    if capabilities.get("retrieve_blocks"):
        return RemoteBlockRetrieverClient(connection)
    return RemoteDAClient(connection)
