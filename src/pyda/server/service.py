"""
DA service: exposes one shared DA layer client over TCP.

Each accepted connection is served on its own thread. Requests on a
connection are answered one at a time, in order. All connections share
the same client instance.
"""
import json
import logging
import socketserver
import threading
from typing import Any, Callable, Dict, Optional, Tuple

from pydantic import ValidationError

from pyda.core.da.client import (
    ClientStateError,
    ConfigError,
    DataAvailabilityLayerClient,
    supports_block_retrieval,
)
from pyda.core.da.context import Context
from pyda.core.db.kvstore import KVStore
from pyda.core.models.block import Block
from pyda.server.rpc import (
    CLIENT_STATE_ERROR,
    CONFIG_ERROR,
    INTERNAL_ERROR,
    INVALID_PARAMS,
    INVALID_REQUEST,
    METHOD_CAPABILITIES,
    METHOD_CHECK_BLOCK_AVAILABILITY,
    METHOD_INIT,
    METHOD_NOT_FOUND,
    METHOD_RETRIEVE_BLOCKS,
    METHOD_START,
    METHOD_STOP,
    METHOD_SUBMIT_BLOCK,
    PARSE_ERROR,
    RPCError,
    RPCRequest,
    encode_message,
    make_error,
    make_response,
)

# Set up logging
logger = logging.getLogger(__name__)


class DAService:
    """
    Maps JSON-RPC methods 1:1 onto a DA layer client.

    The kv_store and logger are process-local resources handed to the
    client when a remote caller invokes DA.Init.
    """

    def __init__(
        self,
        client: DataAvailabilityLayerClient,
        kv_store: Optional[KVStore] = None,
        client_logger: Optional[logging.Logger] = None,
        request_timeout: float = 60.0,
    ):
        self.client = client
        self.kv_store = kv_store
        self.client_logger = client_logger
        self.request_timeout = request_timeout
        self._methods: Dict[str, Callable[[Dict[str, Any]], Any]] = {
            METHOD_INIT: self.init,
            METHOD_START: self.start,
            METHOD_STOP: self.stop,
            METHOD_SUBMIT_BLOCK: self.submit_block,
            METHOD_CHECK_BLOCK_AVAILABILITY: self.check_block_availability,
            METHOD_RETRIEVE_BLOCKS: self.retrieve_blocks,
            METHOD_CAPABILITIES: self.capabilities,
        }

    def handle(self, raw: bytes) -> Optional[Dict[str, Any]]:
        """Handle one raw request line.

        Returns:
            Optional[Dict[str, Any]]: Response object, or None for notifications
        """
        try:
            message = json.loads(raw)
        except ValueError as e:
            return make_error(None, RPCError(PARSE_ERROR, f"Parse error: {str(e)}"))

        if not isinstance(message, dict):
            return make_error(None, RPCError(INVALID_REQUEST, "Request must be a JSON object"))

        try:
            request = RPCRequest.model_validate(message)
        except ValidationError as e:
            return make_error(message.get("id"), RPCError(INVALID_REQUEST, f"Invalid request: {str(e)}"))

        try:
            result = self.dispatch(request.method, request.params)
        except RPCError as e:
            response = make_error(request.id, e)
        except Exception as e:
            logger.exception(f"Unhandled error in {request.method}")
            response = make_error(request.id, RPCError(INTERNAL_ERROR, f"Internal error: {str(e)}"))
        else:
            response = make_response(request.id, result)

        return None if request.id is None else response

    def dispatch(self, method: str, params: Dict[str, Any]) -> Any:
        handler = self._methods.get(method)
        if handler is None:
            raise RPCError(METHOD_NOT_FOUND, f"Method not found: {method}")
        return handler(params)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def init(self, params: Dict[str, Any]) -> Dict[str, Any]:
        try:
            namespace_id = bytes.fromhex(str(params["namespace_id"]))
        except (KeyError, ValueError) as e:
            raise RPCError(INVALID_PARAMS, f"namespace_id must be a hex string: {str(e)}")

        config = params.get("config") or ""
        if not isinstance(config, str):
            raise RPCError(INVALID_PARAMS, "config must be a string")

        try:
            self.client.init(namespace_id, config.encode("utf-8"), self.kv_store, self.client_logger)
        except ConfigError as e:
            raise RPCError(CONFIG_ERROR, str(e))
        except ClientStateError as e:
            raise RPCError(CLIENT_STATE_ERROR, str(e))
        logger.info(f"DA client initialized for namespace {namespace_id.hex()}")
        return {}

    def start(self, params: Dict[str, Any]) -> Dict[str, Any]:
        try:
            self.client.start()
        except ClientStateError as e:
            raise RPCError(CLIENT_STATE_ERROR, str(e))
        return {}

    def stop(self, params: Dict[str, Any]) -> Dict[str, Any]:
        try:
            self.client.stop()
        except ClientStateError as e:
            raise RPCError(CLIENT_STATE_ERROR, str(e))
        return {}

    def capabilities(self, params: Dict[str, Any]) -> Dict[str, Any]:
        return {
            "backend": type(self.client).__name__,
            "retrieve_blocks": supports_block_retrieval(self.client),
        }

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def submit_block(self, params: Dict[str, Any]) -> Dict[str, Any]:
        try:
            block = Block.model_validate(params["block"])
        except (KeyError, ValidationError) as e:
            raise RPCError(INVALID_PARAMS, f"invalid block: {str(e)}")
        result = self.client.submit_block(self._context(params), block)
        return result.model_dump(mode="json")

    def check_block_availability(self, params: Dict[str, Any]) -> Dict[str, Any]:
        height = self._height(params)
        result = self.client.check_block_availability(self._context(params), height)
        return result.model_dump(mode="json")

    def retrieve_blocks(self, params: Dict[str, Any]) -> Dict[str, Any]:
        if not supports_block_retrieval(self.client):
            raise RPCError(
                METHOD_NOT_FOUND,
                f"{type(self.client).__name__} does not support block retrieval",
            )
        height = self._height(params)
        result = self.client.retrieve_blocks(self._context(params), height)
        return result.model_dump(mode="json")

    def _context(self, params: Dict[str, Any]) -> Context:
        timeout = params.get("timeout")
        if timeout is None:
            return Context.with_timeout(self.request_timeout)
        try:
            timeout = float(timeout)
        except (TypeError, ValueError):
            raise RPCError(INVALID_PARAMS, "timeout must be a number of seconds")
        return Context.with_timeout(min(timeout, self.request_timeout))

    @staticmethod
    def _height(params: Dict[str, Any]) -> int:
        height = params.get("height")
        if not isinstance(height, int) or isinstance(height, bool) or height < 0:
            raise RPCError(INVALID_PARAMS, "height must be a non-negative integer")
        return height


class _ConnectionHandler(socketserver.StreamRequestHandler):
    """Serves newline-delimited requests on one connection."""

    def handle(self):
        peer = "%s:%s" % self.client_address[:2]
        logger.debug(f"Connection from {peer}")
        for line in self.rfile:
            if not line.strip():
                continue
            response = self.server.service.handle(line)
            if response is not None:
                self.wfile.write(encode_message(response))
                self.wfile.flush()
        logger.debug(f"Connection from {peer} closed")


class DAServer(socketserver.ThreadingTCPServer):
    """TCP listener serving a DAService, one thread per connection."""

    allow_reuse_address = True
    daemon_threads = True

    def __init__(self, address: Tuple[str, int], service: DAService):
        self.service = service
        self.thread: Optional[threading.Thread] = None
        super().__init__(address, _ConnectionHandler)

    @property
    def port(self) -> int:
        return self.server_address[1]

    def start_background(self) -> None:
        """Serve from a daemon thread."""
        self.thread = threading.Thread(target=self.serve_forever, daemon=True)
        self.thread.start()
        logger.info(f"DA service listening on {self.server_address[0]}:{self.port}")

    def stop_background(self) -> None:
        self.shutdown()
        self.server_close()
        if self.thread and self.thread.is_alive():
            self.thread.join(timeout=5.0)
        logger.info("DA service stopped")
