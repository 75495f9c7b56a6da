"""
Avail backend for the DA layer client.

Blocks are submitted to an Avail node as application data. Availability is
read from the light client's confidence endpoint, and blocks are rebuilt
from the light client's decoded app data.
"""
import logging
from typing import Callable, Optional, Type, TypeVar

import requests
from pydantic import BaseModel, ValidationError

from pyda.core.da.avail.config import AvailConfig
from pyda.core.da.avail.datasubmit import DataSubmitter
from pyda.core.da.avail.types import (
    NOT_FOUND_RESPONSE,
    PROCESSING_RESPONSE,
    AppData,
    Confidence,
)
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
    call_timeout,
    height_error,
)
from pyda.core.da.context import Context
from pyda.core.db.kvstore import KVStore
from pyda.core.models.block import Block
from pyda.core.models.namespace import validate_namespace_id
from pyda.core.models.result import (
    ResultCheckBlock,
    ResultRetrieveBlocks,
    ResultSubmitBlock,
    StatusCode,
)

# Set up logging
logger = logging.getLogger(__name__)

# DA height reported for a fresh submission. The real inclusion height is
# only known after a later availability check.
SUBMITTED_DA_HEIGHT = 1

SUBMISSION_KEY_PREFIX = "avail/submissions/"

M = TypeVar("M", bound=BaseModel)


def _context_sleep(ctx: Context, seconds: float) -> bool:
    return ctx.wait(seconds)


class AvailClient(DataAvailabilityLayerClient, BlockRetriever):
    """
    DA layer client backed by Avail.

    A single instance may be shared between threads once init has
    returned: the config is never modified afterwards.
    """

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        submitter: Optional[DataSubmitter] = None,
        sleep: Optional[Callable[[Context, float], bool]] = None,
    ):
        """Initialize the Avail client.

        Args:
            session: Optional HTTP session for light client calls
            submitter: Optional submission transport, built from config if None
            sleep: Optional sleep used between processing retries; returns
                True when the context is done and retrying must stop
        """
        self.namespace_id = b""
        self.config: Optional[AvailConfig] = None
        self.kv_store: Optional[KVStore] = None
        self.logger = logger
        self.session = session or requests.Session()
        self.submitter = submitter
        self._sleep = sleep or _context_sleep
        self.state = ClientState.NEW

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

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
        except ValueError as e:
            raise ConfigError(str(e)) from e

        if config:
            try:
                parsed = AvailConfig.model_validate_json(config)
            except ValidationError as e:
                raise ConfigError(f"invalid avail config: {str(e)}") from e
        else:
            parsed = AvailConfig()

        self.namespace_id = namespace_id
        self.config = parsed
        self.kv_store = kv_store
        if logger is not None:
            self.logger = logger

        if self.submitter is None and parsed.seed:
            self.submitter = DataSubmitter(
                api_url=parsed.api_url,
                seed=parsed.seed,
                app_id=parsed.app_id,
                session=self.session,
            )
        elif self.submitter is None:
            self.logger.warning("No seed configured, block submission is disabled")

        self.state = ClientState.INITIALIZED

    def start(self) -> None:
        self._transition(ClientState.INITIALIZED, ClientState.STARTED)
        self.logger.info(
            f"Starting Avail Data Availability Layer Client: "
            f"base_url={self.config.base_url} api_url={self.config.api_url} "
            f"app_id={self.config.app_id} namespace={self.namespace_id.hex()}"
        )

    def stop(self) -> None:
        if self.state not in (ClientState.INITIALIZED, ClientState.STARTED):
            raise ClientStateError(f"stop called on a client that is {self.state.value}")
        self.state = ClientState.STOPPED
        self.session.close()
        self.logger.info("Stopping Avail Data Availability Layer Client")

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def submit_block(self, ctx: Context, block: Block) -> ResultSubmitBlock:
        reason = self._not_running_reason() or ctx.error()
        if reason:
            return ResultSubmitBlock(code=StatusCode.ERROR, message=reason)

        if self.submitter is None:
            return ResultSubmitBlock(
                code=StatusCode.ERROR, message="block submission requires a configured seed"
            )

        try:
            data = block.marshal_binary()
        except ValueError as e:
            return ResultSubmitBlock(code=StatusCode.ERROR, message=str(e))

        try:
            timeout = call_timeout(ctx, self.config.request_timeout)
            tx_hash = self.submitter.submit_data(data, timeout=timeout)
        except DAClientError as e:
            self.logger.error(f"Error submitting block {block.height} to Avail: {str(e)}")
            return ResultSubmitBlock(code=StatusCode.ERROR, message=str(e))

        tx_hex = tx_hash.hex()
        self.logger.info(f"Block {block.height} submitted to Avail: tx_hash={tx_hex}")
        self._record_submission(block.height, tx_hex)

        return ResultSubmitBlock(
            code=StatusCode.SUCCESS,
            message=f"tx hash: {tx_hex}",
            da_height=SUBMITTED_DA_HEIGHT,
        )

    def check_block_availability(self, ctx: Context, da_height: int) -> ResultCheckBlock:
        reason = self._not_running_reason() or ctx.error() or height_error(da_height)
        if reason:
            return ResultCheckBlock(code=StatusCode.ERROR, message=reason)

        try:
            response = self._get(ctx, f"/confidence/{da_height}")
            confidence = self._decode(response, Confidence)
        except DAClientError as e:
            self.logger.error(f"Error checking availability at height {da_height}: {str(e)}")
            return ResultCheckBlock(code=StatusCode.ERROR, message=str(e))

        if confidence.block != da_height:
            self.logger.warning(
                f"Confidence requested for height {da_height} but light client "
                f"reported block {confidence.block}"
            )

        return ResultCheckBlock(
            code=StatusCode.SUCCESS,
            da_height=confidence.block,
            data_available=confidence.confidence > self.config.confidence,
        )

    def retrieve_blocks(self, ctx: Context, da_height: int) -> ResultRetrieveBlocks:
        reason = self._not_running_reason() or ctx.error() or height_error(da_height)
        if reason:
            return ResultRetrieveBlocks(code=StatusCode.ERROR, message=reason)

        try:
            app_data = self._poll_app_data(ctx, da_height)
        except StillProcessingError as e:
            self.logger.warning(str(e))
            return ResultRetrieveBlocks(code=StatusCode.PENDING, message=str(e))
        except DAClientError as e:
            self.logger.error(f"Error retrieving blocks at height {da_height}: {str(e)}")
            return ResultRetrieveBlocks(code=StatusCode.ERROR, message=str(e))

        if app_data is None:
            # Nothing was posted at this height.
            return ResultRetrieveBlocks(
                code=StatusCode.SUCCESS,
                da_height=da_height,
                blocks=[Block.from_height_and_txs(da_height, [])],
            )

        txs = [app_data.concat_extrinsics()] if app_data.extrinsics else []
        return ResultRetrieveBlocks(
            code=StatusCode.SUCCESS,
            da_height=app_data.block,
            blocks=[Block.from_height_and_txs(da_height, txs)],
        )

    # ------------------------------------------------------------------
    # Light client access
    # ------------------------------------------------------------------

    def _poll_app_data(self, ctx: Context, da_height: int) -> Optional[AppData]:
        """Read app data at da_height, retrying while the block is processing.

        Returns:
            Optional[AppData]: Decoded app data, or None if the light client
                reports nothing at this height

        Raises:
            StillProcessingError: If every attempt saw a processing block
            TransportError: On network failure or cancellation
            DecodeError: If the payload is not valid app data
        """
        attempts = self.config.retrieve_max_attempts
        delay = self.config.retrieve_backoff

        for attempt in range(1, attempts + 1):
            response = self._get(ctx, f"/appdata/{da_height}?decode=true")
            body = response.text.strip()

            if body == NOT_FOUND_RESPONSE:
                return None
            if body != PROCESSING_RESPONSE:
                return self._decode(response, AppData)

            if attempt < attempts:
                self.logger.info(
                    f"Block {da_height} still processing, retrying in {delay:.2f}s "
                    f"(attempt {attempt}/{attempts})"
                )
                if self._sleep(ctx, delay):
                    raise TransportError(ctx.error() or "context done")
                delay = min(delay * self.config.retrieve_backoff_factor,
                            self.config.retrieve_max_backoff)

        raise StillProcessingError(
            f"block {da_height} still processing after {attempts} attempts"
        )

    def _get(self, ctx: Context, path: str) -> requests.Response:
        timeout = call_timeout(ctx, self.config.request_timeout)
        url = self.config.base_url.rstrip("/") + path
        try:
            return self.session.get(url, timeout=timeout)
        except requests.RequestException as e:
            raise TransportError(f"GET {url} failed: {str(e)}") from e

    def _decode(self, response: requests.Response, model: Type[M]) -> M:
        if response.status_code >= 400:
            raise TransportError(
                f"light client returned HTTP {response.status_code}: {response.text[:200]}"
            )
        try:
            return model.model_validate_json(response.content)
        except ValidationError as e:
            self.logger.error(f"Undecodable {model.__name__} payload: {response.text}")
            raise DecodeError(
                f"invalid {model.__name__} payload: {str(e)}", payload=response.content
            ) from e

    def _record_submission(self, height: int, tx_hex: str) -> None:
        if self.kv_store is None:
            return
        try:
            self.kv_store.put(f"{SUBMISSION_KEY_PREFIX}{height}", tx_hex.encode())
        except Exception as e:
            self.logger.warning(f"Could not record submission of block {height}: {str(e)}")
