"""
Tests for the mock DA layer client.
"""
import pytest

from pyda.core.da.client import ClientState, ConfigError, supports_block_retrieval
from pyda.core.da.context import Context
from pyda.core.da.mock import MockDAClient
from pyda.core.da.registry import get_client, registered_clients
from pyda.core.db.kvstore import SQLiteKVStore
from pyda.core.models.block import Block
from pyda.core.models.result import StatusCode

from tests.conftest import NAMESPACE_ID


@pytest.fixture
def mock_client():
    client = MockDAClient()
    client.init(NAMESPACE_ID, b"", None, None)
    client.start()
    return client


class TestMockDAClient:
    def test_submit_assigns_increasing_heights(self, mock_client, sample_block):
        """Test that each submission lands on the next DA height."""
        ctx = Context.background()

        first = mock_client.submit_block(ctx, sample_block)
        second = mock_client.submit_block(ctx, sample_block)

        assert first.code == StatusCode.SUCCESS
        assert (first.da_height, second.da_height) == (1, 2)
        assert first.message.startswith("tx hash: ")

    def test_submit_then_retrieve(self, mock_client, sample_block):
        """Test that a submitted block can be read back at its DA height."""
        ctx = Context.background()
        submitted = mock_client.submit_block(ctx, sample_block)

        check = mock_client.check_block_availability(ctx, submitted.da_height)
        assert check.data_available is True

        result = mock_client.retrieve_blocks(ctx, submitted.da_height)
        assert result.code == StatusCode.SUCCESS
        assert result.blocks == [sample_block]

    def test_unknown_heights(self, mock_client):
        """Test availability and retrieval beyond the current height."""
        ctx = Context.background()

        assert mock_client.check_block_availability(ctx, 5).data_available is False

        result = mock_client.retrieve_blocks(ctx, 5)
        assert result.code == StatusCode.SUCCESS
        assert result.da_height == 5
        assert len(result.blocks) == 1
        assert result.blocks[0].height == 5
        assert result.blocks[0].data.txs == []

    def test_gap_below_current_height(self, sample_block):
        """Test that heights skipped by start_height read as empty blocks."""
        client = MockDAClient()
        client.init(NAMESPACE_ID, b'{"start_height": 10}', None, None)
        client.submit_block(Context.background(), sample_block)

        result = client.retrieve_blocks(Context.background(), 3)

        assert result.code == StatusCode.SUCCESS
        assert [block.height for block in result.blocks] == [3]
        assert result.blocks[0].data.txs == []

    def test_negative_height(self, mock_client):
        ctx = Context.background()

        check = mock_client.check_block_availability(ctx, -1)
        retrieved = mock_client.retrieve_blocks(ctx, -1)

        assert check.code == StatusCode.ERROR
        assert check.message == "invalid DA height -1"
        assert retrieved.code == StatusCode.ERROR
        assert retrieved.blocks == []

    def test_failed_init_leaves_client_untouched(self):
        client = MockDAClient()

        with pytest.raises(ConfigError):
            client.init(NAMESPACE_ID, b'{"start_height": -4}', None, None)

        assert client.namespace_id == b""
        assert client.config is None
        assert client.state == ClientState.NEW

    def test_start_height(self, sample_block):
        client = MockDAClient()
        client.init(NAMESPACE_ID, b'{"start_height": 100}', None, None)

        result = client.submit_block(Context.background(), sample_block)

        assert result.da_height == 101

    def test_bad_config(self):
        with pytest.raises(ConfigError):
            MockDAClient().init(NAMESPACE_ID, b"[1, 2", None, None)

    def test_persists_in_kv_store(self, tmp_path, sample_block):
        """Test that blocks survive a restart on the same store."""
        store = SQLiteKVStore(tmp_path / "kv.db")
        first = MockDAClient()
        first.init(NAMESPACE_ID, b"", store, None)
        da_height = first.submit_block(Context.background(), sample_block).da_height
        first.stop()

        second = MockDAClient()
        second.init(NAMESPACE_ID, b"", store, None)

        assert second.current_height() == da_height
        assert second.retrieve_blocks(Context.background(), da_height).blocks[0] == sample_block

    def test_fails_after_stop(self, mock_client, sample_block):
        mock_client.stop()

        result = mock_client.submit_block(Context.background(), sample_block)

        assert result.code == StatusCode.ERROR
        assert result.message == "client is stopped"


def test_registry():
    assert registered_clients() == ["avail", "mock"]
    assert isinstance(get_client("mock"), MockDAClient)
    assert supports_block_retrieval(get_client("avail"))

    with pytest.raises(KeyError):
        get_client("celestia")
