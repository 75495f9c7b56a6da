"""
Tests for the pyda command-line interface.
"""
import pytest
from rich.console import Console
from typer.testing import CliRunner

from pyda.cli.main import app, render_result
from pyda.core.da.mock import MockDAClient
from pyda.core.models.block import Block
from pyda.core.models.result import ResultCheckBlock, ResultRetrieveBlocks, StatusCode
from pyda.server.service import DAServer, DAService

from tests.conftest import NAMESPACE_ID

runner = CliRunner()


@pytest.fixture
def mock_server():
    """A running DA service backed by an initialized mock client."""
    client = MockDAClient()
    client.init(NAMESPACE_ID, b"", None, None)
    client.start()
    server = DAServer(("127.0.0.1", 0), DAService(client))
    server.start_background()
    yield server
    server.stop_background()


def render(result) -> str:
    console = Console(width=120, record=True)
    console.print(render_result(result))
    return console.export_text()


def test_render_check_result():
    text = render(ResultCheckBlock(code=StatusCode.SUCCESS, da_height=9, data_available=True))

    assert "SUCCESS" in text
    assert "data_available" in text
    assert "True" in text


def test_render_retrieve_result():
    result = ResultRetrieveBlocks(
        code=StatusCode.SUCCESS, da_height=3, blocks=[Block.from_height_and_txs(3, [b"abcd"])]
    )

    text = render(result)

    assert "block 3" in text
    assert "[4]" in text


def test_submit_and_retrieve_commands(mock_server, sample_block, tmp_path):
    block_file = tmp_path / "block.json"
    block_file.write_bytes(sample_block.marshal_binary())
    port = str(mock_server.port)

    submitted = runner.invoke(app, ["submit", str(block_file), "--port", port])
    assert submitted.exit_code == 0
    assert "SUCCESS" in submitted.output

    retrieved = runner.invoke(app, ["retrieve", "1", "--port", port])
    assert retrieved.exit_code == 0
    assert "block 42" in retrieved.output


def test_check_command_failure_exit_code(mock_server):
    mock_server.service.client.stop()

    result = runner.invoke(app, ["check", "1", "--port", str(mock_server.port)])

    assert result.exit_code == 1
    assert "ERROR" in result.output


def test_unreachable_service():
    result = runner.invoke(app, ["check", "1", "--port", "1"])

    assert result.exit_code == 1
    assert "Cannot reach DA service" in result.output


def test_serve_unknown_backend(monkeypatch, tmp_path):
    monkeypatch.setenv("PYDA_KV_PATH", str(tmp_path / "kv.db"))

    result = runner.invoke(app, ["serve", "--backend", "nope"])

    assert result.exit_code == 1
    assert "unknown DA backend" in result.output
