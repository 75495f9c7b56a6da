"""
Shared fixtures for pyda tests.
"""
import json
from unittest.mock import MagicMock

import pytest

from pyda.core.models.block import Block, BlockData, BlockHeader

NAMESPACE_ID = bytes.fromhex("0123456789abcdef")


def make_http_response(body, status_code: int = 200) -> MagicMock:
    """Build a fake requests.Response carrying body (str, or JSON-encoded otherwise)."""
    text = body if isinstance(body, str) else json.dumps(body)
    response = MagicMock()
    response.status_code = status_code
    response.text = text
    response.content = text.encode("utf-8")
    return response


@pytest.fixture
def namespace_id():
    return NAMESPACE_ID


@pytest.fixture
def sample_block():
    """A block with one text and one binary transaction."""
    header = BlockHeader(
        height=42,
        chain_id="test-rollup",
        time=1714489547,
        last_header_hash="ab" * 32,
        data_hash="cd" * 32,
        proposer_address="proposer-1",
    )
    return Block(header=header, data=BlockData(txs=[b"transfer:alice:bob:10", b"\x00\xff\x10"]))
