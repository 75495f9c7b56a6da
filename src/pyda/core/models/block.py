import base64
import hashlib
from typing import List

from pydantic import BaseModel, Field, field_serializer, field_validator


class BlockHeader(BaseModel):
    height: int = Field(..., ge=0, description="Rollup block height")
    chain_id: str = Field(default="", description="Rollup chain identifier")
    time: int = Field(default=0, ge=0, description="Block timestamp (UTC, seconds)")
    last_header_hash: str = Field(default="", description="Hash of the previous header")
    data_hash: str = Field(default="", description="Hash of the block data")
    proposer_address: str = Field(default="", description="Address of the block proposer")


class BlockData(BaseModel):
    txs: List[bytes] = Field(default_factory=list, description="Opaque rollup transactions")

    @field_validator("txs", mode="before")
    @classmethod
    def decode_txs(cls, value):
        """Accept base64 text for transactions coming from JSON."""
        if isinstance(value, list):
            return [base64.b64decode(tx) if isinstance(tx, str) else tx for tx in value]
        return value

    @field_serializer("txs", when_used="json")
    def encode_txs(self, txs: List[bytes]) -> List[str]:
        return [base64.b64encode(tx).decode("ascii") for tx in txs]


class Block(BaseModel):
    header: BlockHeader
    data: BlockData = Field(default_factory=BlockData)

    @property
    def height(self) -> int:
        return self.header.height

    def marshal_binary(self) -> bytes:
        """Canonical binary form of the block, as posted to the DA layer."""
        return self.model_dump_json().encode("utf-8")

    @classmethod
    def unmarshal_binary(cls, data: bytes) -> "Block":
        return cls.model_validate_json(data)

    def hash(self) -> str:
        return hashlib.sha256(self.marshal_binary()).hexdigest()

    @classmethod
    def from_height_and_txs(cls, height: int, txs: List[bytes]) -> "Block":
        """Build a minimal block holding only a height and its transactions.

        Used when a block is reconstructed from the DA layer's own
        representation and no canonical header is available.
        """
        return cls(header=BlockHeader(height=height), data=BlockData(txs=list(txs)))
