"""
Payloads returned by the Avail light client HTTP API.
"""
from typing import List, Optional

from pydantic import BaseModel, Field

# Literal JSON string bodies the light client sends instead of app data.
NOT_FOUND_RESPONSE = '"Not found"'
PROCESSING_RESPONSE = '"Processing block"'


class Confidence(BaseModel):
    block: int = Field(..., ge=0, description="Avail block number the confidence refers to")
    confidence: float = Field(..., description="Confidence on a 0-100 scale")
    serialised_confidence: Optional[str] = Field(default=None)


class AppData(BaseModel):
    block: int = Field(..., ge=0, description="Avail block number")
    extrinsics: List[str] = Field(
        default_factory=list, description="Decoded extrinsic data for the app ID, in block order"
    )

    def concat_extrinsics(self) -> bytes:
        """Join all extrinsics byte-exact, in order, without delimiters."""
        return b"".join(extrinsic.encode("utf-8") for extrinsic in self.extrinsics)
