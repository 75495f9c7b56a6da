"""
Typed outcomes returned by every DA layer client operation.

Every operation except ``init`` reports through one of these results instead
of raising. Callers branch on ``code``.
"""
import enum
from typing import List

from pydantic import BaseModel, Field, model_validator

from pyda.core.models.block import Block


class StatusCode(enum.IntEnum):
    """Terminal classification of a DA operation outcome."""

    UNKNOWN = 0
    SUCCESS = 1
    NOT_FOUND = 2
    ERROR = 3
    # Data at the height is still being produced by the DA layer and the
    # retry budget ran out before it became ready.
    PENDING = 4


class BaseResult(BaseModel):
    code: StatusCode = Field(default=StatusCode.UNKNOWN, description="Outcome of the operation")
    message: str = Field(
        default="",
        description="DA layer specific information (tx hash, error details, etc)",
    )
    da_height: int = Field(
        default=0, ge=0, description="Height on the DA layer for this result, 0 if unknown"
    )

    @model_validator(mode="after")
    def check_error_has_message(self):
        if self.code == StatusCode.ERROR and not self.message:
            raise ValueError("Error results must carry a diagnostic message")
        return self

    @property
    def ok(self) -> bool:
        return self.code == StatusCode.SUCCESS


class ResultSubmitBlock(BaseResult):
    pass


class ResultCheckBlock(BaseResult):
    data_available: bool = Field(
        default=False, description="Whether confidence exceeds the configured threshold"
    )


class ResultRetrieveBlocks(BaseResult):
    blocks: List[Block] = Field(default_factory=list, description="Blocks at the DA height")
