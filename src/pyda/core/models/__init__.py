from pyda.core.models.block import Block, BlockData, BlockHeader
from pyda.core.models.namespace import (
    NAMESPACE_ID_SIZE,
    namespace_id_from_str,
    validate_namespace_id,
)
from pyda.core.models.result import (
    StatusCode,
    BaseResult,
    ResultSubmitBlock,
    ResultCheckBlock,
    ResultRetrieveBlocks,
)

__all__ = [
    "Block",
    "BlockData",
    "BlockHeader",
    "NAMESPACE_ID_SIZE",
    "namespace_id_from_str",
    "validate_namespace_id",
    "StatusCode",
    "BaseResult",
    "ResultSubmitBlock",
    "ResultCheckBlock",
    "ResultRetrieveBlocks",
]
