"""
Wire format of the DA service: JSON-RPC 2.0, one JSON document per line.
"""
import json
from typing import Any, Dict, Optional, Union

from pydantic import BaseModel, Field

JSONRPC_VERSION = "2.0"

# Standard JSON-RPC error codes
PARSE_ERROR = -32700
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602
INTERNAL_ERROR = -32603

# Application error codes
CONFIG_ERROR = -32000
CLIENT_STATE_ERROR = -32001

# Method names served by the DA service
METHOD_INIT = "DA.Init"
METHOD_START = "DA.Start"
METHOD_STOP = "DA.Stop"
METHOD_SUBMIT_BLOCK = "DA.SubmitBlock"
METHOD_CHECK_BLOCK_AVAILABILITY = "DA.CheckBlockAvailability"
METHOD_RETRIEVE_BLOCKS = "DA.RetrieveBlocks"
METHOD_CAPABILITIES = "DA.Capabilities"


class RPCError(Exception):
    """A JSON-RPC error, raised by handlers and by the remote client."""

    def __init__(self, code: int, message: str, data: Any = None):
        super().__init__(message)
        self.code = code
        self.message = message
        self.data = data

    def to_dict(self) -> Dict[str, Any]:
        error: Dict[str, Any] = {"code": self.code, "message": self.message}
        if self.data is not None:
            error["data"] = self.data
        return error


class RPCRequest(BaseModel):
    jsonrpc: str = Field(default=JSONRPC_VERSION)
    id: Optional[Union[int, str]] = Field(default=None)
    method: str = Field(..., min_length=1)
    params: Dict[str, Any] = Field(default_factory=dict)


def encode_message(message: Dict[str, Any]) -> bytes:
    return json.dumps(message, separators=(",", ":")).encode("utf-8") + b"\n"


def make_response(request_id: Optional[Union[int, str]], result: Any) -> Dict[str, Any]:
    return {"jsonrpc": JSONRPC_VERSION, "id": request_id, "result": result}


def make_error(request_id: Optional[Union[int, str]], error: RPCError) -> Dict[str, Any]:
    return {"jsonrpc": JSONRPC_VERSION, "id": request_id, "error": error.to_dict()}
