"""JSON-RPC 2.0 surface for the editor codecs."""

from __future__ import annotations

from .handlers import dispatch, rpc_handler
from .types import (
    INTERNAL_ERROR,
    INVALID_PARAMS,
    INVALID_REQUEST,
    JSON,
    METHOD_NOT_FOUND,
    PARSE_ERROR,
    RpcError,
    jsonrpc_error,
    jsonrpc_result,
)

__all__ = [
    "JSON",
    "RpcError",
    "PARSE_ERROR",
    "INVALID_REQUEST",
    "METHOD_NOT_FOUND",
    "INVALID_PARAMS",
    "INTERNAL_ERROR",
    "dispatch",
    "jsonrpc_error",
    "jsonrpc_result",
    "rpc_handler",
]
