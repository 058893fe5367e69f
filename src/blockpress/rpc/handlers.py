"""Editor RPC handlers.

Entry points for the save and hydration collaborators. Handlers take
keyword params and return JSON-ready dicts; ``dispatch`` wraps them in
JSON-RPC 2.0 envelopes. There is no transport here.

Methods:
    editor/serialize        editor blocks -> persisted blocks
    editor/deserialize      persisted blocks -> editor blocks
    editor/validate         persisted blocks against the content schema
    editor/markdown/export  persisted blocks -> Markdown
    editor/markdown/import  Markdown -> persisted blocks
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from functools import wraps
from typing import Any

from ..codec.deserializer import deserialize_blocks
from ..codec.markdown import parse_markdown, render_markdown
from ..codec.schema import dump_blocks, validate_blocks, validate_content_can_publish
from ..codec.serializer import serialize_blocks
from ..editor.models import Block
from ..errors import BlockPressError, ValidationError, get_error_code
from .types import (
    INTERNAL_ERROR,
    INVALID_PARAMS,
    INVALID_REQUEST,
    JSON,
    METHOD_NOT_FOUND,
    RpcError,
    jsonrpc_error,
    jsonrpc_result,
)

logger = logging.getLogger(__name__)


def rpc_handler(method_name: str) -> Callable:
    """Decorator that converts domain errors to RpcError.

    1. RpcError propagates unchanged
    2. BlockPressError becomes an RpcError with its mapped code and data
    3. ValueError and TypeError become invalid-params errors
    4. Anything else is logged and reported as an internal error

    Usage:
        @rpc_handler("editor/serialize")
        def handle_editor_serialize(*, blocks: list[dict]) -> dict:
            ...
    """

    def decorator(func: Callable) -> Callable:
        @wraps(func)
        def wrapper(**kwargs: Any) -> Any:
            try:
                return func(**kwargs)
            except RpcError:
                raise
            except BlockPressError as e:
                raise RpcError(
                    code=get_error_code(e),
                    message=e.message,
                    data=e.to_dict(),
                ) from e
            except ValueError as e:
                raise RpcError(code=INVALID_PARAMS, message=str(e)) from e
            except TypeError as e:
                raise RpcError(code=INVALID_PARAMS, message=f"Invalid parameter: {e}") from e
            except Exception as e:
                logger.error(
                    "Internal error in RPC handler %s: %s",
                    method_name,
                    e,
                    exc_info=True,
                )
                raise RpcError(
                    code=INTERNAL_ERROR,
                    message=f"Internal error in {method_name}",
                    data={"error_type": type(e).__name__},
                ) from e

        return wrapper

    return decorator


def _require_list(value: Any, name: str) -> list[Any]:
    if not isinstance(value, list):
        raise RpcError(code=INVALID_PARAMS, message=f"{name} must be a list")
    return value


def _editor_blocks(blocks: list[Any]) -> list[Block]:
    """Read editor-shaped block dicts as sent by the editing surface."""
    result = []
    for index, data in enumerate(blocks):
        if not isinstance(data, dict) or "type" not in data:
            raise ValidationError(
                f"Block {index} must be an object with a type",
                field="blocks",
                value=index,
            )
        try:
            result.append(Block.from_dict(data))
        except (AttributeError, KeyError, TypeError, ValueError) as exc:
            raise ValidationError(
                f"Block {index} is malformed: {exc}",
                field="blocks",
                value=index,
            ) from exc
    return result


# =============================================================================
# Codec Handlers
# =============================================================================


@rpc_handler("editor/serialize")
def handle_editor_serialize(*, blocks: list[dict[str, Any]], validate: bool = False) -> JSON:
    """Convert editor blocks to the persisted format, optionally schema-checked."""
    persisted = serialize_blocks(_editor_blocks(_require_list(blocks, "blocks")))
    if validate:
        validate_blocks(persisted)
    return {"blocks": persisted}


@rpc_handler("editor/deserialize")
def handle_editor_deserialize(*, blocks: list[dict[str, Any]] | None = None) -> JSON:
    """Convert persisted blocks to editor blocks with fresh ids."""
    return {"blocks": [block.to_dict() for block in deserialize_blocks(blocks)]}


@rpc_handler("editor/validate")
def handle_editor_validate(
    *,
    blocks: list[dict[str, Any]],
    title: str | None = None,
) -> JSON:
    """Validate persisted blocks; with ``title``, also check publish readiness."""
    models = validate_blocks(_require_list(blocks, "blocks"))
    if title is not None:
        validate_content_can_publish(title, models)
    return {"valid": True, "blocks": dump_blocks(models)}


# =============================================================================
# Markdown Handlers
# =============================================================================


@rpc_handler("editor/markdown/export")
def handle_editor_markdown_export(*, blocks: list[dict[str, Any]] | None = None) -> JSON:
    return {"markdown": render_markdown(deserialize_blocks(blocks))}


@rpc_handler("editor/markdown/import")
def handle_editor_markdown_import(*, markdown: str) -> JSON:
    if not isinstance(markdown, str):
        raise RpcError(code=INVALID_PARAMS, message="markdown must be a string")
    return {"blocks": serialize_blocks(parse_markdown(markdown))}


# =============================================================================
# Dispatch
# =============================================================================


_METHODS: dict[str, Callable[..., Any]] = {
    "editor/serialize": handle_editor_serialize,
    "editor/deserialize": handle_editor_deserialize,
    "editor/validate": handle_editor_validate,
    "editor/markdown/export": handle_editor_markdown_export,
    "editor/markdown/import": handle_editor_markdown_import,
}


def dispatch(request: Any) -> JSON:
    """Handle one JSON-RPC 2.0 request object and return its response."""
    if not isinstance(request, dict):
        return jsonrpc_error(None, RpcError(INVALID_REQUEST, "Invalid Request: expected an object"))

    req_id = request.get("id")
    method = request.get("method")
    params = request.get("params") or {}

    if not isinstance(method, str) or not method:
        return jsonrpc_error(req_id, RpcError(INVALID_REQUEST, "Invalid Request: method is required"))
    if not isinstance(params, dict):
        return jsonrpc_error(
            req_id,
            RpcError(INVALID_REQUEST, "Invalid Request: params must be an object"),
        )

    handler = _METHODS.get(method)
    if handler is None:
        return jsonrpc_error(req_id, RpcError(METHOD_NOT_FOUND, f"Method not found: {method}"))

    logger.debug("RPC request method=%s req_id=%s", method, req_id)
    try:
        return jsonrpc_result(req_id, handler(**params))
    except RpcError as exc:
        return jsonrpc_error(req_id, exc)
