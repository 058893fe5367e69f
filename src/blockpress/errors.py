"""blockpress error hierarchy.

Provides a structured error hierarchy for editor and codec operations:
- BlockPressError: Base exception for all application errors
- ValidationError: Input or persisted-schema validation failures
- CodecError: Serialize/deserialize batch failures
- MutationError: Rejected mutations (strict sessions only)
- EditorCommandError: Host formatting command failures
- ConfigurationError: Configuration/setup issues

Each error type includes:
- Descriptive message
- Optional context for debugging
- Recoverable flag
- Structured representation for RPC responses

Usage:
    from blockpress.errors import SerializationError

    if not isinstance(level, int):
        raise SerializationError(
            "Heading block missing level attribute",
            block_index=index,
            block_type="heading",
        )
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


# =============================================================================
# Result Type for Explicit Success/Failure
# =============================================================================


@dataclass
class Result(Generic[T]):
    """Structured result that makes success/failure explicit.

    Used at call sites that must never raise into the editing session
    (loading and saving content).

    Usage:
        result = session.save(api.put_content)
        if result.success:
            notify("Saved")
        else:
            notify(result.user_message)
    """

    success: bool
    value: T | None = None
    error: "BlockPressError | None" = None
    user_message: str | None = None

    @classmethod
    def ok(cls, value: T) -> "Result[T]":
        """Create a successful result."""
        return cls(success=True, value=value)

    @classmethod
    def fail(cls, error: "BlockPressError", user_message: str | None = None) -> "Result[T]":
        """Create a failed result."""
        return cls(success=False, error=error, user_message=user_message)

    def unwrap(self) -> T:
        """Get value or raise the error.

        Raises:
            BlockPressError: If this is a failed result.
        """
        if self.success:
            return self.value  # type: ignore
        if self.error:
            raise self.error
        raise BlockPressError("Result failed with no error")

    def unwrap_or(self, default: T) -> T:
        """Get value or return default."""
        if self.success:
            return self.value  # type: ignore
        return default


# =============================================================================
# Error Base Classes
# =============================================================================


class BlockPressError(Exception):
    """Base exception for all blockpress errors.

    Attributes:
        message: Human-readable error description
        recoverable: Whether the operation can be retried
        context: Additional context for debugging
    """

    def __init__(
        self,
        message: str,
        *,
        recoverable: bool = False,
        context: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.recoverable = recoverable
        self.context = context or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert to structured dictionary for RPC responses."""
        return {
            "type": type(self).__name__.lower().replace("error", ""),
            "message": self.message,
            "recoverable": self.recoverable,
            **{k: v for k, v in self.context.items() if v is not None},
        }


# =============================================================================
# Validation Errors
# =============================================================================


class ValidationError(BlockPressError):
    """Input validation failed.

    Example:
        raise ValidationError("Image URL is required", field="src")
    """

    def __init__(
        self,
        message: str,
        *,
        field: str | None = None,
        value: Any = None,
        constraint: str | None = None,
        **kwargs: Any,
    ) -> None:
        context = kwargs.pop("context", {})
        if field:
            context["field"] = field
        if constraint:
            context["constraint"] = constraint
        if value is not None:
            context["value"] = _truncate(str(value), 100)
        super().__init__(message, recoverable=False, context=context)
        self.field = field
        self.constraint = constraint


class ContentValidationError(ValidationError):
    """Persisted block payload does not match the content schema."""

    def __init__(
        self,
        message: str,
        *,
        errors: list[dict[str, Any]] | None = None,
    ) -> None:
        super().__init__(
            message,
            field="blocks",
            context={"errors": errors or None},
        )
        self.errors = errors or []


# =============================================================================
# Codec Errors
# =============================================================================


INVALID_SHAPE = "invalid_shape"
UNSUPPORTED_TYPE = "unsupported_type"
INVALID_INLINE = "invalid_inline"


class CodecError(BlockPressError):
    """A block could not be converted between the editor and persisted formats.

    The whole batch fails with the first error; ``block_index`` points at the
    offending block.
    """

    def __init__(
        self,
        message: str,
        *,
        block_index: int | None = None,
        block_type: str | None = None,
        reason: str = INVALID_SHAPE,
        **kwargs: Any,
    ) -> None:
        context = kwargs.pop("context", {})
        context["reason"] = reason
        if block_index is not None:
            context["block_index"] = block_index
        if block_type:
            context["block_type"] = _truncate(block_type, 50)
        super().__init__(message, recoverable=False, context=context)
        self.block_index = block_index
        self.block_type = block_type
        self.reason = reason

    @property
    def is_unsupported(self) -> bool:
        return self.reason == UNSUPPORTED_TYPE


class SerializationError(CodecError):
    """Editor blocks could not be converted to the persisted format."""


class DeserializationError(CodecError):
    """Persisted blocks could not be converted to editor blocks."""


# =============================================================================
# Mutation Errors
# =============================================================================


class MutationError(BlockPressError):
    """A mutation was refused.

    Only raised by sessions running in strict mode; the pure mutation
    functions never raise and return the state unchanged instead.
    """

    def __init__(
        self,
        message: str,
        *,
        operation: str | None = None,
        block_id: str | None = None,
        **kwargs: Any,
    ) -> None:
        context = kwargs.pop("context", {})
        if operation:
            context["operation"] = operation
        if block_id:
            context["block_id"] = block_id
        super().__init__(message, recoverable=False, context=context)
        self.operation = operation
        self.block_id = block_id


class BlockNotFoundError(MutationError):
    """The target block id is not in the document."""


class MutationRejectedError(MutationError):
    """The target exists but the operation does not apply (boundary, ineligible merge)."""


# =============================================================================
# Editor Command Errors
# =============================================================================


class EditorCommandError(BlockPressError):
    """A formatting command could not be executed by the host surface."""

    def __init__(
        self,
        message: str,
        *,
        command: str | None = None,
    ) -> None:
        super().__init__(
            message,
            recoverable=True,
            context={"command": command},
        )
        self.command = command


# =============================================================================
# Configuration Errors
# =============================================================================


class ConfigurationError(BlockPressError):
    """Configuration or setup issue."""

    def __init__(
        self,
        message: str,
        *,
        setting: str | None = None,
        expected: str | None = None,
    ) -> None:
        super().__init__(
            message,
            recoverable=False,
            context={
                "setting": setting,
                "expected": expected,
            },
        )


# =============================================================================
# Helpers
# =============================================================================


def _truncate(value: str | None, max_len: int) -> str | None:
    """Truncate a string value for safe logging."""
    if value is None:
        return None
    if len(value) <= max_len:
        return value
    return value[:max_len] + "..."


# =============================================================================
# RPC Error Code Mapping
# =============================================================================


# Map domain errors to JSON-RPC error codes
ERROR_CODES: dict[type[BlockPressError], int] = {
    ValidationError: -32000,
    ContentValidationError: -32001,
    CodecError: -32010,
    SerializationError: -32011,
    DeserializationError: -32012,
    MutationError: -32020,
    BlockNotFoundError: -32021,
    MutationRejectedError: -32022,
    EditorCommandError: -32030,
    ConfigurationError: -32040,
}


def get_error_code(exc: BlockPressError) -> int:
    """Get the JSON-RPC error code for a domain error."""
    # Check exact type first
    if type(exc) in ERROR_CODES:
        return ERROR_CODES[type(exc)]
    # Check parent types
    for error_type, code in ERROR_CODES.items():
        if isinstance(exc, error_type):
            return code
    # Default internal error
    return -32603
