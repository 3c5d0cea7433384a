"""
Schemas & Errors
File: errors.py

Purpose: Error taxonomy for the Merkle tree core.
Defines both a Pydantic model for structured error reporting
and Python exceptions for control flow.

Every error is local to the call that raised it and deterministic
for the same inputs, so nothing here is retryable.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


# =============================================================================
# Error Codes (Machine-Readable Constants)
# =============================================================================

class ErrorCodes:
    """Stable machine-readable error codes."""

    # Tree construction
    EMPTY_INPUT = "EMPTY_INPUT"
    ELEMENT_TYPE_INVALID = "ELEMENT_TYPE_INVALID"
    INVALID_DIGEST = "INVALID_DIGEST"

    # Proofs
    INDEX_OUT_OF_RANGE = "INDEX_OUT_OF_RANGE"
    PROOF_FORMAT_INVALID = "PROOF_FORMAT_INVALID"

    # Hashing & serialization
    UNSUPPORTED_HASH_ALGORITHM = "UNSUPPORTED_HASH_ALGORITHM"
    CANONICALIZATION_ERROR = "CANONICALIZATION_ERROR"


# =============================================================================
# Pydantic Error Model (Structured Communication)
# =============================================================================

class ArborError(BaseModel):
    """
    Error model for structured error reporting (e.g. CLI JSON output).
    """

    model_config = ConfigDict(extra="forbid")

    code: str = Field(
        ...,
        description="Stable machine-readable error code",
        examples=[ErrorCodes.EMPTY_INPUT],
    )
    message: str = Field(..., description="Human-readable error message")
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional structured details about the error",
    )
    retryable: bool = Field(default=False)

    def to_exception(self) -> "ArborException":
        """Convert this error model to a raisable exception."""
        return ArborException(
            code=self.code,
            message=self.message,
            details=self.details,
            retryable=self.retryable,
        )


# =============================================================================
# Python Exceptions (Control Flow)
# =============================================================================

class ArborException(Exception):
    """
    Base exception for all Merkle tree errors.

    Carries structured error information and converts to an ArborError model.
    """

    def __init__(
        self,
        message: str,
        code: str = "ARBOR_ERROR",
        details: dict[str, Any] | None = None,
        retryable: bool = False,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.details = details or {}
        self.retryable = retryable

    def to_error_model(self) -> ArborError:
        """Convert this exception to an ArborError model."""
        return ArborError(
            code=self.code,
            message=self.message,
            details=self.details,
            retryable=self.retryable,
        )

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.code!r}, message={self.message!r})"


class EmptyInputException(ArborException, ValueError):
    """Raised when a tree is built from zero elements."""

    def __init__(self, message: str = "Cannot build a Merkle tree from zero elements") -> None:
        super().__init__(message=message, code=ErrorCodes.EMPTY_INPUT)


class IndexOutOfRangeException(ArborException, IndexError):
    """Raised when a proof is requested for an index that is not a current leaf."""

    def __init__(self, index: int, leaf_count: int) -> None:
        super().__init__(
            message=f"Leaf index {index} out of range for {leaf_count} leaves",
            code=ErrorCodes.INDEX_OUT_OF_RANGE,
            details={"index": index, "leaf_count": leaf_count},
        )


class ElementTypeException(ArborException, TypeError):
    """Raised when an element has no byte encoding."""

    def __init__(self, element: Any, position: int | None = None) -> None:
        details: dict[str, Any] = {"type": type(element).__name__}
        if position is not None:
            details["position"] = position
        super().__init__(
            message=(
                f"Element of type {type(element).__name__} is not bytes or str"
            ),
            code=ErrorCodes.ELEMENT_TYPE_INVALID,
            details=details,
        )


class InvalidDigestException(ArborException, ValueError):
    """Raised when leaf digests are not bytes of one fixed width."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(
            message=message,
            code=ErrorCodes.INVALID_DIGEST,
            details=details,
        )


class UnsupportedHashAlgorithmException(ArborException, ValueError):
    """Raised when a hash function is requested by an unknown name."""

    def __init__(self, name: str, supported: list[str] | None = None) -> None:
        super().__init__(
            message=f"Unsupported hash algorithm: {name!r}",
            code=ErrorCodes.UNSUPPORTED_HASH_ALGORITHM,
            details={"name": name, "supported": supported or []},
        )


class ProofFormatException(ArborException):
    """Raised when a serialized proof document cannot be decoded."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(
            message=message,
            code=ErrorCodes.PROOF_FORMAT_INVALID,
            details=details,
        )


class CanonicalizationException(ArborException):
    """Raised when canonical serialization fails."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(
            message=message,
            code=ErrorCodes.CANONICALIZATION_ERROR,
            details=details,
        )
