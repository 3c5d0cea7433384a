"""
Schemas package.

Error taxonomy, canonical JSON, and the serializable proof document.
"""

from .errors import (
    ErrorCodes,
    ArborError,
    ArborException,
    EmptyInputException,
    IndexOutOfRangeException,
    ElementTypeException,
    InvalidDigestException,
    UnsupportedHashAlgorithmException,
    ProofFormatException,
    CanonicalizationException,
)
from .canonical import (
    canonicalize_value,
    dumps_canonical,
    canonical_equals,
)
from .proof import (
    PROOF_SCHEMA_VERSION,
    ProofStepModel,
    ProofDocument,
)

__all__ = [
    # Errors
    "ErrorCodes",
    "ArborError",
    "ArborException",
    "EmptyInputException",
    "IndexOutOfRangeException",
    "ElementTypeException",
    "InvalidDigestException",
    "UnsupportedHashAlgorithmException",
    "ProofFormatException",
    "CanonicalizationException",
    # Canonical JSON
    "canonicalize_value",
    "dumps_canonical",
    "canonical_equals",
    # Proof documents
    "PROOF_SCHEMA_VERSION",
    "ProofStepModel",
    "ProofDocument",
]
