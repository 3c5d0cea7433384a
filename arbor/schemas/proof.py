"""
Schemas & Canonicalization
File: proof.py

Purpose: Serializable form of a Merkle inclusion proof.

A ProofDocument is what leaves the process (CLI output, files handed to a
verifier). Digests are carried as 0x-prefixed hex strings.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

PROOF_SCHEMA_VERSION = "1.0"

HEX_DIGEST_PATTERN = r"^0x([0-9a-fA-F]{2})+$"


class ProofStepModel(BaseModel):
    """One sibling digest and the side it is hashed on."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    sibling: str = Field(..., pattern=HEX_DIGEST_PATTERN, description="Sibling digest (0x hex)")
    side: Literal["left", "right"] = Field(
        ..., description="Whether the sibling is the left or right operand"
    )


class ProofDocument(BaseModel):
    """
    A self-contained inclusion proof.

    Verification needs this document, the element bytes, and a trusted
    root. The embedded root is informational; a verifier should compare
    against a root it obtained independently.
    """

    model_config = ConfigDict(extra="forbid")

    schema_version: str = Field(default=PROOF_SCHEMA_VERSION)
    hash_algorithm: str = Field(default="sha256", min_length=1)
    leaf_index: int = Field(..., ge=0)
    root: str | None = Field(default=None, pattern=HEX_DIGEST_PATTERN)
    steps: list[ProofStepModel] = Field(default_factory=list)

    @property
    def depth(self) -> int:
        """Number of hashing rounds from leaf to root."""
        return len(self.steps)
