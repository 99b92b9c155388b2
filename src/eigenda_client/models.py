"""Verification data model returned by the disperser for a confirmed blob.

The hierarchy mirrors the disperser's ``BlobInfo`` message::

    BlobInfo
    ├── BlobHeader
    │   ├── BlobCommitment
    │   └── BlobQuorumParams[]
    └── BlobVerificationProof
        └── BatchMetadata
            └── BatchHeader

Field names are snake_case in Python and camelCase on the wire. Scalars the
disperser leaves at their zero value are omitted from its JSON output, so
every scalar defaults to zero here.

Parsing only checks shape. ``validate_structure()`` checks the invariants
that hold between fields; it does not verify signatures or Merkle proofs.
"""

from typing import Dict, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from eigenda_client.errors import ProofValidationError
from eigenda_client.values import (
    BatchHeaderHash,
    BatchRoot,
    BlobFee,
    EncodedValue,
    InclusionProof,
    QuorumIndexes,
    QuorumNumbers,
    QuorumSignedPercentages,
    SignatoryRecordHash,
)


class WireModel(BaseModel):
    """Immutable model with camelCase wire names."""

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )


def _decode(value: EncodedValue, field: str) -> bytes:
    try:
        return value.decode()
    except ValueError as e:
        raise ProofValidationError(f"{field}: {e}") from e


class BlobCommitment(WireModel):
    """KZG commitment to the blob, as a G1 point."""
    x: str = ""
    y: str = ""


class BlobQuorumParams(WireModel):
    """Security parameters a blob was dispersed with for one quorum."""

    quorum_number: int = 0
    adversary_threshold_percentage: int = 0
    quorum_threshold_percentage: int = 0
    quantization_param: int = 0
    # uint64 on the wire, rendered as a JSON string
    encoded_length: str = ""

    @field_validator("encoded_length", mode="before")
    @classmethod
    def _coerce_encoded_length(cls, value):
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value

    def validate_structure(self) -> None:
        adversary = self.adversary_threshold_percentage
        quorum = self.quorum_threshold_percentage
        if not 0 <= adversary < quorum <= 100:
            raise ProofValidationError(
                f"quorum {self.quorum_number}: thresholds must satisfy "
                f"0 <= adversary ({adversary}) < quorum ({quorum}) <= 100"
            )


SecurityParams = BlobQuorumParams


class BlobHeader(WireModel):
    commitment: BlobCommitment = Field(default_factory=BlobCommitment)
    data_length: int = 0
    blob_quorum_params: Tuple[BlobQuorumParams, ...] = ()

    def validate_structure(self) -> None:
        if not self.blob_quorum_params:
            raise ProofValidationError("blob header carries no quorum params")
        for params in self.blob_quorum_params:
            params.validate_structure()


class BatchHeader(WireModel):
    batch_root: BatchRoot = Field(default_factory=BatchRoot)
    quorum_numbers: QuorumNumbers = Field(default_factory=QuorumNumbers)
    quorum_signed_percentages: QuorumSignedPercentages = Field(default_factory=QuorumSignedPercentages)
    reference_block_number: int = 0

    def quorum_signatures(self) -> Dict[int, int]:
        """Map each quorum number to the percentage of its stake that signed.

        Raises:
            ProofValidationError: if the two sets cannot be paired
        """
        self.validate_structure()
        numbers = _decode(self.quorum_numbers, "quorumNumbers")
        percentages = _decode(self.quorum_signed_percentages, "quorumSignedPercentages")
        return dict(zip(numbers, percentages))

    def validate_structure(self) -> None:
        numbers = _decode(self.quorum_numbers, "quorumNumbers")
        percentages = _decode(self.quorum_signed_percentages, "quorumSignedPercentages")
        if len(numbers) != len(percentages):
            raise ProofValidationError(
                f"batch header lists {len(numbers)} quorums but "
                f"{len(percentages)} signed percentages"
            )


class BatchMetadata(WireModel):
    batch_header: BatchHeader = Field(default_factory=BatchHeader)
    signatory_record_hash: SignatoryRecordHash = Field(default_factory=SignatoryRecordHash)
    fee: BlobFee = Field(default_factory=BlobFee)
    confirmation_block_number: int = 0
    batch_header_hash: BatchHeaderHash = Field(default_factory=BatchHeaderHash)

    def validate_structure(self) -> None:
        self.batch_header.validate_structure()
        reference = self.batch_header.reference_block_number
        if self.confirmation_block_number < reference:
            raise ProofValidationError(
                f"confirmation block {self.confirmation_block_number} precedes "
                f"reference block {reference}"
            )


class BlobVerificationProof(WireModel):
    batch_id: int = 0
    blob_index: int = Field(default=0, ge=0)
    batch_metadata: BatchMetadata = Field(default_factory=BatchMetadata)
    inclusion_proof: InclusionProof = Field(default_factory=InclusionProof)
    quorum_indexes: QuorumIndexes = Field(default_factory=QuorumIndexes)

    def validate_structure(self) -> None:
        self.batch_metadata.validate_structure()


class BlobInfo(WireModel):
    """Header and inclusion proof of a confirmed blob."""

    blob_header: BlobHeader = Field(default_factory=BlobHeader)
    blob_verification_proof: BlobVerificationProof = Field(default_factory=BlobVerificationProof)

    def validate_structure(self) -> None:
        """Check every structural invariant of the confirmation data.

        Raises:
            ProofValidationError: naming the first invariant that does not hold
        """
        self.blob_header.validate_structure()
        proof = self.blob_verification_proof
        proof.validate_structure()

        indexes = _decode(proof.quorum_indexes, "quorumIndexes")
        params = self.blob_header.blob_quorum_params
        if len(indexes) != len(params):
            raise ProofValidationError(
                f"{len(indexes)} quorum indexes for {len(params)} blob quorums"
            )
        batch_quorums = _decode(proof.batch_metadata.batch_header.quorum_numbers, "quorumNumbers")
        for index in indexes:
            if index >= len(batch_quorums):
                raise ProofValidationError(
                    f"quorum index {index} outside the batch's {len(batch_quorums)} quorums"
                )
