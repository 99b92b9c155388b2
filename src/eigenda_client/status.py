"""Dispersal lifecycle: request results and blob status.

A dispersal starts out ``PROCESSING`` and ends ``CONFIRMED``, ``FAILED`` or
in some other state the disperser reports (``OTHER``, treated as terminal).
Confirmation data only exists once a blob is ``CONFIRMED``; every accessor
that reaches into it raises ``BlobNotConfirmedError`` in any other state, so
callers must branch on ``status.state`` first.
"""

from enum import Enum
from typing import Optional, Tuple

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, model_serializer, model_validator

from eigenda_client.errors import BlobNotConfirmedError
from eigenda_client.models import (
    BatchHeader,
    BatchMetadata,
    BlobCommitment,
    BlobHeader,
    BlobInfo,
    BlobQuorumParams,
    BlobVerificationProof,
    WireModel,
)
from eigenda_client.values import (
    BatchHeaderHash,
    BatchRoot,
    BlobFee,
    InclusionProof,
    QuorumIndexes,
    QuorumNumbers,
    QuorumSignedPercentages,
    SignatoryRecordHash,
)


class BlobState(str, Enum):
    PROCESSING = "PROCESSING"
    CONFIRMED = "CONFIRMED"
    FAILED = "FAILED"
    OTHER = "OTHER"


# Protobuf enum numbers of the disperser's BlobStatus
_STATE_NUMBERS = {
    1: BlobState.PROCESSING,
    2: BlobState.CONFIRMED,
    3: BlobState.FAILED,
}


class BlobResult(BaseModel):
    """Lifecycle state of a dispersal, with the raw name for unknown states."""

    model_config = ConfigDict(frozen=True)

    state: BlobState = BlobState.PROCESSING
    reason: Optional[str] = None

    @model_validator(mode="before")
    @classmethod
    def _from_wire(cls, value):
        if isinstance(value, bool):
            return value
        if isinstance(value, int):
            state = _STATE_NUMBERS.get(value)
            if state is None:
                return {"state": BlobState.OTHER, "reason": str(value)}
            return {"state": state}
        if isinstance(value, str):
            name = value.strip().upper()
            if name in (BlobState.PROCESSING.value, BlobState.CONFIRMED.value, BlobState.FAILED.value):
                return {"state": BlobState(name)}
            return {"state": BlobState.OTHER, "reason": value}
        return value

    @classmethod
    def from_wire(cls, value) -> "BlobResult":
        return cls.model_validate(value)

    @model_serializer
    def _to_wire(self) -> str:
        return str(self)

    @property
    def is_terminal(self) -> bool:
        return self.state is not BlobState.PROCESSING

    def __str__(self) -> str:
        if self.state is BlobState.OTHER:
            return self.reason or BlobState.OTHER.value
        return self.state.value


class BlobResponse(WireModel):
    """Immediate answer to a dispersal: its state and the request identifier."""

    result: BlobResult = Field(default_factory=BlobResult)
    request_id: str = ""


class BlobStatus(WireModel):
    """Answer to a status query."""

    status: BlobResult = Field(
        default_factory=BlobResult,
        validation_alias=AliasChoices("status", "result"),
    )
    info: Optional[BlobInfo] = None

    @model_validator(mode="after")
    def _confirmed_carries_info(self):
        if self.status.state is BlobState.CONFIRMED and self.info is None:
            raise ValueError("CONFIRMED status carries no blob info")
        return self

    @property
    def state(self) -> BlobState:
        return self.status.state

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal

    @property
    def is_confirmed(self) -> bool:
        return self.status.state is BlobState.CONFIRMED

    def confirmed_info(self) -> BlobInfo:
        """Return the blob info of a confirmed blob.

        Raises:
            BlobNotConfirmedError: if the status is anything but CONFIRMED
        """
        if not self.is_confirmed or self.info is None:
            raise BlobNotConfirmedError(self.status)
        return self.info

    def blob_header(self) -> BlobHeader:
        return self.confirmed_info().blob_header

    def blob_verification_proof(self) -> BlobVerificationProof:
        return self.confirmed_info().blob_verification_proof

    def commitment(self) -> BlobCommitment:
        return self.blob_header().commitment

    def data_length(self) -> int:
        return self.blob_header().data_length

    def blob_quorum_params(self) -> Tuple[BlobQuorumParams, ...]:
        return self.blob_header().blob_quorum_params

    def batch_id(self) -> int:
        return self.blob_verification_proof().batch_id

    def blob_index(self) -> int:
        return self.blob_verification_proof().blob_index

    def batch_metadata(self) -> BatchMetadata:
        return self.blob_verification_proof().batch_metadata

    def inclusion_proof(self) -> InclusionProof:
        return self.blob_verification_proof().inclusion_proof

    def quorum_indexes(self) -> QuorumIndexes:
        return self.blob_verification_proof().quorum_indexes

    def batch_header(self) -> BatchHeader:
        return self.batch_metadata().batch_header

    def signatory_record_hash(self) -> SignatoryRecordHash:
        return self.batch_metadata().signatory_record_hash

    def fee(self) -> BlobFee:
        return self.batch_metadata().fee

    def confirmation_block_number(self) -> int:
        return self.batch_metadata().confirmation_block_number

    def batch_header_hash(self) -> BatchHeaderHash:
        return self.batch_metadata().batch_header_hash

    def batch_root(self) -> BatchRoot:
        return self.batch_header().batch_root

    def quorum_numbers(self) -> QuorumNumbers:
        return self.batch_header().quorum_numbers

    def quorum_signed_percentages(self) -> QuorumSignedPercentages:
        return self.batch_header().quorum_signed_percentages

    def reference_block_number(self) -> int:
        return self.batch_header().reference_block_number
