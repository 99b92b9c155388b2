"""Opaque wire values carried by a blob verification proof.

The disperser renders protobuf ``bytes`` fields as base64 text. Each field
gets its own nominal type so that, for example, a batch root can never be
passed where a set of quorum numbers is expected. The types carry the text
as received and never validate it on construction.
"""

import base64

from pydantic import ConfigDict, RootModel


class EncodedValue(RootModel[str]):
    """Base for immutable, base64-carrying wire values."""

    model_config = ConfigDict(frozen=True)

    root: str = ""

    def __str__(self) -> str:
        return self.root

    def decode(self) -> bytes:
        """Return the base64-decoded payload.

        Raises:
            ValueError: if the payload is not valid base64
        """
        try:
            return base64.b64decode(self.root, validate=True)
        except ValueError as e:
            raise ValueError(f"{type(self).__name__} is not valid base64: {e}") from e


class BatchRoot(EncodedValue):
    """Merkle root of the blob headers in a batch."""


class BatchHeaderHash(EncodedValue):
    """Hash of a batch header; together with a blob index it locates a blob."""


class QuorumNumbers(EncodedValue):
    """One byte per quorum that signed the batch."""


class QuorumSignedPercentages(EncodedValue):
    """One byte per quorum: the stake percentage that signed."""


class QuorumIndexes(EncodedValue):
    """For each blob quorum, its position in the batch quorum numbers."""


class BlobFee(EncodedValue):
    pass


class SignatoryRecordHash(EncodedValue):
    pass


class InclusionProof(EncodedValue):
    """Merkle proof of the blob header within the batch root."""
