"""Wire payload for a dispersal request.

Two payload shapes are in use::

    v1  {"data": "<base64>"}
    v2  {"data": "<base64>", "security_params": [{"quorum_id": N,
                                                   "adversary_threshold": N,
                                                   "quorum_threshold": N}]}

Thresholds are passed through as given; the disperser rejects invalid ones.
"""

import base64
from enum import Enum
from typing import Optional, Tuple

from pydantic import BaseModel, ConfigDict


class PayloadVersion(str, Enum):
    V1 = "v1"
    V2 = "v2"


class SecurityParam(BaseModel):
    model_config = ConfigDict(frozen=True)

    quorum_id: int
    adversary_threshold: int
    quorum_threshold: int


class DispersalPayload(BaseModel):
    model_config = ConfigDict(frozen=True)

    data: str
    security_params: Optional[Tuple[SecurityParam, ...]] = None

    def to_json(self) -> str:
        return self.model_dump_json(exclude_none=True)

    def raw_data(self) -> bytes:
        return base64.b64decode(self.data)


def encode_payload(
    data: bytes,
    quorum_id: int,
    adversary_threshold: int,
    quorum_threshold: int,
    version: PayloadVersion = PayloadVersion.V2,
) -> str:
    """
    Build the JSON payload for a DisperseBlob request.

    Args:
        data: Raw blob content
        quorum_id: Quorum the blob is dispersed to
        adversary_threshold: Adversary threshold percentage
        quorum_threshold: Quorum threshold percentage
        version: Payload shape to emit

    Returns:
        Compact JSON text
    """
    encoded = base64.b64encode(bytes(data)).decode("ascii")
    if PayloadVersion(version) is PayloadVersion.V1:
        return DispersalPayload(data=encoded).to_json()

    params = SecurityParam(
        quorum_id=quorum_id,
        adversary_threshold=adversary_threshold,
        quorum_threshold=quorum_threshold,
    )
    return DispersalPayload(data=encoded, security_params=(params,)).to_json()


def decode_payload(text: str) -> DispersalPayload:
    return DispersalPayload.model_validate_json(text)
