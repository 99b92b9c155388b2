import copy
import json

import pytest
from structlog.testing import capture_logs

from eigenda_client.transport import InvocationResult

CONFIRMED_STATUS = {
    "status": "CONFIRMED",
    "info": {
        "blobHeader": {
            "commitment": {"x": "eA==", "y": "eQ=="},
            "dataLength": 1,
            "blobQuorumParams": [
                {
                    "adversaryThresholdPercentage": 33,
                    "quorumThresholdPercentage": 55,
                    "quantizationParam": 1,
                    "encodedLength": "64",
                },
                {
                    "quorumNumber": 1,
                    "adversaryThresholdPercentage": 33,
                    "quorumThresholdPercentage": 55,
                    "quantizationParam": 1,
                    "encodedLength": "64",
                },
            ],
        },
        "blobVerificationProof": {
            "batchId": 7781,
            "blobIndex": 162,
            "batchMetadata": {
                "batchHeader": {
                    "batchRoot": "cm9vdA==",
                    "quorumNumbers": "AAE=",
                    "quorumSignedPercentages": "ZGQ=",
                    "referenceBlockNumber": 1570231,
                },
                "signatoryRecordHash": "c2lnbmF0b3J5",
                "fee": "AA==",
                "confirmationBlockNumber": 1570321,
                "batchHeaderHash": "aGFzaA==",
            },
            "inclusionProof": "cHJvb2Y=",
            "quorumIndexes": "AAE=",
        },
    },
}


class FakeTransport:
    """Transport that replays canned results and records every call."""

    def __init__(self, results=None):
        self.results = list(results or [])
        self.calls = []

    async def invoke(self, method, request_json):
        self.calls.append((method, json.loads(request_json)))
        return self.results.pop(0)


def ok(stdout):
    if isinstance(stdout, dict):
        stdout = json.dumps(stdout, indent=2)
    if isinstance(stdout, str):
        stdout = stdout.encode("utf-8")
    return InvocationResult(success=True, stdout=stdout, stderr=b"")


def fail(stderr):
    return InvocationResult(success=False, stdout=b"", stderr=stderr.encode("utf-8"))


@pytest.fixture
def confirmed_document():
    return copy.deepcopy(CONFIRMED_STATUS)


@pytest.fixture
def confirmed_json(confirmed_document):
    return json.dumps(confirmed_document, indent=2)


@pytest.fixture(autouse=True)
def logs():
    """Capture structured log events instead of printing them."""
    with capture_logs() as captured:
        yield captured
