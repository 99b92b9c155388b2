"""Tests for disperser response parsing."""

import json

import pytest

from eigenda_client.errors import MalformedResponseError, ProofValidationError
from eigenda_client.parser import ParsePolicy, ResponseParser, clean_response, extract_json
from eigenda_client.status import BlobState


@pytest.fixture
def parser():
    return ResponseParser()


@pytest.fixture
def strict_parser():
    return ResponseParser(policy=ParsePolicy.PROPAGATE_ERROR)


class TestHelpers:

    def test_extract_json_skips_banner(self):
        assert extract_json('Resolved method\n{"a": 1}') == '{"a": 1}'

    def test_extract_json_without_object(self):
        assert extract_json("no json here") is None

    def test_clean_response(self):
        assert clean_response('{\n\t"a":   1}') == '{ "a": 1}'
        assert clean_response('{"a":\\n1}') == '{"a": 1}'


class TestParseResponse:

    def test_parse(self, parser):
        response = parser.parse_response('{"result": "PROCESSING", "requestId": "abc"}')
        assert response.result.state is BlobState.PROCESSING
        assert response.request_id == "abc"

    def test_banner_before_json(self, parser):
        raw = b'WARNING: something\n{\n  "result": "PROCESSING",\n  "requestId": "abc"\n}\n'
        assert parser.parse_response(raw).request_id == "abc"

    def test_no_json_falls_back(self, parser):
        response = parser.parse_response("garbage")
        assert response.request_id == ""
        assert response.result.state is BlobState.PROCESSING

    def test_fallback_is_logged(self, parser, logs):
        parser.parse_response("garbage")
        assert logs[-1]["log_level"] == "error"
        assert logs[-1]["kind"] == "response"
        assert "No JSON object" in logs[-1]["error"]

    def test_no_json_propagates(self, strict_parser):
        with pytest.raises(MalformedResponseError, match="No JSON object"):
            strict_parser.parse_response("garbage")

    def test_invalid_document_propagates(self, strict_parser):
        with pytest.raises(MalformedResponseError, match="Invalid response document"):
            strict_parser.parse_response('{"requestId": 5')

    def test_policy_from_string(self):
        assert ResponseParser(policy="propagate").policy is ParsePolicy.PROPAGATE_ERROR


class TestParseStatus:

    def test_confirmed(self, parser, confirmed_json):
        status = parser.parse_status(confirmed_json)
        assert status.is_confirmed
        assert status.blob_index() == 162

    def test_pretty_printed_bytes(self, parser, confirmed_json):
        raw = ("Resolved method descriptor:\n" + confirmed_json).encode("utf-8")
        assert parser.parse_status(raw).batch_id() == 7781

    def test_malformed_falls_back_to_processing(self, parser):
        status = parser.parse_status('{"status": "CONFIRMED"}')
        assert status.state is BlobState.PROCESSING
        assert status.info is None

    def test_malformed_propagates(self, strict_parser):
        with pytest.raises(MalformedResponseError):
            strict_parser.parse_status('{"status": "CONFIRMED", "info": {"blobHeader": 3}}')

    def test_structure_not_checked_by_default(self, parser, confirmed_document):
        confirmed_document["info"]["blobVerificationProof"]["quorumIndexes"] = "AA=="
        assert parser.parse_status(json.dumps(confirmed_document)).is_confirmed

    def test_structure_checked_when_enabled(self, confirmed_document):
        confirmed_document["info"]["blobVerificationProof"]["quorumIndexes"] = "AA=="
        parser = ResponseParser(policy=ParsePolicy.PROPAGATE_ERROR, validate=True)
        with pytest.raises(ProofValidationError):
            parser.parse_status(json.dumps(confirmed_document))

    def test_structure_failure_raises_under_default_policy(self, confirmed_document):
        confirmed_document["info"]["blobVerificationProof"]["quorumIndexes"] = "AA=="
        parser = ResponseParser(validate=True)
        with pytest.raises(ProofValidationError, match="1 quorum indexes"):
            parser.parse_status(json.dumps(confirmed_document))

    def test_unknown_state(self, parser):
        status = parser.parse_status('{"status": "INSUFFICIENT_SIGNATURES"}')
        assert status.state is BlobState.OTHER
        assert status.is_terminal
