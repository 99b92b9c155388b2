"""Parsing of disperser responses.

The transport may print diagnostic text before the JSON document, so parsing
starts at the first ``{``.

What happens when a response cannot be parsed is a policy choice:

``ParsePolicy.USE_DEFAULT``
    Log the failure and return the default value: a ``PROCESSING``
    ``BlobStatus`` or a ``BlobResponse`` with an empty request id. A default
    cannot be told apart from a genuine processing answer, so the failure is
    always logged and counted in metrics.

``ParsePolicy.PROPAGATE_ERROR``
    Raise ``MalformedResponseError``.

With ``validate=True`` a confirmation proof that fails structural
validation raises ``ProofValidationError`` under either policy.

Transport failures are never handled here; they reach the caller from the
client as ``TransportError``.
"""

import re
from enum import Enum
from typing import Optional, Type, TypeVar, Union

from pydantic import BaseModel, ValidationError

from eigenda_client.errors import MalformedResponseError, ProofValidationError
from eigenda_client.logging_config import get_logger
from eigenda_client.metrics import metrics
from eigenda_client.status import BlobResponse, BlobStatus

logger = get_logger(__name__)

M = TypeVar('M', bound=BaseModel)

# Escaped newlines/tabs, newline+tab pairs and whitespace runs from pretty-printed output
_NOISE = re.compile(r"(\\n|\\t|\n\t|\s\s+)")


class ParsePolicy(str, Enum):
    USE_DEFAULT = "use_default"
    PROPAGATE_ERROR = "propagate"


def extract_json(raw_text: str) -> Optional[str]:
    """Return the text from the first ``{`` on, or None if there is none."""
    start = raw_text.find("{")
    if start < 0:
        return None
    return raw_text[start:]


def clean_response(raw_text: str) -> str:
    return _NOISE.sub(" ", raw_text)


class ResponseParser:
    """Turns raw disperser output into response models."""

    def __init__(self, policy: ParsePolicy = ParsePolicy.USE_DEFAULT, validate: bool = False):
        self.policy = ParsePolicy(policy)
        self.validate = validate

    def parse_response(self, raw: Union[str, bytes]) -> BlobResponse:
        """Parse the answer to a DisperseBlob call."""
        return self._parse(raw, BlobResponse, kind="response")

    def parse_status(self, raw: Union[str, bytes]) -> BlobStatus:
        """Parse the answer to a GetBlobStatus call."""
        if isinstance(raw, bytes):
            raw = raw.decode("utf-8", errors="replace")
        return self._parse(clean_response(raw), BlobStatus, kind="status")

    def _parse(self, raw: Union[str, bytes], model: Type[M], kind: str) -> M:
        if isinstance(raw, bytes):
            raw = raw.decode("utf-8", errors="replace")
        try:
            document = extract_json(raw)
            if document is None:
                raise MalformedResponseError(f"No JSON object in {kind} output")
            try:
                parsed = model.model_validate_json(document)
            except ValidationError as e:
                raise MalformedResponseError(f"Invalid {kind} document: {e}") from e
            if self.validate and isinstance(parsed, BlobStatus) and parsed.info is not None:
                parsed.info.validate_structure()
            return parsed
        except ProofValidationError as e:
            metrics.record_parse_failure(kind)
            logger.error("Confirmation proof failed validation", kind=kind, error=str(e))
            raise
        except MalformedResponseError as e:
            metrics.record_parse_failure(kind)
            if self.policy is ParsePolicy.PROPAGATE_ERROR:
                logger.error("Failed to parse disperser output", kind=kind, error=str(e))
                raise
            logger.error("Failed to parse disperser output, using default",
                         kind=kind, error=str(e))
            return model()
