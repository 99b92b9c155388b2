from .client import DisperserClient
from .cache import LruResponseCache, ResponseCache
from .config import ClientConfig, Config, load_config
from .errors import (
    EigenDAClientError,
    TransportError,
    MalformedResponseError,
    ProofValidationError,
    BlobNotConfirmedError,
    ConfigurationError,
    PollTimeoutError,
    PollCancelledError,
)
from .models import (
    BatchHeader,
    BatchMetadata,
    BlobCommitment,
    BlobHeader,
    BlobInfo,
    BlobQuorumParams,
    BlobVerificationProof,
    SecurityParams,
)
from .parser import ParsePolicy, ResponseParser
from .payload import PayloadVersion, encode_payload
from .retry import PollPolicy
from .status import BlobResponse, BlobResult, BlobState, BlobStatus
from .transport import GrpcurlTransport, InvocationResult, Transport
from .values import (
    BatchHeaderHash,
    BatchRoot,
    BlobFee,
    InclusionProof,
    QuorumIndexes,
    QuorumNumbers,
    QuorumSignedPercentages,
    SignatoryRecordHash,
)
