"""Client for the EigenDA disperser: disperse, poll and retrieve blobs."""

import asyncio
import json
import os
from typing import Dict, Optional, Union

from eigenda_client.cache import LruResponseCache, ResponseCache
from eigenda_client.config import ClientConfig, load_config
from eigenda_client.errors import ConfigurationError, TransportError
from eigenda_client.logging_config import get_logger
from eigenda_client.metrics import metrics
from eigenda_client.parser import ResponseParser
from eigenda_client.payload import encode_payload
from eigenda_client.retry import PollPolicy, exponential_backoff, poll_until_terminal
from eigenda_client.status import BlobResponse, BlobStatus
from eigenda_client.transport import GrpcurlTransport, Transport
from eigenda_client.values import BatchHeaderHash

logger = get_logger(__name__)


class DisperserClient:
    """Disperses blobs, tracks their status and retrieves them.

    Each call goes encode, dispatch, parse and, for accepted dispersals,
    cache. Transport failures always propagate as ``TransportError``;
    unparseable output is handled by the parser's policy.
    """

    DISPERSE_BLOB = "disperser.Disperser/DisperseBlob"
    GET_BLOB_STATUS = "disperser.Disperser/GetBlobStatus"
    RETRIEVE_BLOB = "disperser.Disperser/RetrieveBlob"

    def __init__(
        self,
        config: Optional[ClientConfig] = None,
        transport: Optional[Transport] = None,
        cache: Optional[ResponseCache] = None,
        parser: Optional[ResponseParser] = None,
    ):
        self.config = config if config is not None else ClientConfig()
        disperser = self.config.disperser
        if not disperser.server_address:
            raise ConfigurationError("Disperser server address is not configured")
        if not disperser.proto_path or not disperser.disperser_proto:
            raise ConfigurationError("Disperser proto path is not configured")

        self.transport = transport if transport is not None else GrpcurlTransport(
            server_address=disperser.server_address,
            import_path=disperser.proto_path,
            proto_file=disperser.disperser_proto,
            binary=disperser.grpcurl_path,
            plaintext=disperser.plaintext,
            max_time=disperser.max_time,
        )
        self.cache = cache if cache is not None else LruResponseCache(self.config.cache.capacity)
        self.parser = parser if parser is not None else ResponseParser(
            policy=self.config.parsing.on_error,
            validate=self.config.parsing.validate_proofs,
        )
        self._poll_locks: Dict[str, asyncio.Lock] = {}
        self._poll_waiters: Dict[str, int] = {}

    async def disperse_blob(
        self,
        data: bytes,
        quorum_id: Optional[int] = None,
        adversary_threshold: Optional[int] = None,
        quorum_threshold: Optional[int] = None,
    ) -> BlobResponse:
        """
        Submit a blob for dispersal.

        Args:
            data: Raw blob content
            quorum_id: Quorum to disperse to, defaults to the configured one
            adversary_threshold: Adversary threshold percentage override
            quorum_threshold: Quorum threshold percentage override

        Returns:
            The disperser's response, carrying the request id to poll
        """
        security = self.config.security
        payload = encode_payload(
            data,
            quorum_id=security.quorum_id if quorum_id is None else quorum_id,
            adversary_threshold=security.adversary_threshold if adversary_threshold is None else adversary_threshold,
            quorum_threshold=security.quorum_threshold if quorum_threshold is None else quorum_threshold,
            version=self.config.disperser.payload_version,
        )

        logger.info("Dispersing blob", size=len(data))
        output = await self._invoke(self.DISPERSE_BLOB, payload)
        response = self.parser.parse_response(output)
        metrics.record_blob_state(response.result.state.value)

        if response.request_id:
            self.cache.put(response)
            logger.info("Blob accepted", request_id=response.request_id, result=str(response.result))
        else:
            logger.warning("Dispersal response carries no request id", result=str(response.result))
        return response

    async def get_blob_status(self, request_id: str) -> BlobStatus:
        """Query the current status of a dispersal request."""
        payload = json.dumps({"request_id": request_id})
        output = await self._invoke(self.GET_BLOB_STATUS, payload)
        status = self.parser.parse_status(output)
        metrics.record_blob_state(status.state.value)
        logger.debug("Polled blob status", request_id=request_id, state=str(status.status))
        return status

    async def retrieve_blob(self, batch_header_hash: Union[BatchHeaderHash, str], blob_index: int) -> bytes:
        """
        Retrieve a dispersed blob by its coordinate.

        Args:
            batch_header_hash: Hash of the batch the blob was confirmed in
            blob_index: Position of the blob within the batch

        Returns:
            The disperser's output, undecoded
        """
        payload = json.dumps({
            "batch_header_hash": str(batch_header_hash),
            "blob_index": str(blob_index),
        })
        return await self._invoke(self.RETRIEVE_BLOB, payload)

    async def wait_for_confirmation(
        self,
        request_id: str,
        policy: Optional[PollPolicy] = None,
        cancel: Optional[asyncio.Event] = None,
    ) -> BlobStatus:
        """
        Poll a dispersal until it reaches a terminal state.

        Concurrent waiters on the same request id share one sequence of
        polls: a waiter starts polling only after the previous one finished.

        Args:
            request_id: Request id returned by disperse_blob
            policy: Interval and bounds, defaults to the configured polling
            cancel: Event that stops polling when set

        Returns:
            The terminal BlobStatus; check its state before reading proof data

        Raises:
            PollTimeoutError: if the policy's bounds are exhausted
            PollCancelledError: if ``cancel`` is set
            TransportError: if a status query fails
        """
        policy = policy if policy is not None else self.config.polling.to_policy()
        log = logger.bind_context(request_id=request_id)
        lock = self._poll_locks.get(request_id)
        if lock is None:
            lock = self._poll_locks[request_id] = asyncio.Lock()
        self._poll_waiters[request_id] = self._poll_waiters.get(request_id, 0) + 1
        try:
            async with lock:
                log.info("Waiting for blob confirmation", interval=policy.interval,
                         max_attempts=policy.max_attempts, timeout=policy.timeout)
                status = await poll_until_terminal(
                    lambda: self.get_blob_status(request_id),
                    policy,
                    cancel=cancel,
                )
                log.info("Blob reached terminal state", state=str(status.status))
                return status
        finally:
            self._poll_waiters[request_id] -= 1
            if not self._poll_waiters[request_id]:
                del self._poll_waiters[request_id]
                del self._poll_locks[request_id]

    def cached_response(self, request_id: str) -> Optional[BlobResponse]:
        return self.cache.get(request_id)

    async def _invoke(self, method: str, request_json: str) -> bytes:
        loop = asyncio.get_running_loop()
        start_time = loop.time()

        async def call() -> bytes:
            result = await self.transport.invoke(method, request_json)
            if not result.success:
                raise TransportError(_decode_output(result.stderr, method), method=method)
            # Output must be UTF-8 even though it is handed back raw
            _decode_output(result.stdout, method)
            return result.stdout

        try:
            stdout = await exponential_backoff(
                call,
                max_retries=self.config.disperser.transport_retries,
                base_delay=self.config.disperser.retry_delay_seconds,
                retryable_exceptions=(TransportError,),
            )
        except TransportError as e:
            metrics.record_request(method, "failure", loop.time() - start_time)
            logger.error("Disperser call failed", method=method, error=str(e))
            raise

        metrics.record_request(method, "success", loop.time() - start_time)
        return stdout


def _decode_output(output: bytes, method: str) -> str:
    try:
        return output.decode("utf-8")
    except UnicodeDecodeError as e:
        raise TransportError(f"{method} produced non UTF-8 output: {e}", method=method) from e


def client_from_env(config_path: Optional[str] = None) -> DisperserClient:
    """Build a client from a YAML file and EIGENDA_* environment variables."""
    config_path = config_path or os.environ.get("EIGENDA_CONFIG")
    return DisperserClient(load_config(config_path).client)
