"""Invocation of disperser RPC methods.

The client only needs ``invoke(method, request_json)``. ``GrpcurlTransport``
implements it by running the ``grpcurl`` binary against the disperser's
protobuf definitions.
"""

import asyncio
import contextlib
from dataclasses import dataclass
from typing import List, Optional, Protocol, runtime_checkable

from eigenda_client.errors import TransportError
from eigenda_client.logging_config import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class InvocationResult:
    """Outcome of one RPC invocation."""
    success: bool
    stdout: bytes
    stderr: bytes


@runtime_checkable
class Transport(Protocol):
    async def invoke(self, method: str, request_json: str) -> InvocationResult:
        ...


class GrpcurlTransport:
    """Calls the disperser through ``grpcurl``."""

    def __init__(
        self,
        server_address: str,
        import_path: str,
        proto_file: str,
        binary: str = "grpcurl",
        plaintext: bool = False,
        max_time: Optional[float] = None,
    ):
        """
        Initialize the transport.

        Args:
            server_address: host:port of the disperser
            import_path: Directory the proto imports are resolved against
            proto_file: Disperser service definition, relative to import_path
            binary: grpcurl executable
            plaintext: Connect without TLS
            max_time: Per-call limit in seconds passed to grpcurl
        """
        self.server_address = server_address
        self.import_path = import_path
        self.proto_file = proto_file
        self.binary = binary
        self.plaintext = plaintext
        self.max_time = max_time

    def update_server_address(self, address: str):
        """Point the transport at another disperser."""
        self.server_address = address

    def command(self, method: str, request_json: str) -> List[str]:
        args = [self.binary]
        if self.plaintext:
            args.append("-plaintext")
        if self.max_time is not None:
            args.extend(["-max-time", str(self.max_time)])
        args.extend([
            "-import-path", self.import_path,
            "-proto", self.proto_file,
            "-d", request_json,
            self.server_address,
            method,
        ])
        return args

    async def invoke(self, method: str, request_json: str) -> InvocationResult:
        args = self.command(method, request_json)
        try:
            process = await asyncio.create_subprocess_exec(
                *args,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            logger.error("grpcurl could not be started", method=method, error=str(e))
            raise TransportError(
                f"grpcurl command failed: {' '.join(args)}\nError: {e!r}",
                method=method,
            ) from e

        try:
            stdout, stderr = await process.communicate()
        except BaseException:
            # Cancelled or interrupted: never leave grpcurl running
            with contextlib.suppress(ProcessLookupError):
                process.kill()
            await process.wait()
            logger.warning("grpcurl call interrupted, child killed", method=method, pid=process.pid)
            raise

        return InvocationResult(
            success=process.returncode == 0,
            stdout=stdout,
            stderr=stderr,
        )
