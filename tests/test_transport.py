"""Tests for the grpcurl transport."""

import asyncio
import os
import shutil
import sys

import pytest

from eigenda_client.errors import TransportError
from eigenda_client.transport import GrpcurlTransport, Transport


def transport(**kwargs):
    options = {
        "server_address": "disperser-holesky.eigenda.xyz:443",
        "import_path": "eigenda/api/proto",
        "proto_file": "disperser/disperser.proto",
    }
    options.update(kwargs)
    return GrpcurlTransport(**options)


class TestGrpcurlTransport:

    def test_satisfies_protocol(self):
        assert isinstance(transport(), Transport)

    def test_command(self):
        args = transport().command("disperser.Disperser/GetBlobStatus", '{"request_id":"abc"}')
        assert args == [
            "grpcurl",
            "-import-path", "eigenda/api/proto",
            "-proto", "disperser/disperser.proto",
            "-d", '{"request_id":"abc"}',
            "disperser-holesky.eigenda.xyz:443",
            "disperser.Disperser/GetBlobStatus",
        ]

    def test_command_options(self):
        args = transport(plaintext=True, max_time=5.0, binary="/opt/grpcurl").command("m", "{}")
        assert args[:4] == ["/opt/grpcurl", "-plaintext", "-max-time", "5.0"]

    def test_update_server_address(self):
        t = transport()
        t.update_server_address("localhost:32003")
        assert t.command("m", "{}")[-2] == "localhost:32003"

    @pytest.mark.asyncio
    async def test_missing_binary(self):
        t = transport(binary="/nonexistent/grpcurl")
        with pytest.raises(TransportError, match="grpcurl command failed") as exc_info:
            await t.invoke("disperser.Disperser/DisperseBlob", "{}")
        assert exc_info.value.method == "disperser.Disperser/DisperseBlob"

    @pytest.mark.asyncio
    @pytest.mark.skipif(shutil.which("true") is None, reason="needs the true binary")
    async def test_zero_exit_is_success(self):
        result = await transport(binary=shutil.which("true")).invoke("m", "{}")
        assert result.success
        assert result.stdout == b""

    @pytest.mark.asyncio
    @pytest.mark.skipif(shutil.which("false") is None, reason="needs the false binary")
    async def test_nonzero_exit_is_failure(self):
        result = await transport(binary=shutil.which("false")).invoke("m", "{}")
        assert not result.success

    @pytest.mark.asyncio
    @pytest.mark.skipif(sys.platform == "win32" or shutil.which("sleep") is None,
                        reason="needs a POSIX shell and sleep")
    async def test_cancel_kills_child(self, tmp_path):
        pid_file = tmp_path / "grpcurl.pid"
        binary = tmp_path / "slow-grpcurl"
        binary.write_text(
            "#!/bin/sh\n"
            f'echo $$ > "{pid_file}.tmp" && mv "{pid_file}.tmp" "{pid_file}"\n'
            "exec sleep 30\n"
        )
        binary.chmod(0o755)

        task = asyncio.ensure_future(transport(binary=str(binary)).invoke("m", "{}"))
        for _ in range(100):
            if pid_file.exists():
                break
            await asyncio.sleep(0.05)
        pid = int(pid_file.read_text())

        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

        with pytest.raises(ProcessLookupError):
            os.kill(pid, 0)
