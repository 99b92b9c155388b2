"""Tests for the bundled disperser protos."""

from eigenda_client.protos import PROTO_FILES, bundled_proto, install_protos


class TestProtos:

    def test_bundled_service_definition(self):
        proto = bundled_proto("disperser/disperser.proto").decode("utf-8")
        assert "service Disperser" in proto
        assert "rpc GetBlobStatus" in proto
        assert 'import "common/common.proto"' in proto

    def test_install(self, tmp_path):
        layout = install_protos(tmp_path)

        assert layout.import_path == str(tmp_path / "eigenda" / "api" / "proto")
        assert layout.disperser_proto == "disperser/disperser.proto"
        for relative_path in PROTO_FILES:
            written = tmp_path / "eigenda" / "api" / "proto" / relative_path
            assert written.read_bytes() == bundled_proto(relative_path)

    def test_install_twice(self, tmp_path):
        install_protos(tmp_path)
        layout = install_protos(tmp_path)
        assert (tmp_path / "eigenda" / "api" / "proto" / layout.disperser_proto).exists()
