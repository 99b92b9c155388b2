"""Disperser protobuf definitions bundled with the package.

grpcurl needs the service definitions on disk. Writing them is a separate,
explicit setup step; building a client never touches the filesystem.
"""

from dataclasses import dataclass
from importlib import resources
from pathlib import Path
from typing import Union

from eigenda_client.config import DEFAULT_DISPERSER_PROTO, DEFAULT_PROTO_PATH
from eigenda_client.logging_config import get_logger

logger = get_logger(__name__)

PROTO_FILES = (
    "common/common.proto",
    "disperser/disperser.proto",
)


@dataclass(frozen=True)
class ProtoLayout:
    """Where the definitions were written, in grpcurl terms."""
    import_path: str
    disperser_proto: str


def bundled_proto(relative_path: str) -> bytes:
    """Return the content of one bundled definition, e.g. ``common/common.proto``."""
    node = resources.files("eigenda_client") / "proto"
    for part in relative_path.split("/"):
        node = node / part
    return node.read_bytes()


def install_protos(root: Union[str, Path] = ".") -> ProtoLayout:
    """
    Write the bundled definitions below ``root``.

    Existing files are overwritten, so running this again is harmless.

    Args:
        root: Directory that receives ``eigenda/api/proto``

    Returns:
        The layout to configure as proto_path and disperser_proto
    """
    import_path = Path(root) / DEFAULT_PROTO_PATH
    for relative_path in PROTO_FILES:
        target = import_path / relative_path
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(bundled_proto(relative_path))

    logger.info("Installed disperser protos", import_path=str(import_path))
    return ProtoLayout(
        import_path=str(import_path),
        disperser_proto=DEFAULT_DISPERSER_PROTO,
    )
