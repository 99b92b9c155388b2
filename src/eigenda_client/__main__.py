"""Command line entry point: ``python -m eigenda_client``."""

import argparse
import asyncio
import os
import sys
from typing import List, Optional

from eigenda_client.client import DisperserClient
from eigenda_client.config import ClientConfig, load_config
from eigenda_client.errors import EigenDAClientError
from eigenda_client.logging_config import configure_logging
from eigenda_client.metrics import metrics
from eigenda_client.parser import ParsePolicy, ResponseParser
from eigenda_client.protos import install_protos


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="eigenda_client",
        description="Disperse, track and retrieve blobs on EigenDA.",
    )
    parser.add_argument("--config", help="Path to a YAML configuration file")
    parser.add_argument("--serve-metrics", action="store_true",
                        help="Expose Prometheus metrics on the configured port")
    subcommands = parser.add_subparsers(dest="command", required=True)

    parse_blob = subcommands.add_parser("parse-blob", help="Parse a GetBlobStatus response")
    parse_blob.add_argument("-j", "--json", required=True, help="Response text")

    disperse = subcommands.add_parser("disperse", help="Disperse a blob")
    source = disperse.add_mutually_exclusive_group(required=True)
    source.add_argument("--data", help="Blob content as text")
    source.add_argument("--file", help="Read blob content from a file")
    disperse.add_argument("--quorum-id", type=int)
    disperse.add_argument("--adversary-threshold", type=int)
    disperse.add_argument("--quorum-threshold", type=int)

    status = subcommands.add_parser("status", help="Query a dispersal's status once")
    status.add_argument("request_id")

    wait = subcommands.add_parser("wait", help="Poll a dispersal until it is terminal")
    wait.add_argument("request_id")

    retrieve = subcommands.add_parser("retrieve", help="Retrieve a dispersed blob")
    retrieve.add_argument("batch_header_hash")
    retrieve.add_argument("blob_index", type=int)

    protos = subcommands.add_parser("install-protos", help="Write the disperser protos to disk")
    protos.add_argument("--root", default=".", help="Directory that receives eigenda/api/proto")

    return parser


async def _run(args: argparse.Namespace, config: ClientConfig) -> int:
    client = DisperserClient(config)

    if args.command == "disperse":
        if args.file:
            with open(args.file, "rb") as f:
                data = f.read()
        else:
            data = args.data.encode("utf-8")
        response = await client.disperse_blob(
            data,
            quorum_id=args.quorum_id,
            adversary_threshold=args.adversary_threshold,
            quorum_threshold=args.quorum_threshold,
        )
        print(response.model_dump_json(by_alias=True))
    elif args.command == "status":
        status = await client.get_blob_status(args.request_id)
        print(status.model_dump_json(by_alias=True, indent=2))
    elif args.command == "wait":
        status = await client.wait_for_confirmation(args.request_id)
        print(status.model_dump_json(by_alias=True, indent=2))
    elif args.command == "retrieve":
        blob = await client.retrieve_blob(args.batch_header_hash, args.blob_index)
        sys.stdout.buffer.write(blob)
        sys.stdout.flush()
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        config = load_config(args.config or os.environ.get("EIGENDA_CONFIG")).client
        configure_logging(config.monitoring.log_level, enable_json=config.monitoring.json_logs)
        if args.serve_metrics:
            metrics.start_server(config.monitoring.prometheus_port)

        if args.command == "parse-blob":
            status = ResponseParser(policy=ParsePolicy.PROPAGATE_ERROR).parse_status(args.json)
            print(status.model_dump_json(by_alias=True, indent=2))
            return 0
        if args.command == "install-protos":
            layout = install_protos(args.root)
            print(f"proto_path: {layout.import_path}")
            print(f"disperser_proto: {layout.disperser_proto}")
            return 0
        return asyncio.run(_run(args, config))
    except EigenDAClientError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
