from __future__ import annotations

import argparse
import base64
import binascii
import json
import sys
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

from .conf.ordered_partitioned import OrderedPartitionedKVEdgeBuilder, OrderedPartitionedKVEdgeConfigurer
from .conf.shuffled_input import ShuffledMergedInputConfiguration
from .conf.sorted_output import SortedOutputConfiguration
from .conf.sources import env_var_name, load_source
from .core.constants import SHUFFLED_INPUT_KEYS, SORTED_OUTPUT_KEYS
from .core.descriptors import EdgeManagerDescriptor
from .core.errors import ConfigurationError, VersionMismatch
from .core.utils import get_logger

logger = get_logger(__name__)


def _parse_pairs(values: list[str] | None, what: str) -> dict[str, str]:
    """Parse repeated KEY=VALUE options into an ordered mapping.

    Raises:
        ConfigurationError: If an entry has no "=" or an empty key.
    """
    pairs: dict[str, str] = {}
    for raw in values or []:
        if "=" not in raw:
            raise ConfigurationError(f"{what}: expected KEY=VALUE, got {raw!r}")
        k, v = raw.split("=", 1)
        k = k.strip()
        if not k:
            raise ConfigurationError(f"{what}: empty key in {raw!r}")
        pairs[k] = v.strip()
    return pairs


def _emit(obj: Any) -> None:
    print(json.dumps(obj, indent=2, sort_keys=True))


def _edge_from_args(args: argparse.Namespace) -> OrderedPartitionedKVEdgeConfigurer:
    partitioner_conf = _parse_pairs(args.partitioner_conf, "--partitioner-conf")
    builder: OrderedPartitionedKVEdgeBuilder = OrderedPartitionedKVEdgeConfigurer.new_builder(
        args.key_class,
        args.value_class,
        args.partitioner,
        partitioner_conf or None,
    )
    if args.comparator:
        builder.set_comparator(args.comparator)
    if args.compression:
        builder.enable_compression(args.compression)
    builder.set_settings(_parse_pairs(args.conf, "--conf"))
    builder.configure_output().set_settings(_parse_pairs(args.output_conf, "--output-conf"))
    builder.configure_input().set_settings(_parse_pairs(args.input_conf, "--input-conf"))
    if args.legacy_input:
        builder.configure_input().use_legacy_input()

    # Environment/file overrides are applied last so they win over flags.
    if not args.no_env:
        load_dotenv(Path(".env"), override=False)
        source = load_source(args.config)
    else:
        source = load_source(args.config, environ={})
    builder.configure_from_external_source(source)
    return builder.build()


def _cmd_build(argv: list[str]) -> int:
    p = argparse.ArgumentParser(
        prog="kvedge build",
        description="Assemble an ordered/partitioned edge and print its edge property as JSON.",
    )
    p.add_argument("--key-class", required=True, help="Key type identifier.")
    p.add_argument("--value-class", required=True, help="Value type identifier.")
    p.add_argument("--partitioner", required=True, help="Partitioner identifier.")
    p.add_argument(
        "--partitioner-conf", action="append", metavar="KEY=VALUE", help="Partitioner setting."
    )
    p.add_argument("--comparator", default=None, help="Key comparator identifier.")
    p.add_argument("--compression", default=None, metavar="CODEC", help="Compression codec.")
    p.add_argument("--conf", action="append", metavar="KEY=VALUE", help="Setting for both sides.")
    p.add_argument("--output-conf", action="append", metavar="KEY=VALUE", help="Output-only setting.")
    p.add_argument("--input-conf", action="append", metavar="KEY=VALUE", help="Input-only setting.")
    p.add_argument("--legacy-input", action="store_true", help="Use the legacy shuffled input.")
    p.add_argument(
        "--edge-manager",
        default=None,
        metavar="CLASS",
        help="Custom edge manager; replaces scatter-gather routing.",
    )
    p.add_argument(
        "--config",
        default=None,
        help="TOML/YAML override file (default: ./kvedge.toml or pyproject [tool.kvedge.runtime]).",
    )
    p.add_argument(
        "--no-env",
        action="store_true",
        help="Ignore .env and KVEDGE_* environment overrides.",
    )
    args = p.parse_args(argv)

    edge = _edge_from_args(args)
    if args.edge_manager:
        prop = edge.create_default_custom_edge_property(
            EdgeManagerDescriptor(class_name=args.edge_manager)
        )
    else:
        prop = edge.create_default_edge_property()

    _emit(
        {
            "fingerprint": edge.fingerprint(),
            "edge_property": prop.to_dict(),
            "output": {
                "class_name": edge.get_output_class_name(),
                "configuration": edge.output_configuration.to_payload(),
            },
            "input": {
                "class_name": edge.get_input_class_name(),
                "configuration": edge.input_configuration.to_payload(),
            },
        }
    )
    return 0


def _cmd_keys(argv: list[str]) -> int:
    p = argparse.ArgumentParser(
        prog="kvedge keys", description="List recognized override keys per side."
    )
    p.add_argument("--prefix", default="KVEDGE_", help="Environment variable prefix.")
    args = p.parse_args(argv)

    _emit(
        {
            side: [{"key": k, "env": env_var_name(k, args.prefix)} for k in keys]
            for side, keys in (("output", SORTED_OUTPUT_KEYS), ("input", SHUFFLED_INPUT_KEYS))
        }
    )
    return 0


def _cmd_decode(argv: list[str]) -> int:
    p = argparse.ArgumentParser(
        prog="kvedge decode", description="Decode a base64 side payload read from stdin."
    )
    p.add_argument("--side", choices=["output", "input"], required=True)
    p.add_argument("--payload", default=None, help="Base64 payload (default: read stdin).")
    args = p.parse_args(argv)

    raw = args.payload if args.payload is not None else sys.stdin.read()
    try:
        data = base64.b64decode(raw.strip(), validate=True)
    except binascii.Error as exc:
        raise ConfigurationError(f"payload is not valid base64: {exc}") from exc
    cls = SortedOutputConfiguration if args.side == "output" else ShuffledMergedInputConfiguration
    _emit(cls.from_bytes(data).to_payload())
    return 0


def build_argparser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="kvedge", description="Ordered/partitioned edge configuration CLI.")
    sub = p.add_subparsers(dest="cmd", required=True)

    sub.add_parser("build")
    sub.add_parser("keys")
    sub.add_parser("decode")
    return p


def main(argv: list[str] | None = None) -> None:
    argv = list(sys.argv[1:] if argv is None else argv)
    if not argv:
        build_argparser().print_help()
        return
    cmd, rest = argv[0], argv[1:]
    commands = {"build": _cmd_build, "keys": _cmd_keys, "decode": _cmd_decode}
    if cmd not in commands:
        print(f"Unknown command: {cmd}", file=sys.stderr)
        raise SystemExit(2)
    try:
        code = commands[cmd](rest)
    except (ConfigurationError, VersionMismatch) as exc:
        logger.debug("%s failed: %s", cmd, exc)
        print(f"error: {exc}", file=sys.stderr)
        code = 2
    raise SystemExit(code)


if __name__ == "__main__":
    main()
