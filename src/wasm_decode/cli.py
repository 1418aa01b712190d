"""Command line interface: decode a .wasm file and print its sections.

Usage:
    wasm-decode module.wasm              # one line per section
    wasm-decode module.wasm --json       # full module as JSON
    wasm-decode module.wasm -v           # with debug logging
"""

import argparse
import logging
import sys
from pathlib import Path

from . import __version__
from .decoder import decode_module
from .errors import DecodeError
from .render import summarize, to_json


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="wasm-decode",
        description="Decode a WebAssembly binary module and print its sections.",
    )
    parser.add_argument("file", type=Path, help="file to parse (.wasm)")
    parser.add_argument(
        "--json", action="store_true", help="print the decoded module as JSON"
    )
    parser.add_argument(
        "--max-varint-bytes",
        type=int,
        default=None,
        metavar="N",
        help="reject LEB128 integers longer than N bytes",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="enable debug logging"
    )
    parser.add_argument("--version", action="version", version=__version__)
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        module = decode_module(args.file, max_varint_bytes=args.max_varint_bytes)
    except OSError as e:
        print(f"open file: {e}", file=sys.stderr)
        return 1
    except DecodeError as e:
        print(f"{args.file}: {e}", file=sys.stderr)
        return 1

    if args.json:
        print(to_json(module))
    else:
        print("\n".join(summarize(module)))
    return 0


if __name__ == "__main__":
    sys.exit(main())
