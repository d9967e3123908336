"""Command line access to the compressed storage codec."""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Optional, Sequence

import numpy as np

from .compressed import CompressedStorageFormat
from .field import FIELDS
from .matrix import Matrix

logger = logging.getLogger(__name__)


def load_text_matrix(path: Path, field_name: str = "real", delimiter: Optional[str] = None) -> Matrix:
    """Read a matrix written one row per line."""

    field = FIELDS[field_name]
    grid = np.loadtxt(path, dtype=str, delimiter=delimiter, ndmin=2)
    return Matrix.from_grid([[field.coerce(cell) for cell in row] for row in grid.tolist()], field)


def encode(args: argparse.Namespace) -> int:
    matrix = load_text_matrix(args.input, args.field, args.delimiter)
    data = matrix.to_compressed().to_bytes()
    args.output.write_bytes(data)
    logger.info("wrote %d bytes to %s", len(data), args.output)
    return 0


def decode(args: argparse.Namespace) -> int:
    compressed = CompressedStorageFormat.from_bytes(args.input.read_bytes(), FIELDS[args.field])
    print(compressed.to_matrix())
    return 0


def info(args: argparse.Namespace) -> int:
    compressed = CompressedStorageFormat.from_bytes(args.input.read_bytes(), FIELDS[args.field])
    print(f"dimensions: {compressed.columns}x{compressed.rows} (columns x rows)")
    print(f"non-zeros: {compressed.nnz}")
    print(f"compressed size: {compressed.compressed_size} bytes")
    print(f"uncompressed size: {compressed.uncompressed_size} bytes")
    print(f"compression efficiency: {compressed.compression_efficiency:.3f}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="genla", description="Encode and inspect compressed sparse column matrices.")
    parser.add_argument("-v", "--verbose", action="store_true", help="enable debug logging")
    parser.add_argument(
        "--field",
        choices=sorted(FIELDS),
        default="real",
        help="scalar field of the matrix entries",
    )
    commands = parser.add_subparsers(dest="command", required=True)

    enc = commands.add_parser("encode", help="compress a text matrix into the binary format")
    enc.add_argument("input", type=Path, help="text file, one matrix row per line")
    enc.add_argument("output", type=Path, help="destination of the binary encoding")
    enc.add_argument("--delimiter", default=None, help="column separator (default: whitespace)")
    enc.set_defaults(handler=encode)

    dec = commands.add_parser("decode", help="print the dense matrix stored in a binary file")
    dec.add_argument("input", type=Path)
    dec.set_defaults(handler=decode)

    inf = commands.add_parser("info", help="print dimensions and compression statistics")
    inf.add_argument("input", type=Path)
    inf.set_defaults(handler=info)
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    return args.handler(args)


if __name__ == "__main__":
    raise SystemExit(main())
