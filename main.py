import argparse
import sys

from typing import List, Optional
from bitvec import BitVec, bytes_in_bits
from container import BitVecContainer

BIT_CHARS = {"1": True, "0": False, ".": False}  #: Accepted bit characters
SEPARATORS = " \t\r\n_"  #: Characters ignored when parsing bit strings
SIZE_PREFIXES = ["", "Ki", "Mi", "Gi", "Ti", "Pi"]  #: Binary size prefixes


def get_parser():
    """Create and configure the CLI argument parser.

    :returns: Configured argument parser.
    :rtype: argparse.ArgumentParser
    """
    parser = argparse.ArgumentParser(
        description="Inspect and build LSB-0 bit vectors"
    )
    subparsers = parser.add_subparsers(
        title="subcommands", dest="cmd", required=True
    )

    show = subparsers.add_parser(
        "show", aliases=["s"], help="Render the bits of a file"
    )
    show.add_argument("file", help="Raw byte file (or container with -c)")
    show.add_argument(
        "-c",
        "--container",
        action="store_true",
        help="Read FILE as a bit vector container",
    )
    show.add_argument(
        "-n",
        "--bits",
        type=int,
        default=None,
        help="Only show the first BITS bits",
    )
    show.add_argument(
        "-d",
        "--debug",
        action="store_true",
        help="Print the debug form including the bit length",
    )

    pack = subparsers.add_parser(
        "pack", aliases=["p"], help="Pack a bit string into a file"
    )
    pack.add_argument(
        "bits", help="Bits low index first, e.g. '1111.111 1.1' or '0110'"
    )
    pack.add_argument(
        "-o", "--output", required=True, help="Output file path"
    )
    pack.add_argument(
        "--raw",
        action="store_true",
        help="Write raw padded bytes instead of a container "
             "(the bit length is lost)",
    )

    unpack = subparsers.add_parser(
        "unpack", aliases=["u"], help="Extract raw bytes from a container"
    )
    unpack.add_argument("file", help="Container file to read")
    unpack.add_argument(
        "-o", "--output", required=True, help="Output raw byte file path"
    )

    return parser


def _parse_bits(text: str) -> BitVec:
    """Parse a bit string into a :class:`BitVec`.

    ``1`` is a set bit, ``0`` and ``.`` are clear bits; whitespace and
    ``_`` are ignored so the output of ``show`` can be fed back in.

    :param text: Bit string, low index first.
    :type text: str
    :returns: Parsed bit vector.
    :rtype: BitVec
    :raises ValueError: If ``text`` contains any other character.
    """
    vec = BitVec.with_capacity(len(text))
    for pos, ch in enumerate(text):
        if ch in SEPARATORS:
            continue
        try:
            vec.push(BIT_CHARS[ch])
        except KeyError:
            raise ValueError(
                f"Invalid bit character {ch!r} at position {pos}"
            ) from None
    return vec


def _fmt_bits(nbits: int) -> str:
    """Format a bit count with its storage size, like ``"11 bits (2.00 B)"``.

    :param nbits: Number of bits.
    :type nbits: int
    :returns: Human-readable string.
    :rtype: str
    """
    label = "bit" if nbits == 1 else "bits"
    size = bytes_in_bits(nbits)
    scale = 0
    while size >= 1024 and scale < len(SIZE_PREFIXES) - 1:
        size /= 1024
        scale += 1
    return f"{nbits} {label} ({size:.2f} {SIZE_PREFIXES[scale]}B)"


def show_bits(
    path: str, container: bool, nbits: Optional[int], debug: bool
) -> int:
    """Print the bits of a file.

    :param path: File to read.
    :type path: str
    :param container: Whether ``path`` is a container rather than raw bytes.
    :type container: bool
    :param nbits: Optional number of leading bits to show.
    :type nbits: Optional[int]
    :param debug: Print ``repr`` (with length) instead of ``str``.
    :type debug: bool
    :returns: Process exit status.
    :rtype: int
    :raises ValueError: If a container file is malformed.
    :raises EOFError: If a container file is truncated.
    """
    try:
        fd = open(path, "rb")
    except FileNotFoundError:
        print(f"[!] File not found: {path}")
        return 1
    with fd as f:
        if container:
            vec = BitVecContainer().load(f)
        else:
            vec = BitVec.from_bytes(f.read())
    if nbits is not None:
        if nbits < 0 or nbits > len(vec):
            print(f"[!] Cannot show {nbits} bits, file holds {len(vec)}")
            return 1
        vec.truncate(nbits)
    print(repr(vec) if debug else str(vec))
    return 0


def pack_bits(bits: str, output_path: str, raw: bool) -> int:
    """Parse ``bits`` and write them to ``output_path``.

    :param bits: Bit string accepted by :func:`_parse_bits`.
    :type bits: str
    :param output_path: Destination file path.
    :type output_path: str
    :param raw: Write the padded payload only, without a container header.
    :type raw: bool
    :returns: Process exit status.
    :rtype: int
    """
    try:
        vec = _parse_bits(bits)
    except ValueError as e:
        print(f"[!] {e}")
        return 1
    with open(output_path, "wb") as out:
        if raw:
            with vec.as_bytes() as view:
                out.write(view)
        else:
            BitVecContainer().dump(vec, out)
    print(f"Packed {_fmt_bits(len(vec))} into {output_path}")
    return 0


def unpack_container(path: str, output_path: str) -> int:
    """Write the raw payload of a container file to ``output_path``.

    :param path: Container file to read.
    :type path: str
    :param output_path: Destination raw byte file.
    :type output_path: str
    :returns: Process exit status.
    :rtype: int
    :raises ValueError: If the container is malformed.
    :raises EOFError: If the container is truncated.
    """
    try:
        fd = open(path, "rb")
    except FileNotFoundError:
        print(f"[!] Container file not found: {path}")
        return 1
    with fd as f:
        vec = BitVecContainer().load(f)
    nbits = len(vec)
    with open(output_path, "wb") as out:
        out.write(vec.into_bytes())
    print(f"Unpacked {_fmt_bits(nbits)} into {output_path}")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Entry point for the CLI tool.

    :param argv: Arguments to parse instead of ``sys.argv[1:]``.
    :type argv: Optional[List[str]]
    :returns: Process exit status.
    :rtype: int
    """
    parser = get_parser()
    args = parser.parse_args(argv)

    if args.cmd in ["show", "s"]:
        return show_bits(args.file, args.container, args.bits, args.debug)
    elif args.cmd in ["pack", "p"]:
        return pack_bits(args.bits, args.output, args.raw)
    elif args.cmd in ["unpack", "u"]:
        return unpack_container(args.file, args.output)
    return 2


if __name__ == "__main__":
    sys.exit(main())
