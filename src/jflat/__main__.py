"""
Command-line interface: flatten one JSON value from a file or stdin.

Exits 0 once the whole input is consumed, 1 on any fatal error. Lines
written before the error are flushed before exiting.
"""

import argparse
import io
import logging
import os
import sys
from typing import IO

from . import DEPTH_LIMIT_DEFAULT
from . import CodePointReader
from . import CodePointWriter
from . import FlattenConfig
from . import FlattenError
from . import Flattener
from . import __version__

logger = logging.getLogger("jflat")


def _build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="jflat",
        description="Flatten a JSON value into path<TAB>value lines.",
    )
    ap.add_argument(
        "file", nargs="?", default="-", help="JSON file (default: stdin)"
    )
    ap.add_argument(
        "-u",
        "--unbuffered",
        action="store_true",
        help="print output line by line",
    )
    ap.add_argument(
        "--quote-keys",
        action="store_true",
        help='keep the quotes around keys in paths (."key")',
    )
    ap.add_argument(
        "--lenient",
        action="store_true",
        help="accept input truncated inside a string or key",
    )
    ap.add_argument("--max-depth", type=int, default=DEPTH_LIMIT_DEFAULT)
    ap.add_argument("-v", "--verbose", action="store_true")
    ap.add_argument("--version", action="version", version=__version__)
    return ap


def _open_input(name: str) -> IO[str]:
    if name == "-":
        return io.TextIOWrapper(
            sys.stdin.buffer, encoding="utf-8", newline=""
        )
    return open(name, encoding="utf-8", newline="")


def main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="jflat: %(message)s",
        stream=sys.stderr,
    )

    try:
        config = FlattenConfig(
            strict=not args.lenient,
            quote_keys=args.quote_keys,
            max_depth=args.max_depth,
        )
    except ValueError as exc:
        logger.error("%s", exc)
        return 2

    try:
        fp = _open_input(args.file)
    except OSError as exc:
        logger.error("%s", exc)
        return 1

    reconfigure = getattr(sys.stdout, "reconfigure", None)
    if reconfigure is not None:
        reconfigure(encoding="utf-8")

    # Reading one code point per call keeps a pipeline moving
    reader = CodePointReader(fp, chunk_size=1 if args.unbuffered else 8192)
    writer = CodePointWriter(sys.stdout, line_buffered=args.unbuffered)
    try:
        try:
            Flattener(reader, writer, config).run()
        finally:
            writer.flush()
    except FlattenError as exc:
        logger.error("%s", exc)
        return 1
    except UnicodeDecodeError as exc:
        logger.error("input is not valid UTF-8: %s", exc)
        return 1
    except BrokenPipeError:
        # Output still buffered is flushed again at exit; send it nowhere
        devnull = os.open(os.devnull, os.O_WRONLY)
        os.dup2(devnull, sys.stdout.fileno())
        return 1
    finally:
        if args.file != "-":
            fp.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
