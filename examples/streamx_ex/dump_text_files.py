#!/usr/bin/env python3
"""Print every ``.txt`` file under a directory, with a header per file.

Shows the three ways of keeping a directory walk from leaking:

1. an auto-closing wrapper around a one-shot stream,
2. a replayable ``IOStreamable`` factory,
3. a plain ``with`` block around a produced stream.

Usage::

    python examples/streamx_ex/dump_text_files.py /usr/share/doc
"""

from __future__ import annotations

import argparse
import logging
import os
from pathlib import Path

from streamx import IOStreamable, Stream, auto_closing, io_function

logger = logging.getLogger(__name__)


def walk(root: Path) -> Stream:
    """Stream of every path under *root*; closing it closes the directory scan.

    Only one directory handle is open at a time, and closing the stream
    mid-walk closes it through the generator's ``with`` block.
    """

    def paths():
        pending = [root]
        while pending:
            with os.scandir(pending.pop()) as entries:
                for entry in entries:
                    path = Path(entry.path)
                    yield path
                    if entry.is_dir(follow_symlinks=False):
                        pending.append(path)

    scan = paths()
    return Stream(scan).on_close(scan.close)


def lines_with_header(path: Path) -> Stream:
    handle = path.open(encoding="utf-8", errors="replace")
    header = Stream.of("#", f"# {path}", "#")
    body = Stream(line.rstrip("\n") for line in handle).on_close(handle.close)
    return Stream.concat(header, body)


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("root", type=Path)
    parser.add_argument("-v", "--verbose", action="store_true")
    args = parser.parse_args()
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO)

    # 1. one-shot: closed by for_each
    (
        auto_closing(walk(args.root))
        .filter(lambda p: p.is_file())
        .filter(lambda p: p.suffix == ".txt")
        .flat_map(io_function(lines_with_header))
        .for_each(print)
    )

    # 2. factory: every stream() call walks the tree again
    lines = (
        IOStreamable(lambda: walk(args.root))
        .filter(lambda p: p.is_file())
        .filter(lambda p: p.suffix == ".txt")
        .flat_map(io_function(lines_with_header))
    )
    logger.info("%d lines", lines.auto_closing_stream().count())

    # 3. no wrapper: the with block closes the walk
    with lines.stream() as s:
        s.for_each(print)


if __name__ == "__main__":
    main()
