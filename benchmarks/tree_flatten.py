"""
Parse-tree flatteners used as the baseline for jflat benchmarks.

Each one decodes the whole document with a JSON library, then walks the
resulting tree and writes the same tab-separated lines jflat streams.
"""

import json
from collections.abc import Callable
from typing import Any
from typing import TextIO

import orjson
import ujson  # type: ignore[import-untyped]


class NullSink:
    """Text sink that discards everything written to it."""

    def write(self, s: str) -> int:
        return len(s)

    def flush(self) -> None:
        pass


def _walk(out: TextIO | NullSink, prefix: str, value: Any) -> None:
    if isinstance(value, dict):
        out.write(f"{prefix}\t{{}}\n")
        sep = "" if prefix == "" else "."
        for key, child in value.items():
            label = json.dumps(key)[1:-1]
            _walk(out, f"{prefix or '.'}{sep}{label}", child)
    elif isinstance(value, list):
        out.write(f"{prefix}\t[]\n")
        for index, child in enumerate(value):
            _walk(out, f"{prefix or '.'}[{index}]", child)
    else:
        out.write(f"{prefix}\t{json.dumps(value)}\n")


def make_tree_flattener(
    loads: Callable[[Any], Any],
) -> Callable[[str | bytes, TextIO | NullSink], None]:
    """Returns a flattener that decodes with loads, then walks the tree."""

    def tree_flatten(doc: str | bytes, out: TextIO | NullSink) -> None:
        _walk(out, "", loads(doc))

    return tree_flatten


TREE_FLATTENERS = {
    "stdlib_json": make_tree_flattener(json.loads),
    "orjson": make_tree_flattener(orjson.loads),
    "ujson": make_tree_flattener(ujson.loads),
}
