"""
Pytest configuration and shared fixtures for jflat tests.

Provides immutable flattening cases plus a reference flattener built on
the standard library json module, used to cross-check the streaming
implementation.
"""

import json
import re
from dataclasses import dataclass
from dataclasses import field
from typing import Any

import pytest


@dataclass(frozen=True)
class FlattenCase:
    """
    Immutable container for a flattening test case.

    Holds the input document and the (path, value) pairs it must produce,
    or marks the input as one that must be rejected.
    """

    description: str
    input_data: str
    expected_pairs: list[tuple[str, str]] = field(default_factory=list)
    should_fail: bool = False


class _Pairs(list[tuple[str, Any]]):
    """Object members in document order."""


class _Raw(str):
    """Unquoted token text exactly as it appeared in the document."""


def reference_flatten(doc: str) -> list[tuple[str, str]]:
    """
    Flattens a document through a full json.loads parse tree.

    Only agrees with jflat on documents whose strings are encoded the way
    json.dumps encodes them, since leaf strings are re-encoded here.
    """
    tree = json.loads(
        doc,
        object_pairs_hook=_Pairs,
        parse_float=_Raw,
        parse_int=_Raw,
        parse_constant=_Raw,
    )
    pairs: list[tuple[str, str]] = []

    def walk(prefix: str, value: Any) -> None:
        path = "" if prefix == "." and not pairs else prefix
        if isinstance(value, _Pairs):
            pairs.append((path, "{}"))
            for key, child in value:
                label = json.dumps(key)[1:-1]
                if prefix == ".":
                    walk(prefix + label, child)
                else:
                    walk(f"{prefix}.{label}", child)
        elif isinstance(value, list):
            pairs.append((path, "[]"))
            for index, child in enumerate(value):
                walk(f"{prefix}[{index}]", child)
        elif isinstance(value, _Raw):
            pairs.append((path, str(value)))
        else:
            pairs.append((path, json.dumps(value)))

    walk(".", tree)
    return pairs


_SEGMENT = re.compile(r"\[(\d+)\]|([^.\[]+)|\.")


def unflatten(pairs: list[tuple[str, str]]) -> Any:
    """
    Re-nests (path, value) pairs into Python objects.

    Keys must be non-empty and must not contain '.' or '[', which paths
    do not escape. Escape sequences in keys are decoded.
    """
    root: Any = None
    for path, text in pairs:
        if text == "{}":
            value: Any = {}
        elif text == "[]":
            value = []
        else:
            value = json.loads(text)

        if path == "":
            root = value
            continue

        segments: list[str | int] = []
        for match in _SEGMENT.finditer(path[1:]):
            index, key = match.groups()
            if index is not None:
                segments.append(int(index))
            elif key is not None:
                segments.append(json.loads(f'"{key}"'))

        parent = root
        for segment in segments[:-1]:
            parent = parent[segment]
        last = segments[-1]
        if isinstance(parent, list):
            assert last == len(parent)
            parent.append(value)
        else:
            parent[last] = value
    return root


@pytest.fixture
def flatten_examples() -> list[FlattenCase]:
    """
    Provides documents with their exact flattened pairs.
    """
    return [
        FlattenCase(
            "mixed object",
            '{"a":1,"b":[true,"x"]}',
            [
                ("", "{}"),
                (".a", "1"),
                (".b", "[]"),
                (".b[0]", "true"),
                (".b[1]", '"x"'),
            ],
        ),
        FlattenCase("root string", '"hello"', [("", '"hello"')]),
        FlattenCase("root number", "42", [("", "42")]),
        FlattenCase("root literal", "null", [("", "null")]),
        FlattenCase("empty object", "{}", [("", "{}")]),
        FlattenCase("empty array", "[]", [("", "[]")]),
        FlattenCase("empty string", '""', [("", '""')]),
        FlattenCase(
            "root array",
            "[1, [2], {}]",
            [
                ("", "[]"),
                (".[0]", "1"),
                (".[1]", "[]"),
                (".[1][0]", "2"),
                (".[2]", "{}"),
            ],
        ),
        FlattenCase(
            "nested objects",
            '{"a": {"b": {"c": -1.5e+3}}}',
            [
                ("", "{}"),
                (".a", "{}"),
                (".a.b", "{}"),
                (".a.b.c", "-1.5e+3"),
            ],
        ),
        FlattenCase(
            "objects inside arrays",
            '{"fruit":[{"name":"banana"},{"name":"apple"}]}',
            [
                ("", "{}"),
                (".fruit", "[]"),
                (".fruit[0]", "{}"),
                (".fruit[0].name", '"banana"'),
                (".fruit[1]", "{}"),
                (".fruit[1].name", '"apple"'),
            ],
        ),
        FlattenCase(
            "empty containers as members",
            '{"o": {}, "a": [ ], "z": 0}',
            [
                ("", "{}"),
                (".o", "{}"),
                (".a", "[]"),
                (".z", "0"),
            ],
        ),
        FlattenCase(
            "whitespace everywhere",
            ' \r\n\t{ "k" \n:\t[ 1 ,\r\n2 ] } \n',
            [
                ("", "{}"),
                (".k", "[]"),
                (".k[0]", "1"),
                (".k[1]", "2"),
            ],
        ),
        FlattenCase(
            "escapes kept verbatim",
            r'{"a\"b": "c\n\u00e9\\", "t": "\""}',
            [
                ("", "{}"),
                (r".a\"b", r'"c\n\u00e9\\"'),
                (".t", r'"\""'),
            ],
        ),
        FlattenCase(
            "non-ascii text",
            '{"ключ": ["значение", "🎉"]}',
            [
                ("", "{}"),
                (".ключ", "[]"),
                (".ключ[0]", '"значение"'),
                (".ключ[1]", '"🎉"'),
            ],
        ),
        FlattenCase(
            "empty key",
            '{"": 1}',
            [("", "{}"), (".", "1")],
        ),
        FlattenCase(
            "punctuation inside strings",
            '{"s": "{[:,]}"}',
            [("", "{}"), (".s", '"{[:,]}"')],
        ),
        FlattenCase(
            "bare tokens are not validated",
            '{"n": 013, "h": 0x14, "f": alert()}',
            [
                ("", "{}"),
                (".n", "013"),
                (".h", "0x14"),
                (".f", "alert()"),
            ],
        ),
    ]


@pytest.fixture
def flatten_fail_cases() -> list[FlattenCase]:
    """
    Provides documents that must be rejected.

    Taken from the json.org JSON_checker failure suite, keeping only the
    cases that break structure rather than token syntax, which jflat
    does not validate.
    """
    fail_docs = [
        '["Unclosed array"',
        '{unquoted_key: "keys must be quoted"}',
        '["extra comma",]',
        '["double extra comma",,]',
        '[   , "<-- missing value"]',
        '["Comma after the close"],',
        '["Extra close"]]',
        '{"Extra comma": true,}',
        '{"Extra value after close": true} "misplaced quoted value"',
        '{"Illegal expression": 1 + 2}',
        '{"Missing colon" null}',
        '{"Double colon":: null}',
        '{"Comma instead of colon", null}',
        '["Colon instead of comma": false]',
        "['single quote']",
        '{"Comma instead if closing brace": true,',
        '["mismatch"}',
    ]
    return [
        FlattenCase(f"fail{idx + 1}", doc, should_fail=True)
        for idx, doc in enumerate(fail_docs)
    ]
