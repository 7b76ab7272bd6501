"""
Test data generators for flattening benchmarks and conformance tests.

Every document is encoded by json.dumps, so string escapes come out the
way a tree-based reference flattener re-encodes them:
- Different sizes (small/medium/large)
- Different shapes (wide objects, long arrays, deep nesting)
- String-heavy content with escape sequences
- Keys and paths longer than the flattener's initial buffers
"""

import json
import random
import string
from typing import Any

# Constants for random data generation
_INT_TYPE = 1
_FLOAT_TYPE = 2
_STRING_TYPE = 3
_BOOL_TYPE = 4
_NULL_TYPE = 5
_EMPTY_TYPE = 6
_ESCAPE_PROBABILITY = 0.3

DATA_TYPES = (
    "small_object",
    "large_object",
    "mixed_array",
    "nested_structure",
    "string_heavy",
    "long_keys",
    "deep_arrays",
)


def generate_test_data(data_type: str) -> str:
    """Generates a JSON document of the given type."""
    generators = {
        "small_object": _generate_small_object,
        "large_object": _generate_large_object,
        "mixed_array": _generate_mixed_array,
        "nested_structure": _generate_nested_structure,
        "string_heavy": _generate_string_heavy,
        "long_keys": _generate_long_keys,
        "deep_arrays": _generate_deep_arrays,
    }

    if data_type not in generators:
        raise ValueError(f"Unknown data type: {data_type}")

    return generators[data_type]()


def _generate_small_object() -> str:
    """Generates a small object (< 1KB) like a single API record."""
    data = {
        "capsule_serial": "C101",
        "capsule_id": "dragon1",
        "status": "retired",
        "original_launch": "2010-12-08T15:43:00.000Z",
        "original_launch_unix": 1291822980,
        "missions": [{"name": "COTS 1", "flight": 7}],
        "landings": 1,
        "type": "Dragon 1.0",
        "details": "Reentered after three weeks in orbit",
        "reuse_count": 0,
    }
    return json.dumps(data)


def _generate_large_object() -> str:
    """Generates a large object (> 10KB) with many nested records."""
    data = {
        "user_id": random.randint(1000000, 9999999),
        "profile": {
            "first_name": _random_string(10),
            "last_name": _random_string(12),
            "address": {
                "street": f"{random.randint(1, 9999)} {_random_string(8)} St",
                "zip": f"{random.randint(10000, 99999)}",
                "country": "US",
            },
            "notifications": {
                "email": random.choice([True, False]),
                "sms": random.choice([True, False]),
            },
        },
        "transactions": [
            {
                "id": f"txn_{i:06d}",
                "amount": round(random.uniform(1.0, 1000.0), 2),
                "currency": random.choice(["USD", "EUR", "GBP", "JPY"]),
                "status": random.choice(["completed", "pending", "failed"]),
                "tags": [],
            }
            for i in range(60)
        ],
    }
    return json.dumps(data)


def _generate_mixed_array() -> str:
    """Generates a long array with mixed value types."""
    array: list[Any] = []

    for i in range(200):
        choice = random.randint(1, 7)
        if choice == _INT_TYPE:
            array.append(random.randint(-1000, 1000))
        elif choice == _FLOAT_TYPE:
            array.append(random.uniform(-1e6, 1e6))
        elif choice == _STRING_TYPE:
            array.append(_random_string(random.randint(0, 30)))
        elif choice == _BOOL_TYPE:
            array.append(random.choice([True, False]))
        elif choice == _NULL_TYPE:
            array.append(None)
        elif choice == _EMPTY_TYPE:
            array.append(random.choice([[], {}]))
        else:
            array.append({"index": i, "value": _random_string(10)})

    return json.dumps(array)


def _generate_nested_structure() -> str:
    """Generates a nested structure mixing objects and arrays."""

    def create_nested_dict(depth: int) -> dict[str, Any]:
        if depth <= 0:
            return {"value": _random_string(10)}

        return {
            "level": depth,
            "items": [create_nested_dict(depth - 1) for _ in range(2)],
            "nested": create_nested_dict(depth - 1),
        }

    return json.dumps(create_nested_dict(5))


def _generate_string_heavy() -> str:
    """Generates strings full of escape sequences, in keys as well."""

    def create_escaped_string() -> str:
        chars = []
        for _ in range(50):
            if random.random() < _ESCAPE_PROBABILITY:
                chars.append(
                    random.choice(['"', "\\", "/", "\b", "\f", "\n", "\t"])
                )
            else:
                chars.append(
                    random.choice(string.ascii_letters + string.digits + " ")
                )
        return "".join(chars)

    data = {
        "strings": [create_escaped_string() for _ in range(100)],
        "unicode": [
            chr(random.randint(0x00A0, 0x2FFF)) * 3 for _ in range(50)
        ],
        "mixed_content": {
            f"key_{i}_{create_escaped_string()[:8]}": {
                "description": create_escaped_string(),
                "path": f"C:\\Users\\{_random_string(8)}\\file_{i}.txt",
            }
            for i in range(20)
        },
    }
    return json.dumps(data)


def _generate_long_keys() -> str:
    """Generates keys and values far longer than any initial buffer."""
    data = {
        _random_string(length): {_random_string(length // 2 + 1): length}
        for length in (1, 17, 65, 300, 2000)
    }
    return json.dumps(data)


def _generate_deep_arrays() -> str:
    """Generates arrays nested close to the default depth limit."""
    value: Any = [_random_string(5)]
    for _ in range(200):
        value = [value, random.randint(0, 9)]
    return json.dumps(value)


def _random_string(length: int) -> str:
    """Generates a random string of specified length."""
    return "".join(random.choices(string.ascii_letters, k=length))
