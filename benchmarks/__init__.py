"""
Benchmark suite for jflat streaming flattening.

Compares jflat against flatteners that first build a full parse tree with:
- Python standard library json
- orjson (C-optimized)
- ujson (ultra-fast JSON)

Measures flattening speed and memory usage across different data types.
"""
