"""streamtyped golden-vector suite.

Runs every vector in conformance/vectors.json.  Each vector is a hex
archive plus either the expected text and top-level component count, or
the expected error code.

Usage:
    python tests/test_conformance.py [--vectors-dir DIR]
    python -m pytest tests/test_conformance.py -v
    STREAMTYPED_VECTORS_DIR=./conformance python tests/test_conformance.py
"""

from __future__ import annotations

import argparse
import json
import os
import sys
import unittest
from typing import Any, Dict, List, Optional, Tuple

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from streamtyped import TypedStreamError, decode_archive, extract_text

# ── Locate conformance data ───────────────────────────────────

_VECTORS_DIR: Optional[str] = os.environ.get("STREAMTYPED_VECTORS_DIR", None)


def _find_vectors_dir() -> str:
    if _VECTORS_DIR:
        return _VECTORS_DIR
    candidates = [
        os.path.join(os.path.dirname(__file__), "..", "conformance"),
        os.path.join(os.path.dirname(__file__), "conformance"),
    ]
    for d in candidates:
        if os.path.isfile(os.path.join(d, "vectors.json")):
            return d
    raise FileNotFoundError(
        "Cannot find vectors.json. Set STREAMTYPED_VECTORS_DIR or --vectors-dir."
    )


def _load_vectors() -> List[dict]:
    path = os.path.join(_find_vectors_dir(), "vectors.json")
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)["vectors"]


def _run_vector(vec: dict) -> Dict[str, Any]:
    """Decode one vector.  Returns {"text", "components"} or {"err"}."""
    raw = bytes.fromhex(vec["input_hex"])
    try:
        archive = decode_archive(raw)
    except TypedStreamError as e:
        return {"err": e.code}
    return {"text": extract_text(archive), "components": len(archive.components)}


# ── unittest integration ──────────────────────────────────────

class ConformanceTests(unittest.TestCase):
    """Dynamically generated: one test method per vector."""
    pass


def _make_test(vec: dict):
    def test_fn(self: unittest.TestCase) -> None:
        got = _run_vector(vec)
        self.assertEqual(got, vec["expected"],
                         "{}: got {} expected {}".format(vec["test_id"], got, vec["expected"]))
    return test_fn


# Attach test methods at import time.
try:
    for _vec in _load_vectors():
        _tid = _vec["test_id"]
        _fn = _make_test(_vec)
        _fn.__name__ = "test_{}".format(_tid)
        _fn.__qualname__ = "ConformanceTests.test_{}".format(_tid)
        setattr(ConformanceTests, "test_{}".format(_tid), _fn)
except FileNotFoundError:
    pass


# ── Standalone CLI runner ─────────────────────────────────────

def main() -> None:
    global _VECTORS_DIR

    parser = argparse.ArgumentParser(description="streamtyped conformance runner")
    parser.add_argument("--vectors-dir", default=None,
                        help="Directory containing vectors.json")
    args, _remaining = parser.parse_known_args()

    if args.vectors_dir:
        _VECTORS_DIR = args.vectors_dir

    passed = 0
    failures: List[Tuple[str, dict, dict]] = []

    for vec in _load_vectors():
        got = _run_vector(vec)
        if got == vec["expected"]:
            passed += 1
        else:
            failures.append((vec["test_id"], got, vec["expected"]))

    total = passed + len(failures)
    print("CONFORMANCE: {}/{} PASS".format(passed, total))
    for tid, got, exp in failures:
        print("  FAIL {}: got={} expected={}".format(tid, got, exp))

    sys.exit(1 if failures else 0)


if __name__ == "__main__":
    main()
