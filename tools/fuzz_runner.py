#!/usr/bin/env python3
# tools/fuzz_runner.py
#
# Mutation fuzzing for the streamtyped decoder.
#
# Generates three fuzz categories:
#   A) random VALID archives (string objects, nested objects, embedded
#      streams, back-references) -> must decode, twice, to equal results
#   B) byte-level mutations of valid archives -> decode or TypedStreamError
#   C) truncations of valid archives -> decode or TypedStreamError
#
# Anything other than a TypedStreamError (IndexError, RecursionError, ...)
# prints a minimal repro payload and exits non-zero.

import os, sys, random, traceback
from typing import Any, Dict, List

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
sys.path.insert(0, ROOT)

from streamtyped import TypedStreamError, decode_archive, extract_text, to_jsonable

SEED = int(os.environ.get("STREAMTYPED_SEED", "4242"))
ROUNDS = int(os.environ.get("STREAMTYPED_FUZZ_ROUNDS", "5000"))

random.seed(SEED)

HEADER = b"\x04\x0bstreamtyped\x81\xe8\x03\x84"
CLASSES = [b"NSString", b"NSMutableString", b"NSObject", b"NSAttributedString"]

def rand_text(nmax: int) -> bytes:
    n = random.randint(0, nmax)
    return "".join(chr(random.randint(0x20, 0x7E)) for _ in range(n)).encode("utf-8")

def rand_bytes(n: int) -> bytes:
    return bytes(random.getrandbits(8) for _ in range(n))

def counted(raw: bytes) -> bytes:
    n = len(raw)
    if n < 0x81:
        return bytes([n]) + raw
    return b"\x81" + n.to_bytes(2, "little") + raw

def rand_object(depth: int, n_objects: List[int]) -> bytes:
    # Every object writes its own type definitions, so archives stay valid
    # no matter how they are nested.
    n_objects[0] += 1
    out = b"\x84" + counted(random.choice(CLASSES)) + bytes([random.randint(0, 3)])
    for _ in range(random.randint(0, 3)):
        r = random.random()
        if r < 0.5:
            out += b"\x01+" + counted(rand_text(200 if random.random() < 0.1 else 20))
        elif r < 0.7:
            out += b"\x02iq" + rand_bytes(12)
        elif r < 0.85 and depth < 5:
            out += b"\x01@" + rand_object(depth + 1, n_objects)
        else:
            # reference back to any object started so far
            out += b"\x01@" + bytes([0x92 + random.randrange(min(n_objects[0], 100))])
    if random.random() < 0.2:
        out += b"\x85"
    return out + b"\x86"

def rand_archive() -> bytes:
    out = HEADER
    n_objects = [0]
    for _ in range(random.randint(0, 3)):
        if random.random() < 0.2:
            out += b"\x01*\x84\x01@" + rand_object(0, n_objects)
        else:
            out += b"\x01@" + rand_object(0, n_objects)
    return out

def mutate(buf: bytes) -> bytes:
    b = bytearray(buf)
    for _ in range(random.randint(1, 4)):
        i = random.randrange(len(b))
        r = random.random()
        if r < 0.6:
            b[i] = random.getrandbits(8)
        elif r < 0.8:
            b.insert(i, random.choice([0x84, 0x85, 0x86, 0x92, 0x81, 0x82]))
        elif len(b) > 1:
            del b[i]
    return bytes(b)

def failure(label: str, payload: bytes, ctx: Dict[str, Any]) -> None:
    print("FAILURE:", label)
    print("CTX:", ctx)
    print("INPUT_HEX:", payload.hex())
    traceback.print_exc()
    raise SystemExit(1)

def check(label: str, payload: bytes, must_decode: bool, i: int) -> None:
    try:
        first = decode_archive(payload)
    except TypedStreamError as e:
        if must_decode:
            failure(label + " valid archive rejected [{}]".format(e.code), payload, {"round": i})
        return
    except Exception:
        failure(label + " unexpected exception", payload, {"round": i})
        return
    # compared via to_jsonable: NaN floats never compare equal to themselves
    if to_jsonable(decode_archive(payload)) != to_jsonable(first):
        failure(label + " decode not deterministic", payload, {"round": i})
    extract_text(first)

def main() -> int:
    for i in range(ROUNDS):
        valid = rand_archive()
        r = random.random()

        # A) valid archives
        if r < 0.3:
            check("A valid", valid, True, i)
            continue

        # B) mutations
        if r < 0.8:
            check("B mutated", mutate(valid), False, i)
            continue

        # C) truncations
        check("C truncated", valid[:random.randint(0, len(valid))], False, i)

    print(f"OK: fuzz rounds={ROUNDS} seed={SEED} (no unexpected exceptions)")
    return 0

if __name__ == "__main__":
    raise SystemExit(main())
