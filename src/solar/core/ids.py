from __future__ import annotations

import itertools
import os
import re
import threading
import time
from typing import Final

# 12 bytes rendered as 24 lowercase hex chars:
# 4-byte timestamp | 5-byte per-process random | 3-byte counter
_OBJECT_ID_RE: Final = re.compile(r"^[0-9a-f]{24}$")
_PROCESS_RANDOM: Final[bytes] = os.urandom(5)
_counter = itertools.count(int.from_bytes(os.urandom(3), "big"))
_counter_lock = threading.Lock()


def generate_object_id() -> str:
    """Generate a new planet identifier.

    Identifiers are unique across processes and never reused: the timestamp
    prefix only moves forward and the counter suffix wraps within a second
    only after 16M allocations.
    """
    with _counter_lock:
        count = next(_counter) & 0xFFFFFF
    raw = (
        int(time.time()).to_bytes(4, "big")
        + _PROCESS_RANDOM
        + count.to_bytes(3, "big")
    )
    return raw.hex()


def is_valid_object_id(value: str) -> bool:
    """Check that a value is a well-formed planet identifier."""
    return bool(_OBJECT_ID_RE.match(value))
