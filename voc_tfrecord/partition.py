"""
Deterministic, content-based dataset partitioning.

Membership only depends on the bytes of each item, so the same dataset always
produces the same train/test split, on any machine, in any order.
"""
import math
import zlib
from typing import Callable, Iterable, List, Optional, Tuple, TypeVar

T = TypeVar('T')

MAX_CHECKSUM = 0xFFFFFFFF


def normalize(value, min_value, max_value) -> float:
    """Min-max scaling. Undefined (ZeroDivisionError) when max_value == min_value."""
    return float(value - min_value) / float(max_value - min_value)


def ieee_crc32(data: bytes) -> int:
    """CRC-32 with the IEEE 802.3 polynomial (zlib / PNG / gzip flavour)."""
    return zlib.crc32(data) & MAX_CHECKSUM


def retain_threshold(ratio) -> int:
    ratio = min(max(ratio, 0), 100)
    # round half away from zero
    return int(math.floor(ratio / 100 * MAX_CHECKSUM + 0.5))


def retain(data: bytes, ratio) -> bool:
    """True when `data` falls in the `ratio` percent of checksum space that is retained."""
    return ieee_crc32(data) < retain_threshold(ratio)


def split(items: Iterable[T], ratio, key: Callable[[T], Optional[bytes]]) -> Tuple[List[T], List[T]]:
    """
    Partition `items` into (left, right).

    An item goes right when the checksum of `key(item)` is at or above the
    retain threshold, and left otherwise, so the left side holds exactly the
    items `retain` would keep. Items whose key is None go right.
    Both sides keep the input order.
    """
    threshold = retain_threshold(ratio)
    left, right = [], []
    for item in items:
        data = key(item)
        if data is None or ieee_crc32(data) >= threshold:
            right.append(item)
        else:
            left.append(item)
    return left, right
