"""
Seeded random source for deterministic workout generation.

The seed string is hashed to a 32-bit integer (the classic ``h * 31 + c``
string hash over UTF-16 code units) and fed to a mulberry32 mixer. All
arithmetic is done modulo 2**32, so the stream is identical on every
platform and interpreter. Every helper draws from ``next()`` only, so
determinism carries over automatically.
"""

import time
import uuid
from datetime import date
from typing import Iterator, List, Optional, Sequence, TypeVar, Union

T = TypeVar("T")

_MASK_32 = 0xFFFFFFFF
_MULBERRY_INCREMENT = 0x6D2B79F5
_TWO_POW_32 = 4294967296.0
_BASE36_DIGITS = "0123456789abcdefghijklmnopqrstuvwxyz"


def _utf16_units(text: str) -> Iterator[int]:
    data = text.encode("utf-16-le")
    for i in range(0, len(data), 2):
        yield data[i] | (data[i + 1] << 8)


def _imul(a: int, b: int) -> int:
    """32-bit integer multiply, low word only."""
    return (a * b) & _MASK_32


def hash_seed(seed: str) -> int:
    """Hash a seed string to an unsigned 32-bit integer."""
    h = 0
    for unit in _utf16_units(seed):
        h = (h * 31 + unit) & _MASK_32
    return h


class SeededRandom:
    """
    Reproducible pseudo-random stream derived from a string seed.

    Two instances built from the same seed yield identical sequences.
    Derived seeds (``seed + "_warmup"``) give independent streams, so
    consuming one never perturbs another.

    Instances are callable, so they can be passed anywhere a plain
    ``() -> float`` draw function is expected.
    """

    def __init__(self, seed: str):
        self.seed = seed
        self._state = hash_seed(seed)

    def __call__(self) -> float:
        return self.next()

    def next(self) -> float:
        """Next float in [0, 1)."""
        self._state = (self._state + _MULBERRY_INCREMENT) & _MASK_32
        s = self._state
        t = _imul(s ^ (s >> 15), s | 1)
        t ^= (t + _imul(t ^ (t >> 7), t | 61)) & _MASK_32
        return ((t ^ (t >> 14)) & _MASK_32) / _TWO_POW_32

    def next_int(self, min_value: int, max_value: int) -> int:
        """Integer in [min_value, max_value)."""
        return int(self.next() * (max_value - min_value)) + min_value

    def next_float(self, min_value: float, max_value: float) -> float:
        """Float in [min_value, max_value)."""
        return self.next() * (max_value - min_value) + min_value

    def shuffle(self, items: Sequence[T]) -> List[T]:
        """Fisher-Yates shuffle. Returns a new list; the input is untouched."""
        result = list(items)
        for i in range(len(result) - 1, 0, -1):
            j = self.next_int(0, i + 1)
            result[i], result[j] = result[j], result[i]
        return result

    def choice(self, items: Sequence[T]) -> T:
        if not items:
            raise IndexError("Cannot choose from an empty sequence")
        return items[self.next_int(0, len(items))]

    def sample(self, items: Sequence[T], count: int) -> List[T]:
        """Select ``count`` items without replacement."""
        if count <= 0:
            return []
        return self.shuffle(items)[: min(count, len(items))]

    def weighted_choice(self, items: Sequence[T], weights: Sequence[float]) -> T:
        """
        Pick one item with probability proportional to its weight.

        Args:
            items: Items to choose from
            weights: Non-negative weights, normalised internally

        Raises:
            ValueError: If lengths differ or items is empty
        """
        if len(items) != len(weights):
            raise ValueError("Items and weights must have same length")
        if not items:
            raise ValueError("Cannot choose from empty sequence")

        total = sum(weights)
        if total == 0:
            return self.choice(items)

        draw = self.next()
        cumulative = 0.0
        for item, weight in zip(items, weights):
            cumulative += weight / total
            if draw < cumulative:
                return item

        # Floating point rounding can leave the draw just past the last bucket
        return items[-1]


def _to_base36(value: int) -> str:
    if value == 0:
        return "0"
    digits = []
    while value:
        value, remainder = divmod(value, 36)
        digits.append(_BASE36_DIGITS[remainder])
    return "".join(reversed(digits))


def generate_seed() -> str:
    """Fresh, non-reproducible seed string (timestamp plus random suffix)."""
    return _to_base36(int(time.time() * 1000)) + uuid.uuid4().hex[:9]


def build_generation_seed(
    user_hash: str,
    day: Union[date, str],
    focus: Optional[str] = None,
    nonce: Optional[Union[int, str]] = None,
) -> str:
    """
    Assemble the seed string for a generation request.

    Same user, same day and same focus always give the same workout.
    Passing a nonce produces a reproducible variation ("regenerate").

    Example:
        >>> build_generation_seed("user123", date(2024, 1, 15))
        'user123_2024-01-15'
    """
    day_str = day.isoformat() if isinstance(day, date) else str(day)
    parts = [user_hash, day_str]
    if focus:
        parts.append(focus)
    if nonce is not None and nonce != "":
        parts.append(str(nonce))
    return "_".join(parts)
