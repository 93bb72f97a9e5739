"""Hybrid string-keyed lookup table used for variables and methods.

Keys hash (FNV-1a, 32 bit) into a fixed bucket array. A bucket holds either
nothing, the position of exactly one key's payload, or a collision marker.
Buckets only move forward through those states: once two distinct keys land
on the same bucket it stays collided until ``clear()``, and lookups through
it go to an ordinary dict that always holds every key.
"""

from __future__ import annotations

import os
from typing import Final, Generic, TypeVar

T = TypeVar("T")

FNV_PRIME: Final[int] = 16777619
FNV_OFFSET: Final[int] = 0
DEFAULT_SIZE: Final[int] = max(1, int(os.environ.get("TINYRULE_LOOKUP_SIZE", "1021")))

_EMPTY: Final[int] = 0
_COLLIDED: Final[int] = -1


def fnv1a_32(data: bytes) -> int:
    result = FNV_OFFSET
    for byte in data:
        result ^= byte
        result = (result * FNV_PRIME) & 0xFFFFFFFF
    return result


class FastStringLookup(Generic[T]):
    def __init__(self, size: int = DEFAULT_SIZE) -> None:
        if size < 1:
            raise ValueError("lookup size must be positive")
        self._size = size
        # 0 = empty, n > 0 = payload index n - 1, -1 = collided
        self._buckets: list[int] = [_EMPTY] * size
        self._bucket_keys: list[str | None] = [None] * size
        self._values: list[T] = []
        self._fallback: dict[str, int] = {}

    def _bucket(self, key: str) -> int:
        return fnv1a_32(key.encode("utf-8")) % self._size

    def clear(self) -> None:
        self._buckets = [_EMPTY] * self._size
        self._bucket_keys = [None] * self._size
        self._values.clear()
        self._fallback.clear()

    def set(self, key: str, value: T) -> None:
        index = self._fallback.get(key)
        if index is not None:
            self._values[index] = value
            return

        index = len(self._values)
        self._values.append(value)
        self._fallback[key] = index

        bucket = self._bucket(key)
        if self._buckets[bucket] == _EMPTY:
            self._buckets[bucket] = index + 1
            self._bucket_keys[bucket] = key
        else:
            self._buckets[bucket] = _COLLIDED
            self._bucket_keys[bucket] = None

    def get(self, key: str, default: T | None = None) -> T | None:
        bucket = self._bucket(key)
        slot = self._buckets[bucket]
        if slot == _EMPTY:
            return default
        if slot != _COLLIDED:
            stored = self._bucket_keys[bucket]
            # the hash is not collision free, so confirm the key itself
            if stored is None or len(stored) != len(key) or stored != key:
                return default
            return self._values[slot - 1]

        index = self._fallback.get(key)
        if index is None:
            return default
        return self._values[index]

    def bucket_state(self, key: str) -> str:
        slot = self._buckets[self._bucket(key)]
        if slot == _EMPTY:
            return "empty"
        if slot == _COLLIDED:
            return "collided"
        return "direct"

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and key in self._fallback

    def __len__(self) -> int:
        return len(self._fallback)

