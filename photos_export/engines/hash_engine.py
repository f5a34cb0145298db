"""Deterministic string hashing for filename collision resolution.

FNV-1a (64-bit) is used instead of a cryptographic digest: it is stable
across processes and platforms, and only needs to spread names over 26
letters.
"""
from __future__ import annotations


FNV_OFFSET_BASIS = 14695981039346656037
FNV_PRIME = 1099511628211
MASK_64 = 0xFFFFFFFFFFFFFFFF
ALPHABET_SIZE = 26


def hash64(value: str) -> int:
    """64-bit FNV-1a over the UTF-8 bytes of ``value``."""
    h = FNV_OFFSET_BASIS
    for byte in value.encode("utf-8"):
        h ^= byte
        h = (h * FNV_PRIME) & MASK_64
    return h


def letter_from_hash(h: int, offset: int = 0) -> str:
    """Map a hash plus an offset to a lowercase ASCII letter.

    Negative offsets wrap into [0, 26) before being combined.
    """
    normalized = ((offset % ALPHABET_SIZE) + ALPHABET_SIZE) % ALPHABET_SIZE
    idx = ((h % ALPHABET_SIZE) + normalized) % ALPHABET_SIZE
    return chr(97 + idx)
