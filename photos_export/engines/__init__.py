"""Pure helpers: hashing and content-type lookup."""
from .hash_engine import hash64, letter_from_hash
from .content_types import ContentTypeLookup, DEFAULT_LOOKUP

__all__ = [
    "hash64",
    "letter_from_hash",
    "ContentTypeLookup",
    "DEFAULT_LOOKUP",
]
