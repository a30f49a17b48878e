"""
Content fingerprinting for the result cache.

The fingerprint is a cheap 32-bit rolling hash (h * 31 + c) over a bounded
prefix of the text, or over filename + size for binary uploads. Collisions only
cost an unnecessary cache hit on near-duplicate content; nothing here is meant
to be tamper-proof.
"""

import logging
from typing import Union

from aicheck.config import settings
from aicheck.schemas.analysis import BinaryBlob, ContentKind

logger = logging.getLogger(__name__)

_MASK_32 = 0xFFFFFFFF


def rolling_hash(text: str) -> int:
    """Unsigned 32-bit `h = h*31 + ord(c)` over the whole string."""
    h = 0
    for ch in text:
        h = (h * 31 + ord(ch)) & _MASK_32
    return h


def fingerprint(content: Union[str, BinaryBlob], prefix_chars: int = None) -> str:
    if prefix_chars is None:
        prefix_chars = settings.fingerprint_prefix_chars

    if isinstance(content, BinaryBlob):
        material = f"{content.filename}:{content.size}"
    else:
        material = content[:prefix_chars]

    return f"{rolling_hash(material):08x}"


def cache_key(content: Union[str, BinaryBlob], kind: ContentKind) -> str:
    key = f"{fingerprint(content)}:{kind.value}"
    logger.debug(f"[HASH] Cache key {key}")
    return key
