from __future__ import annotations

import hashlib


def blake2s_32(data: bytes) -> bytes:
    return hashlib.blake2s(data, digest_size=32).digest()


def content_digest(data: bytes) -> str:
    """Hex digest recorded next to each embedded asset."""
    return blake2s_32(b"EMBEDFS\x00" + data).hex()
