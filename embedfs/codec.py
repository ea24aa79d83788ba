from __future__ import annotations

import zlib
from typing import Optional

import zstandard

from .constants import CODEC_NONE, CODEC_DEFLATE, CODEC_ZSTD


class Codec:
    def __init__(self, codec_id: int, level: Optional[int] = None):
        self.codec_id = codec_id
        self.level = level

    def compress(self, data: bytes) -> bytes:
        if self.codec_id == CODEC_NONE:
            return data
        if self.codec_id == CODEC_DEFLATE:
            return zlib.compress(data, self.level if self.level is not None else 6)
        if self.codec_id == CODEC_ZSTD:
            try:
                c = zstandard.ZstdCompressor(level=self.level if self.level is not None else 3)
                return c.compress(data)
            except zstandard.ZstdError as e:
                raise RuntimeError(f"zstd compression failed: {e}")
        # Unknown/unsupported codec: fail fast
        raise RuntimeError(f"unsupported codec id: {self.codec_id}")

    def decompress(self, data: bytes) -> bytes:
        if self.codec_id == CODEC_NONE:
            return data
        if self.codec_id == CODEC_DEFLATE:
            return zlib.decompress(data)
        if self.codec_id == CODEC_ZSTD:
            try:
                # Frames written by compress() carry their content size.
                return zstandard.ZstdDecompressor().decompress(data)
            except zstandard.ZstdError as e:
                raise RuntimeError(f"zstd decompression failed: {e}")
        raise RuntimeError(f"unsupported codec id: {self.codec_id}")
