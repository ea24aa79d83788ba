from __future__ import annotations

import io
import re
from typing import BinaryIO

from .constants import DEFAULT_BLOCK_WIDTH, INDENT_UNIT


_LITERAL_RE = re.compile(r"0x([0-9a-fA-F]{2}),")


def encode(stream: BinaryIO, block_width: int = DEFAULT_BLOCK_WIDTH, indent: int = 0) -> str:
    """Render a binary stream as comma-terminated hex byte literals.

    Each byte becomes ``0xNN,``. Literals on a line are separated by a single
    space; after every ``block_width`` bytes a newline plus ``indent`` levels
    of indentation is emitted. The stream is read to exhaustion and read
    errors propagate to the caller.
    """
    if block_width < 1:
        raise ValueError("block_width must be >= 1")
    out = io.StringIO()
    linebreak = "\n" + INDENT_UNIT * indent
    curblock = 0
    while True:
        buf = stream.read(block_width)
        if not buf:
            break
        for b in buf:
            out.write("0x%02x," % b)
            curblock += 1
            if curblock < block_width:
                out.write(" ")
                continue
            out.write(linebreak)
            curblock = 0
    return out.getvalue()


def encode_bytes(data: bytes, block_width: int = DEFAULT_BLOCK_WIDTH, indent: int = 0) -> str:
    return encode(io.BytesIO(data), block_width=block_width, indent=indent)


def decode(text: str) -> bytes:
    """Parse text produced by :func:`encode` back into the original bytes."""
    out = bytearray()
    for token in text.split():
        m = _LITERAL_RE.fullmatch(token)
        if m is None:
            raise ValueError(f"not a byte literal: {token!r}")
        out.append(int(m.group(1), 16))
    return bytes(out)
