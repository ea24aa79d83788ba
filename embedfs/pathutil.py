from __future__ import annotations

import os

from .errors import InvalidPathError


def norm_path(p: str) -> str:
    """Normalize a logical asset path to its canonical absolute form.

    Rules:
    - Convert backslashes to slashes
    - Remove empty and '.' segments
    - Reject '..' segments
    - Always return a path with exactly one leading slash
    """
    p = p.replace("\\", "/").strip("/")
    parts = [q for q in p.split("/") if q not in ("", ".")]
    for q in parts:
        if q == "..":
            raise ValueError("Path may not contain '..'")
    return "/" + "/".join(parts)


def resolve(path: str, sep: str = os.sep) -> str:
    """Validate a lookup path and return the key to look it up under.

    A NUL byte is always rejected. Where the platform separator is not '/',
    that separator is rejected too, so it cannot be used to step outside the
    slash-separated namespace. No '.'/'..' collapsing is performed: the
    mapping is flat.
    """
    if "\x00" in path:
        raise InvalidPathError("invalid character in file path")
    if sep != "/" and sep in path:
        raise InvalidPathError("invalid character in file path")
    if not path.startswith("/"):
        path = "/" + path
    return path
