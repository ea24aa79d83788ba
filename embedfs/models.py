from __future__ import annotations

import posixpath
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, List, Optional, Tuple

from .constants import CODEC_NONE
from .errors import IntegrityError
from .hashutil import content_digest


@dataclass(frozen=True)
class FileInfo:
    """Metadata snapshot of one embedded entry, taken at generation time."""

    name: str
    size: int = 0
    mode: int = 0
    mtime_ns: int = 0
    is_dir: bool = False
    sys: Any = None

    @property
    def mtime(self) -> float:
        return self.mtime_ns / 1_000_000_000

    @property
    def mod_time(self) -> datetime:
        sec, nsec = divmod(self.mtime_ns, 1_000_000_000)
        return datetime.fromtimestamp(sec, tz=timezone.utc).replace(microsecond=nsec // 1000)

    def readdir(self, count: int = -1) -> List["FileInfo"]:
        return []


@dataclass(frozen=True)
class DirInfo(FileInfo):
    """Snapshot of a synthesized directory; ``files`` holds every match."""

    is_dir: bool = True
    files: Tuple[FileInfo, ...] = field(default_factory=tuple)

    def readdir(self, count: int = -1) -> List[FileInfo]:
        # No pagination: count is ignored.
        return list(self.files)


@dataclass(frozen=True)
class Asset:
    path: str
    data: bytes
    info: FileInfo
    digest: Optional[str] = None

    def __post_init__(self):
        if not self.path.startswith("/"):
            raise ValueError(f"asset path must be absolute: {self.path!r}")
        if not self.info.is_dir and self.info.size != len(self.data):
            raise IntegrityError(
                f"{self.path}: size mismatch (recorded {self.info.size}, got {len(self.data)})"
            )

    def verify(self) -> None:
        if self.digest is not None and content_digest(self.data) != self.digest:
            raise IntegrityError(f"{self.path}: content digest mismatch")

    @classmethod
    def from_literal(
        cls,
        path: str,
        payload: bytes,
        *,
        name: Optional[str] = None,
        size: int = 0,
        mode: int = 0,
        mtime_ns: int = 0,
        is_dir: bool = False,
        codec: int = CODEC_NONE,
        digest: Optional[str] = None,
    ) -> "Asset":
        """Build an asset from the payload stored in a generated module."""
        data = bytes(payload)
        if codec != CODEC_NONE:
            # Uncompressed modules must load without zstandard installed.
            from .codec import Codec

            data = Codec(codec).decompress(data)
        if name is None:
            name = posixpath.basename(path)
        info = FileInfo(name=name, size=size, mode=mode, mtime_ns=mtime_ns, is_dir=is_dir)
        return cls(path=path, data=data, info=info, digest=digest)
