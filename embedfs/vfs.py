from __future__ import annotations

import io
import posixpath
from types import MappingProxyType
from typing import Dict, Iterable, Iterator, List, Mapping, Optional, Tuple, Union

from .errors import DuplicatePathError, FileDoesNotExist, InvalidPathError
from .models import Asset, DirInfo, FileInfo
from .pathutil import resolve


class File:
    """Read handle over one embedded asset.

    Every handle owns its cursor; the underlying buffer is the asset's own
    ``bytes`` object and is shared with every other handle on the same path.
    """

    is_dir = False

    def __init__(self, asset: Asset):
        self._asset = asset
        self._view = memoryview(asset.data)
        self._pos = 0

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    @property
    def name(self) -> str:
        return self._asset.path

    def read(self, size: int = -1) -> bytes:
        if self._pos >= len(self._view):
            return b""
        if size is None or size < 0:
            end = len(self._view)
        else:
            end = min(self._pos + size, len(self._view))
        chunk = self._view[self._pos:end].tobytes()
        self._pos = end
        return chunk

    def readinto(self, b) -> int:
        chunk = self.read(len(b))
        n = len(chunk)
        b[:n] = chunk
        return n

    def seek(self, offset: int, whence: int = io.SEEK_SET) -> int:
        if whence == io.SEEK_SET:
            pos = offset
        elif whence == io.SEEK_CUR:
            pos = self._pos + offset
        elif whence == io.SEEK_END:
            pos = len(self._view) + offset
        else:
            raise ValueError(f"invalid whence: {whence}")
        if pos < 0:
            raise ValueError("negative seek position")
        self._pos = pos
        return pos

    def tell(self) -> int:
        return self._pos

    def readable(self) -> bool:
        return True

    def seekable(self) -> bool:
        return True

    def stat(self) -> FileInfo:
        return self._asset.info

    def readdir(self, count: int = -1) -> List[FileInfo]:
        raise FileDoesNotExist(self._asset.path)

    def close(self) -> None:
        """No-op: nothing is held open."""


class SyntheticDirectory:
    """Directory view fabricated on a lookup miss. Carries no byte content."""

    is_dir = True

    def __init__(self, path: str, info: DirInfo):
        self._path = path
        self._info = info

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    @property
    def name(self) -> str:
        return self._path

    def stat(self) -> DirInfo:
        return self._info

    def readdir(self, count: int = -1) -> List[FileInfo]:
        return self._info.readdir(count)

    def close(self) -> None:
        pass


Handle = Union[File, SyntheticDirectory]


def synthesize(assets: Mapping[str, Asset], query: str) -> Optional[DirInfo]:
    """Fabricate a directory from every path starting with ``query``.

    The test is a plain string prefix: ``/a`` matches ``/ab`` as well as
    ``/a/b``, and descendants at any depth are listed.
    """
    matches = sorted(p for p in assets if p.startswith(query))
    if not matches:
        return None
    return DirInfo(
        name=posixpath.basename(query.rstrip("/")),
        files=tuple(assets[p].info for p in matches),
    )


class FileSystem:
    """Read-only, path-addressed view over a fixed set of assets."""

    def __init__(self, assets: Union[Iterable[Asset], Mapping[str, Asset]], *, verify: bool = True):
        if isinstance(assets, Mapping):
            assets = assets.values()
        table: Dict[str, Asset] = {}
        for a in assets:
            if a.path in table:
                raise DuplicatePathError(f"duplicate asset path: {a.path}")
            if verify:
                a.verify()
            table[a.path] = a
        self._assets: Mapping[str, Asset] = MappingProxyType(table)

    def __len__(self) -> int:
        return len(self._assets)

    def __contains__(self, path: object) -> bool:
        return path in self._assets

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self._assets))

    @property
    def assets(self) -> Mapping[str, Asset]:
        return self._assets

    def open(self, path: str) -> Handle:
        key = resolve(path)
        asset = self._assets.get(key)
        if asset is not None:
            if not asset.info.is_dir:
                return File(asset)
            # Recorded directory entry: keep its metadata, list what lives below it
            # (never the entry itself; '/' is its own prefix).
            below = key.rstrip("/") + "/"
            info = DirInfo(
                name=asset.info.name,
                mode=asset.info.mode,
                mtime_ns=asset.info.mtime_ns,
                files=tuple(
                    self._assets[p].info
                    for p in sorted(self._assets)
                    if p != key and p.startswith(below)
                ),
            )
            return SyntheticDirectory(key, info)
        info = synthesize(self._assets, key)
        if info is None:
            raise FileDoesNotExist(path)
        return SyntheticDirectory(key, info)

    def stat(self, path: str) -> FileInfo:
        return self.open(path).stat()

    def string(self, path: str) -> Tuple[str, bool]:
        """Return ``(content, True)`` for an exact match, ``("", False)`` otherwise."""
        data = self.data(path)
        if data is None:
            return "", False
        return data.decode("utf-8", "surrogateescape"), True

    def data(self, path: str) -> Optional[bytes]:
        try:
            key = resolve(path)
        except InvalidPathError:
            return None
        asset = self._assets.get(key)
        if asset is None:
            return None
        return asset.data
