from __future__ import annotations

import io
import os
import posixpath
import tempfile
from dataclasses import dataclass
from typing import BinaryIO, Callable, Dict, List, Optional, TextIO

from .codec import Codec
from .constants import (
    DEFAULT_BLOCK_WIDTH,
    DEFAULT_CODEC_ID,
    DEFAULT_LOADER_NAME,
    GENERATED_HEADER,
    INDENT_UNIT,
)
from .encoder import encode_bytes
from .errors import DuplicatePathError, EncodeError
from .hashutil import content_digest
from .models import FileInfo
from .pathutil import norm_path


@dataclass
class Config:
    var: str = DEFAULT_LOADER_NAME  # name of the loader function in the generated module
    doc: str = "Embedded assets."
    block_width: int = DEFAULT_BLOCK_WIDTH
    codec: int = DEFAULT_CODEC_ID
    level: Optional[int] = None
    digest: bool = True
    check: bool = False  # compile the generated module before it is written


@dataclass
class Source:
    path: str
    info: FileInfo
    opener: Callable[[], BinaryIO]
    owned: bool = True  # close the stream after reading

    def read(self) -> bytes:
        if self.info.is_dir:
            return b""
        stream = self.opener()
        try:
            return stream.read()
        finally:
            if self.owned:
                stream.close()


def _stat_info(name: str, st: os.stat_result, is_dir: bool) -> FileInfo:
    return FileInfo(
        name=name,
        size=0 if is_dir else st.st_size,
        mode=st.st_mode & 0o7777,
        mtime_ns=st.st_mtime_ns,
        is_dir=is_dir,
    )


class Package:
    """A collection of files and how they should be rendered into a module."""

    def __init__(self, config: Optional[Config] = None):
        self.config = config or Config()
        self.files: Dict[str, Source] = {}

    def __len__(self) -> int:
        return len(self.files)

    def _put(self, source: Source) -> None:
        if source.path in self.files:
            raise DuplicatePathError(f"duplicate asset path: {source.path}")
        self.files[source.path] = source

    def add(self, path: str, stream: BinaryIO, info: Optional[FileInfo] = None) -> None:
        """Add a stream under ``path``. The stream is read at build time and left open."""
        arc = norm_path(path)
        if info is None:
            info = FileInfo(name=posixpath.basename(arc))
        self._put(Source(path=arc, info=info, opener=lambda: stream, owned=False))

    def add_file(self, path: str, file: str) -> None:
        """Add the file at ``file`` under the logical ``path``."""
        arc = norm_path(path)
        st = os.stat(file)
        info = _stat_info(posixpath.basename(arc), st, is_dir=False)
        self._put(Source(path=arc, info=info, opener=lambda: open(file, "rb")))

    def add_dir(self, path: str, fs_path: Optional[str] = None) -> None:
        """Record a directory entry, optionally taking metadata from ``fs_path``."""
        arc = norm_path(path)
        name = posixpath.basename(arc)
        if fs_path is not None:
            info = _stat_info(name, os.stat(fs_path), is_dir=True)
        else:
            info = FileInfo(name=name, is_dir=True)
        self._put(Source(path=arc, info=info, opener=lambda: io.BytesIO(b"")))

    def _render_asset(self, source: Source) -> str:
        try:
            data = source.read()
        except OSError as exc:
            raise EncodeError(f"failed to read {source.path}: {exc}") from exc
        cfg = self.config
        payload = Codec(cfg.codec, cfg.level).compress(data)
        literal = encode_bytes(payload, block_width=cfg.block_width, indent=3).rstrip()
        info = source.info
        size = 0 if info.is_dir else len(data)
        i1, i2, i3 = INDENT_UNIT, INDENT_UNIT * 2, INDENT_UNIT * 3
        lines = [
            f"{i1}Asset.from_literal(",
            f"{i2}{source.path!r},",
            f"{i2}bytes((",
            f"{i3}{literal}" if literal else "",
            f"{i2})),",
            f"{i2}name={info.name!r},",
            f"{i2}size={size},",
            f"{i2}mode={info.mode:#o},",
            f"{i2}mtime_ns={info.mtime_ns},",
            f"{i2}is_dir={info.is_dir},",
            f"{i2}codec={cfg.codec},",
        ]
        if cfg.digest:
            lines.append(f"{i2}digest={content_digest(data)!r},")
        lines.append(f"{i1}),")
        return "\n".join(line for line in lines if line) + "\n"

    def build(self, out: TextIO) -> None:
        """Render the package as Python source into ``out``."""
        cfg = self.config
        if not cfg.var.isidentifier():
            raise ValueError(f"loader name is not a valid identifier: {cfg.var!r}")
        parts: List[str] = [
            GENERATED_HEADER + "\n",
            f"{cfg.doc!r}\n",
            "\n",
            "from embedfs.models import Asset\n",
            "from embedfs.vfs import FileSystem\n",
            "\n",
            "_ASSETS = (\n",
        ]
        for path in sorted(self.files):
            parts.append(self._render_asset(self.files[path]))
        parts += [
            ")\n",
            "\n",
            "\n",
            f"def {cfg.var}() -> FileSystem:\n",
            f'{INDENT_UNIT}"""Construct the embedded filesystem. Call once during startup."""\n',
            f"{INDENT_UNIT}return FileSystem(_ASSETS)\n",
        ]
        out.write("".join(parts))

    def render(self) -> str:
        buf = io.StringIO()
        self.build(buf)
        text = buf.getvalue()
        if self.config.check:
            try:
                compile(text, "<embedfs>", "exec")
            except SyntaxError as exc:
                raise EncodeError(f"generated module does not compile: {exc}") from exc
        return text

    def write(self, path: str) -> None:
        """Render the whole module in memory, then atomically replace ``path``."""
        text = self.render()
        directory = os.path.dirname(os.path.abspath(path))
        fd, tmp = tempfile.mkstemp(prefix=".embedfs-", suffix=".py", dir=directory)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                fh.write(text)
            os.chmod(tmp, 0o644)
            os.replace(tmp, path)
        except BaseException:
            try:
                os.unlink(tmp)
            except OSError:
                pass
            raise
