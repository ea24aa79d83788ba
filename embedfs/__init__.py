"""
embedfs — ship static assets inside a generated Python module.

Features:

- Byte-exact encoder turning any byte stream into hex literals, and back.
- Generator that renders a set of files (with a metadata snapshot per file)
  into a self-contained module, optionally deflate/zstd compressed and
  carrying a BLAKE2s content digest per asset.
- Read-only, path-addressed virtual filesystem over the embedded bytes:
  exact-match lookup, synthesized directories on a prefix match, stat and
  readdir, independent read cursors over shared immutable buffers.

Typical use: ``embedfs build assets.py static/`` at build time, then
``fs = assets.load()`` once during startup and ``fs.open("/static/app.css")``.
"""

__version__ = "0.1"

__all__ = [
    "constants",
    "encoder",
    "generator",
    "models",
    "vfs",
    "errors",
]

# The runtime surface lives in embedfs.vfs (FileSystem, File, SyntheticDirectory);
# generation goes through embedfs.generator.Package or the CLI in embedfs.cli.
