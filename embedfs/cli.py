from __future__ import annotations

import argparse
import importlib.util
import os
import sys
import time
from pathlib import Path
from typing import List, Optional, Tuple

from embedfs.constants import CODEC_NAMES, DEFAULT_BLOCK_WIDTH, DEFAULT_LOADER_NAME
from embedfs.errors import EmbedFSError
from embedfs.generator import Config, Package
from embedfs.pathutil import norm_path
from embedfs.vfs import FileSystem


def load_generated(module_path: str, var: str = DEFAULT_LOADER_NAME) -> FileSystem:
    """Import a generated module from disk and call its loader.

    Args:
        module_path: Path to the generated ``.py`` file.
        var: Name of the loader function inside the module.
    """
    name = "_embedfs_" + Path(module_path).stem
    spec = importlib.util.spec_from_file_location(name, module_path)
    if spec is None or spec.loader is None:
        raise RuntimeError(f"cannot import {module_path}")
    mod = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(mod)
    loader = getattr(mod, var, None)
    if loader is None:
        raise RuntimeError(f"{module_path} has no loader named {var!r}")
    return loader()


def _collect(inputs: List[Path], prefix: str) -> Tuple[List[Tuple[str, str]], List[Tuple[str, str]]]:
    """Walk inputs and return (dirs, files) as (logical path, filesystem path) pairs.

    Symlinks are skipped. Directories contribute their own entry and their
    contents, named relative to the directory's basename.
    """
    dirs: List[Tuple[str, str]] = []
    files: List[Tuple[str, str]] = []

    def arc(rel: str) -> str:
        return norm_path(prefix + "/" + rel.replace(os.sep, "/"))

    for p in inputs:
        if p.is_symlink():
            print(f"Warning: skipping symlink {p}", file=sys.stderr)
            continue
        if p.is_dir():
            base = p.name
            # '.' and '/' have no basename: their contents land directly under prefix
            if base:
                dirs.append((arc(base), str(p)))
            for root, dirnames, filenames in os.walk(str(p)):
                # prune symlink directories to avoid walking into them
                dirnames[:] = sorted(d for d in dirnames if not os.path.islink(os.path.join(root, d)))
                for d in dirnames:
                    sub = os.path.join(root, d)
                    dirs.append((arc(os.path.join(base, os.path.relpath(sub, start=str(p)))), sub))
                for f in sorted(filenames):
                    full = os.path.join(root, f)
                    if os.path.islink(full):
                        continue
                    files.append((arc(os.path.join(base, os.path.relpath(full, start=str(p)))), full))
        elif p.exists():
            files.append((arc(p.name), str(p)))
        else:
            raise FileNotFoundError(f"No such file or directory: {p}")
    return dirs, files


def cmd_build(
    output: str,
    inputs: List[str],
    *,
    var: str = DEFAULT_LOADER_NAME,
    block_width: int = DEFAULT_BLOCK_WIDTH,
    codec: str = "none",
    level: Optional[int] = None,
    prefix: str = "/",
    digest: bool = True,
    check: bool = False,
    quiet: bool = False,
) -> bool:
    """Embed files and directories into a generated module.

    Args:
        output: Destination ``.py`` path.
        inputs: Files and/or directories to embed.
        var: Loader function name in the generated module.
        block_width: Byte literals per generated line.
        codec: One of ``none``, ``deflate``, ``zstd``.
        level: Compression level for the codec.
        prefix: Logical directory the inputs are placed under.
        digest: Record a content digest for every asset.
        check: Compile the generated module before writing it.
        quiet: Only print the summary line.
    """
    cfg = Config(
        var=var,
        block_width=block_width,
        codec=CODEC_NAMES[codec],
        level=level,
        digest=digest,
        check=check,
    )
    pkg = Package(cfg)
    dirs, files = _collect([Path(p) for p in inputs], prefix)

    t0 = time.time()
    seen = set()
    for logical, fs_path in dirs:
        if logical in seen:
            continue
        seen.add(logical)
        pkg.add_dir(logical, fs_path)
    total = 0
    for logical, fs_path in files:
        pkg.add_file(logical, fs_path)
        total += pkg.files[logical].info.size
        if not quiet:
            print(f" embedding: {logical}")

    pkg.write(output)
    dt = max(0.000001, time.time() - t0)
    kib = total / 1024.0
    print(f"Done: {len(files)} files, {len(seen)} dirs; {kib:.1f} KiB in {dt:.2f}s -> {output}")
    return True


def cmd_list(module: str, *, var: str = DEFAULT_LOADER_NAME) -> bool:
    """List the entries of a generated module.

    Args:
        module: Path to the generated ``.py`` file.
        var: Loader function name.
    """
    fs = load_generated(module, var)
    for path in fs:
        info = fs.assets[path].info
        kind = "d" if info.is_dir else "-"
        stamp = info.mod_time.strftime("%Y-%m-%d %H:%M:%S")
        print(f"{kind} {info.size:>10} {stamp} {path}")
    return True


def cmd_cat(module: str, path: str, *, var: str = DEFAULT_LOADER_NAME) -> bool:
    """Write one embedded file's bytes to stdout."""
    fs = load_generated(module, var)
    with fs.open(path) as fh:
        if fh.is_dir:
            raise IsADirectoryError(f"{path} is a directory")
        data = fh.read()
    sys.stdout.buffer.write(data)
    sys.stdout.flush()
    return True


def main(argv: List[str] | None = None):
    ap = argparse.ArgumentParser(
        prog="embedfs",
        description="Embed files into a generated Python module served as a read-only filesystem",
    )
    sub = ap.add_subparsers(dest="cmd", required=True)

    ap_build = sub.add_parser("build", help="Generate a module embedding files")
    ap_build.add_argument("output", help="Output .py path")
    ap_build.add_argument("inputs", nargs="+", help="Input files/directories")
    ap_build.add_argument("--var", default=DEFAULT_LOADER_NAME, help="Loader function name (default: load)")
    ap_build.add_argument("--block-width", type=int, default=DEFAULT_BLOCK_WIDTH, help="Bytes per generated line (default 12)")
    ap_build.add_argument("--codec", choices=sorted(CODEC_NAMES), default="none", help="Compression for embedded data")
    ap_build.add_argument("--level", type=int, help="Compression level")
    ap_build.add_argument("--prefix", default="/", help="Logical directory to place inputs under (default /)")
    ap_build.add_argument("--no-digest", action="store_true", help="Do not record content digests")
    ap_build.add_argument("--check", action="store_true", help="Compile the generated module before writing")
    ap_build.add_argument("--quiet", help="limit outputs to summaries only", action="store_true")

    ap_list = sub.add_parser("list", help="List entries of a generated module")
    ap_list.add_argument("module", help="Generated module path")
    ap_list.add_argument("--var", default=DEFAULT_LOADER_NAME, help="Loader function name")

    ap_cat = sub.add_parser("cat", help="Print one embedded file")
    ap_cat.add_argument("module", help="Generated module path")
    ap_cat.add_argument("path", help="Logical path inside the module")
    ap_cat.add_argument("--var", default=DEFAULT_LOADER_NAME, help="Loader function name")

    args = ap.parse_args(argv)
    try:
        if args.cmd == "build":
            cmd_build(
                args.output,
                args.inputs,
                var=args.var,
                block_width=args.block_width,
                codec=args.codec,
                level=args.level,
                prefix=args.prefix,
                digest=not args.no_digest,
                check=args.check,
                quiet=args.quiet,
            )
        elif args.cmd == "list":
            cmd_list(args.module, var=args.var)
        elif args.cmd == "cat":
            cmd_cat(args.module, args.path, var=args.var)
        else:
            raise RuntimeError("Unknown command")
    except FileNotFoundError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(2)
    except (EmbedFSError, ValueError, RuntimeError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(2)


if __name__ == "__main__":
    main()
