from __future__ import annotations

import errno
import unittest

from embedfs.errors import DuplicatePathError, FileDoesNotExist, IntegrityError, InvalidPathError
from embedfs.hashutil import content_digest
from embedfs.models import Asset, DirInfo, FileInfo
from embedfs.vfs import File, FileSystem, SyntheticDirectory, synthesize


def _asset(path: str, data: bytes, mtime_ns: int = 1_600_000_000_123_456_789, **kw) -> Asset:
    info = FileInfo(name=path.rsplit("/", 1)[-1], size=len(data), mode=0o644, mtime_ns=mtime_ns)
    return Asset(path=path, data=data, info=info, **kw)


def _sample_fs() -> FileSystem:
    return FileSystem([
        _asset("/a/x", b"x-content"),
        _asset("/a/y", b"\x00\x01\x02" * 10),
        _asset("/ab", b"sibling"),
        _asset("/notes.md", "# Título\n".encode("utf-8")),
        _asset("/empty", b""),
    ])


class OpenTests(unittest.TestCase):
    def test_exact_match_serves_original_bytes(self):
        fs = _sample_fs()
        for path in ("/a/x", "/a/y", "/ab", "/notes.md", "/empty"):
            with self.subTest(path=path):
                fh = fs.open(path)
                self.assertIsInstance(fh, File)
                self.assertFalse(fh.is_dir)
                self.assertEqual(fh.read(), fs.assets[path].data)
                st = fh.stat()
                self.assertEqual(st.size, len(fs.assets[path].data))
                self.assertEqual(st.mtime_ns, 1_600_000_000_123_456_789)

    def test_read_past_end_is_empty(self):
        fh = _sample_fs().open("/a/x")
        self.assertEqual(fh.read(100), b"x-content")
        self.assertEqual(fh.read(), b"")
        self.assertEqual(fh.read(1), b"")

    def test_seek_and_partial_reads(self):
        fh = _sample_fs().open("/a/x")
        self.assertEqual(fh.read(2), b"x-")
        self.assertEqual(fh.tell(), 2)
        fh.seek(-3, 2)
        self.assertEqual(fh.read(), b"ent")
        fh.seek(0)
        buf = bytearray(4)
        self.assertEqual(fh.readinto(buf), 4)
        self.assertEqual(bytes(buf), b"x-co")

    def test_missing_path_does_not_exist(self):
        fs = _sample_fs()
        with self.assertRaises(FileDoesNotExist) as ctx:
            fs.open("/does/not/exist")
        self.assertIsInstance(ctx.exception, FileNotFoundError)
        self.assertEqual(ctx.exception.errno, errno.ENOENT)

    def test_nul_rejected_even_when_asset_exists(self):
        fs = FileSystem([_asset("/bad\x00name", b"data")])
        with self.assertRaises(InvalidPathError):
            fs.open("/bad\x00name")
        self.assertEqual(fs.string("/bad\x00name"), ("", False))

    def test_independent_cursors(self):
        fs = _sample_fs()
        first = fs.open("/a/y")
        second = fs.open("/a/y")
        self.assertEqual(first.read(5), b"\x00\x01\x02\x00\x01")
        self.assertEqual(second.read(), b"\x00\x01\x02" * 10)
        self.assertEqual(first.read(), (b"\x00\x01\x02" * 10)[5:])

    def test_stat_is_idempotent(self):
        fh = _sample_fs().open("/notes.md")
        first = fh.stat()
        fh.read()
        self.assertEqual(fh.stat(), first)
        self.assertIs(fh.stat(), first)

    def test_readdir_on_file_fails(self):
        fh = _sample_fs().open("/a/x")
        with self.assertRaises(FileDoesNotExist):
            fh.readdir(0)

    def test_close_is_noop(self):
        fh = _sample_fs().open("/a/x")
        fh.close()
        fh.close()
        self.assertEqual(fh.read(), b"x-content")
        with _sample_fs().open("/a") as d:
            d.close()

    def test_relative_path_is_treated_as_absolute(self):
        self.assertEqual(_sample_fs().open("a/x").read(), b"x-content")


class DirectoryTests(unittest.TestCase):
    def test_synthesized_directory_lists_children(self):
        fs = FileSystem([_asset("/a/x", b"1"), _asset("/a/y", b"22"), _asset("/b", b"")])
        d = fs.open("/a/")
        self.assertIsInstance(d, SyntheticDirectory)
        self.assertTrue(d.is_dir)
        self.assertTrue(d.stat().is_dir)
        self.assertFalse(hasattr(d, "read"))
        self.assertEqual({fi.name for fi in d.readdir(0)}, {"x", "y"})
        self.assertEqual({fi.size for fi in d.stat().readdir(1)}, {1, 2})

    def test_prefix_match_is_plain_string_prefix(self):
        fs = _sample_fs()
        names = {fi.name for fi in fs.open("/a").readdir()}
        # '/ab' shares the raw prefix '/a'
        self.assertEqual(names, {"x", "y", "ab"})

    def test_recorded_directory_listing_stops_at_segment(self):
        fs = FileSystem([
            Asset(path="/a", data=b"", info=FileInfo(name="a", is_dir=True)),
            _asset("/a/x", b"1"),
            _asset("/ab", b"2"),
        ])
        # Recorded '/a' lists only what lives under '/a/'.
        self.assertEqual([fi.name for fi in fs.open("/a").readdir()], ["x"])
        implied = FileSystem([_asset("/a/x", b"1"), _asset("/ab", b"2")])
        self.assertEqual({fi.name for fi in implied.open("/a").readdir()}, {"x", "ab"})

    def test_recorded_root_does_not_list_itself(self):
        fs = FileSystem([
            Asset(path="/", data=b"", info=FileInfo(name="", is_dir=True)),
            _asset("/x", b"1"),
            _asset("/d/y", b"2"),
        ])
        listing = fs.open("/").readdir()
        self.assertEqual([fi.name for fi in listing], ["y", "x"])
        self.assertNotIn("", [fi.name for fi in listing])

    def test_listing_is_recursive(self):
        fs = FileSystem([_asset("/t/one", b"1"), _asset("/t/sub/two", b"2")])
        self.assertEqual(len(fs.open("/t/").readdir()), 2)

    def test_root_lists_everything(self):
        fs = _sample_fs()
        self.assertEqual(len(fs.open("/").readdir()), len(fs))

    def test_directory_is_built_fresh_each_time(self):
        fs = _sample_fs()
        self.assertIsNot(fs.open("/a/").stat(), fs.open("/a/").stat())

    def test_recorded_directory_entry_opens_as_directory(self):
        fs = FileSystem([
            Asset(path="/docs", data=b"", info=FileInfo(name="docs", mtime_ns=42, is_dir=True)),
            _asset("/docs/readme.txt", b"hi"),
        ])
        d = fs.open("/docs")
        self.assertIsInstance(d, SyntheticDirectory)
        self.assertEqual(d.stat().name, "docs")
        self.assertEqual(d.stat().mtime_ns, 42)
        self.assertEqual([fi.name for fi in d.readdir()], ["readme.txt"])

    def test_synthesize_without_match(self):
        self.assertIsNone(synthesize(_sample_fs().assets, "/zzz"))

    def test_plain_fileinfo_has_no_children(self):
        self.assertEqual(FileInfo(name="x").readdir(), [])
        self.assertTrue(DirInfo(name="d").is_dir)


class AccessorTests(unittest.TestCase):
    def test_string_exact_match_only(self):
        fs = _sample_fs()
        self.assertEqual(fs.string("/notes.md"), ("# Título\n", True))
        self.assertEqual(fs.string("/a"), ("", False))
        self.assertEqual(fs.string("/missing"), ("", False))

    def test_string_keeps_undecodable_bytes(self):
        fs = FileSystem([_asset("/bin", b"\xff\xfe")])
        text, found = fs.string("/bin")
        self.assertTrue(found)
        self.assertEqual(text.encode("utf-8", "surrogateescape"), b"\xff\xfe")

    def test_data_shares_buffer(self):
        fs = _sample_fs()
        self.assertIs(fs.data("/a/x"), fs.assets["/a/x"].data)
        self.assertIsNone(fs.data("/a"))

    def test_container_protocol(self):
        fs = _sample_fs()
        self.assertIn("/ab", fs)
        self.assertNotIn("/a", fs)
        self.assertEqual(list(fs), sorted(fs.assets))
        self.assertEqual(fs.stat("/ab").size, 7)

    def test_mapping_is_read_only(self):
        fs = _sample_fs()
        with self.assertRaises(TypeError):
            fs.assets["/new"] = _asset("/new", b"")


class ConstructionTests(unittest.TestCase):
    def test_duplicate_paths_rejected(self):
        with self.assertRaises(DuplicatePathError):
            FileSystem([_asset("/a", b"1"), _asset("/a", b"2")])

    def test_size_must_match_data(self):
        with self.assertRaises(IntegrityError):
            Asset(path="/a", data=b"abc", info=FileInfo(name="a", size=2))

    def test_relative_asset_path_rejected(self):
        with self.assertRaises(ValueError):
            _asset("a", b"")

    def test_digest_verified(self):
        good = _asset("/a", b"payload", digest=content_digest(b"payload"))
        FileSystem([good])
        bad = _asset("/a", b"payload", digest=content_digest(b"other"))
        with self.assertRaises(IntegrityError):
            FileSystem([bad])
        FileSystem([bad], verify=False)

    def test_accepts_mapping(self):
        a = _asset("/a", b"1")
        self.assertEqual(len(FileSystem({a.path: a})), 1)


if __name__ == "__main__":
    unittest.main()
