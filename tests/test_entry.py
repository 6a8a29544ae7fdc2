import time
import unittest
from datetime import datetime, timezone
from unittest import mock

from pydantic import ValidationError

from tarentry.constants import (
    DEFAULT_DIR_MODE,
    DEFAULT_FILE_MODE,
    GNU_LONGLINK,
    GNU_TMAGIC,
    LF_DIR,
    LF_GNUTYPE_LONGNAME,
    LF_NORMAL,
    LF_SYMLINK,
    TMAGIC,
)
from tarentry.factory import EntryReadError
from tarentry.header import decode_header, encode_header
from tarentry.paths import POSIX
from tarentry.schemas import TarEntry
from tests.base import TarEntryTestCase


class TestEntryFromName(unittest.TestCase):
    def test_plain_file_defaults(self):
        before = int(time.time())
        entry = TarEntry.from_name("a", platform=POSIX)

        self.assertEqual(entry.name, "a")
        self.assertEqual(entry.mode, DEFAULT_FILE_MODE)
        self.assertEqual(entry.link_flag, LF_NORMAL)
        self.assertEqual(entry.magic, TMAGIC)
        self.assertEqual(entry.size, 0)
        self.assertEqual((entry.owner_id, entry.group_id), (0, 0))
        self.assertEqual((entry.owner_name, entry.group_name), ("", ""))
        self.assertIsNone(entry.file_ref)
        self.assertGreaterEqual(entry.mod_time, before)
        self.assertFalse(entry.is_directory())

    def test_trailing_slash_makes_directory(self):
        entry = TarEntry.from_name("a/", platform=POSIX)
        self.assertTrue(entry.is_directory())
        self.assertEqual(entry.mode, DEFAULT_DIR_MODE)
        self.assertEqual(entry.link_flag, LF_DIR)

    def test_directory_link_flag(self):
        entry = TarEntry.from_name("a", LF_DIR, platform=POSIX)
        self.assertTrue(entry.is_directory())

    def test_name_is_normalized(self):
        self.assertEqual(TarEntry.from_name("/etc/passwd", platform=POSIX).name, "etc/passwd")
        entry = TarEntry.from_name("/etc/passwd", preserve_leading_slashes=True, platform=POSIX)
        self.assertEqual(entry.name, "/etc/passwd")

    def test_gnu_long_name_uses_gnu_magic(self):
        entry = TarEntry.from_name(GNU_LONGLINK, LF_GNUTYPE_LONGNAME, platform=POSIX)
        self.assertEqual(entry.magic, GNU_TMAGIC)
        self.assertTrue(entry.is_gnu_long_name_entry())

        other = TarEntry.from_name("x", LF_SYMLINK, platform=POSIX)
        self.assertEqual(other.magic, TMAGIC)
        self.assertFalse(other.is_gnu_long_name_entry())

    def test_changing_link_flag_keeps_magic(self):
        entry = TarEntry.from_name("a", platform=POSIX)
        entry.link_flag = LF_GNUTYPE_LONGNAME
        self.assertEqual(entry.magic, TMAGIC)

    def test_link_flag_must_be_one_byte(self):
        with self.assertRaises(ValidationError):
            TarEntry(name="x", link_flag=b"55")

        entry = TarEntry(name="x")
        with self.assertRaises(ValidationError):
            entry.link_flag = b""

    def test_setters(self):
        entry = TarEntry.from_name("a", platform=POSIX)
        entry.set_name("/b/c", platform=POSIX)
        entry.set_ids(10, 20)
        entry.set_names("bob", "wheel")

        self.assertEqual(entry.name, "b/c")
        self.assertEqual((entry.owner_id, entry.group_id), (10, 20))
        self.assertEqual((entry.owner_name, entry.group_name), ("bob", "wheel"))

    def test_mod_datetime(self):
        entry = TarEntry(name="a", mod_time=1700000000)
        self.assertEqual(
            entry.mod_datetime, datetime(2023, 11, 14, 22, 13, 20, tzinfo=timezone.utc)
        )

    def test_set_mod_time_from_datetime_and_millis(self):
        entry = TarEntry(name="a")

        entry.set_mod_datetime(datetime(2023, 11, 14, 22, 13, 20, tzinfo=timezone.utc))
        self.assertEqual(entry.mod_time, 1700000000)

        entry.set_mod_time_millis(1700000001999)
        self.assertEqual(entry.mod_time, 1700000001)

    def test_negative_mode_and_mod_time_rejected(self):
        for field in ["mode", "mod_time"]:
            with self.subTest(field=field):
                with self.assertRaises(ValidationError):
                    TarEntry(name="old", **{field: -1})

                entry = TarEntry(name="old")
                with self.assertRaises(ValidationError):
                    setattr(entry, field, -1)

        with self.assertRaises(ValidationError):
            TarEntry(name="old").set_mod_time_millis(-1)


class TestEntryIdentity(unittest.TestCase):
    def test_equality_is_name_only(self):
        a = TarEntry(name="same", size=1, mode=0o100644)
        b = TarEntry(name="same", size=999, mode=0o40755)

        self.assertEqual(a, b)
        self.assertEqual(hash(a), hash(b))
        self.assertEqual(len({a, b}), 1)

    def test_different_names_differ(self):
        self.assertNotEqual(TarEntry(name="a"), TarEntry(name="b"))

    def test_incompatible_type_is_not_equal(self):
        entry = TarEntry(name="a")
        self.assertFalse(entry == "a")
        self.assertFalse(entry == None)  # noqa: E711
        self.assertNotEqual(entry, 42)

    def test_descendant_prefix(self):
        parent = TarEntry(name="a/")
        self.assertTrue(parent.is_descendant(TarEntry(name="a/b")))
        self.assertFalse(parent.is_descendant(TarEntry(name="b/a")))

    def test_descendant_is_not_segment_aware(self):
        """A literal string prefix: "ab" is a parent of "abc"."""
        self.assertTrue(TarEntry(name="ab").is_descendant(TarEntry(name="abc")))


class TestEntryFromPath(TarEntryTestCase):
    def test_regular_file(self):
        p = self.create_file("notes.txt", "hello")
        entry = TarEntry.from_path(p, platform=POSIX)

        self.assertEqual(entry.name, str(p).lstrip("/"))
        self.assertEqual(entry.size, 5)
        self.assertEqual(entry.mode, DEFAULT_FILE_MODE)
        self.assertEqual(entry.link_flag, LF_NORMAL)
        self.assertEqual(entry.mod_time, int(p.stat().st_mtime))
        self.assertEqual(entry.file_ref, p)
        self.assertFalse(entry.is_directory())

    def test_directory_gets_trailing_slash(self):
        entry = TarEntry.from_path(self.data_dir, platform=POSIX)

        self.assertTrue(entry.name.endswith("dataset/"))
        self.assertEqual(entry.size, 0)
        self.assertEqual(entry.mode, DEFAULT_DIR_MODE)
        self.assertEqual(entry.link_flag, LF_DIR)
        self.assertTrue(entry.is_directory())

    def test_filesystem_is_authoritative(self):
        entry = TarEntry.from_path(self.create_file("plain.txt"), platform=POSIX)
        entry.link_flag = LF_DIR
        entry.name = "plain.txt/"
        self.assertFalse(entry.is_directory())

    def test_missing_path(self):
        with self.assertRaises(FileNotFoundError):
            TarEntry.from_path(self.data_dir / "ghost.txt", platform=POSIX)

    def test_list_children(self):
        self.create_file("a.txt")
        self.create_file("sub/b.txt")

        entry = TarEntry.from_path(self.data_dir, platform=POSIX)
        names = sorted(child.name for child in entry.list_children(POSIX))

        self.assertEqual(len(names), 2)
        self.assertTrue(names[0].endswith("dataset/a.txt"))
        self.assertTrue(names[1].endswith("dataset/sub/"))
        for name in names:
            self.assertTrue(entry.is_descendant(TarEntry(name=name)))

    def test_list_children_is_not_cached(self):
        self.create_file("a.txt")
        entry = TarEntry.from_path(self.data_dir, platform=POSIX)
        self.assertEqual(len(entry.list_children(POSIX)), 1)

        self.create_file("b.txt")
        self.assertEqual(len(entry.list_children(POSIX)), 2)

    def test_list_children_without_directory(self):
        file_entry = TarEntry.from_path(self.create_file("a.txt"), platform=POSIX)
        self.assertEqual(file_entry.list_children(POSIX), [])
        self.assertEqual(TarEntry.from_name("dir/", platform=POSIX).list_children(), [])

    def test_list_children_read_error(self):
        entry = TarEntry.from_path(self.data_dir, platform=POSIX)

        with mock.patch("tarentry.factory.os.listdir", side_effect=PermissionError("denied")):
            with self.assertLogs("tarentry.factory", level="ERROR"):
                with self.assertRaises(EntryReadError) as cm:
                    entry.list_children(POSIX)

        self.assertIsInstance(cm.exception, OSError)
        self.assertIsInstance(cm.exception.__cause__, PermissionError)

    def test_list_children_vanished_child(self):
        entry = TarEntry.from_path(self.data_dir, platform=POSIX)

        with mock.patch("tarentry.factory.os.listdir", return_value=["ghost.txt"]):
            with self.assertLogs("tarentry.factory", level="ERROR"):
                with self.assertRaises(EntryReadError) as cm:
                    entry.list_children(POSIX)

        self.assertIsInstance(cm.exception.__cause__, FileNotFoundError)

    def test_decoded_entry_has_no_file_ref(self):
        entry = TarEntry.from_path(self.create_file("a.txt"), platform=POSIX)
        decoded = decode_header(encode_header(entry))

        self.assertIsNone(decoded.file_ref)
        self.assertEqual(decoded, entry)


if __name__ == "__main__":
    unittest.main()
