from __future__ import annotations

import unittest

from pam_u2f_mapping.model import Key, Mapping, MappingFile, ModelError

from tests.test_helpers import make_mapping_file


class KeyTests(unittest.TestCase):
    def test_flag_properties(self) -> None:
        key = Key("H", "P", "es256", ["pin", "presence"])
        self.assertTrue(key.requires_pin)
        self.assertTrue(key.requires_presence)
        self.assertFalse(key.requires_verification)

    def test_set_flag_appends_once(self) -> None:
        key = Key("H", "P", "es256", ["presence"])
        key.set_flag("pin")
        key.set_flag("pin")
        self.assertEqual(key.flags, ["presence", "pin"])

    def test_clear_flag_keeps_other_order(self) -> None:
        key = Key("H", "P", "es256", ["verification", "pin", "presence", "pin"])
        key.set_flag("pin", enabled=False)
        self.assertEqual(key.flags, ["verification", "presence"])

    def test_rejects_separators_in_fields(self) -> None:
        with self.assertRaises(ModelError):
            Key("H,1", "P", "es256")
        with self.assertRaises(ModelError):
            Key("H", "P:1", "es256")
        with self.assertRaises(ModelError):
            Key("H", "P", "es,256")
        with self.assertRaises(ModelError):
            Key("H", "P", "es256", ["pin+presence"])
        with self.assertRaises(ModelError):
            Key("H", "P", "es256").set_flag("a:b")

    def test_rejects_newlines(self) -> None:
        with self.assertRaises(ModelError):
            Key("H\n", "P", "es256")
        with self.assertRaises(ModelError):
            Mapping(user="ali\nce")
        with self.assertRaises(ModelError):
            Mapping(user="bob\r")
        with self.assertRaises(ModelError):
            Key("H", "P", "es256", ["pin\r"])

    def test_assignment_is_validated(self) -> None:
        key = Key("H", "P", "es256", ["pin"])
        with self.assertRaises(ModelError):
            key.handle = "a,b"
        with self.assertRaises(ModelError):
            key.kind = "es:256"
        with self.assertRaises(ModelError):
            key.flags = ["pin+presence"]
        self.assertEqual(key, Key("H", "P", "es256", ["pin"]))

        mapping = Mapping(user="alice")
        with self.assertRaises(ModelError):
            mapping.user = "x:y"
        self.assertEqual(mapping.user, "alice")
        mapping.user = "bob"
        self.assertEqual(mapping.user, "bob")

    def test_base64_plus_in_handle_is_fine(self) -> None:
        key = Key("ab+c/d==", "P", "es256")
        self.assertEqual(key.handle, "ab+c/d==")

    def test_flags_are_copied(self) -> None:
        flags = ["pin"]
        key = Key("H", "P", "es256", flags)
        key.set_flag("presence")
        self.assertEqual(flags, ["pin"])


class MappingTests(unittest.TestCase):
    def test_rejects_colon_in_user(self) -> None:
        with self.assertRaises(ModelError):
            Mapping(user="alice:bob")

    def test_add_and_remove_key(self) -> None:
        mapping = Mapping(user="alice")
        first = mapping.add_key(Key("H1", "P1", "es256"))
        mapping.add_key(Key("H2", "P2", "es256"))
        self.assertIs(mapping.remove_key(0), first)
        self.assertEqual([key.handle for key in mapping.keys], ["H2"])

    def test_remove_key_out_of_range(self) -> None:
        mapping = Mapping(user="alice", keys=[Key("H", "P", "es256")])
        with self.assertRaises(ModelError):
            mapping.remove_key(1)
        with self.assertRaises(ModelError):
            mapping.remove_key(-1)


class MappingFileTests(unittest.TestCase):
    def test_find(self) -> None:
        mapping_file = make_mapping_file()
        found = mapping_file.find("bob")
        assert found is not None
        self.assertEqual(len(found.keys), 2)
        self.assertIsNone(mapping_file.find("carol"))

    def test_add_user(self) -> None:
        mapping_file = make_mapping_file()
        mapping = mapping_file.add_user("carol")
        self.assertEqual(mapping_file.users(), ["alice", "bob", "carol"])
        self.assertEqual(mapping.keys, [])

    def test_add_user_rejects_duplicates_and_empty(self) -> None:
        mapping_file = make_mapping_file()
        with self.assertRaises(ModelError):
            mapping_file.add_user("alice")
        with self.assertRaises(ModelError):
            mapping_file.add_user("")

    def test_remove_user(self) -> None:
        mapping_file = make_mapping_file()
        removed = mapping_file.remove_user("alice")
        self.assertEqual(removed.user, "alice")
        self.assertEqual(mapping_file.users(), ["bob"])
        with self.assertRaises(ModelError):
            mapping_file.remove_user("alice")

    def test_key_count(self) -> None:
        self.assertEqual(make_mapping_file().key_count(), 3)
        self.assertEqual(MappingFile().key_count(), 0)


if __name__ == "__main__":
    unittest.main()
