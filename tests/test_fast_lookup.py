from __future__ import annotations

import unittest

from tinyrule.lookup import FastStringLookup, fnv1a_32


class FastLookupTests(unittest.TestCase):
    def test_fnv1a_known_values(self) -> None:
        self.assertEqual(fnv1a_32(b""), 0)
        self.assertEqual(fnv1a_32(b"a"), 97 * 16777619)
        self.assertEqual(fnv1a_32(b"ab"), ((97 * 16777619) ^ 98) * 16777619 & 0xFFFFFFFF)

    def test_set_and_get_round_trip(self) -> None:
        table: FastStringLookup[int] = FastStringLookup()
        table.set("alpha", 1)
        table.set("beta", 2)

        self.assertEqual(table.get("alpha"), 1)
        self.assertEqual(table.get("beta"), 2)
        self.assertIsNone(table.get("gamma"))
        self.assertEqual(table.get("gamma", -1), -1)
        self.assertEqual(len(table), 2)
        self.assertIn("alpha", table)
        self.assertNotIn("gamma", table)

    def test_lookup_is_case_sensitive(self) -> None:
        table: FastStringLookup[str] = FastStringLookup()
        table.set("Name", "upper")
        self.assertEqual(table.get("Name"), "upper")
        self.assertIsNone(table.get("name"))

    def test_direct_bucket_verifies_stored_key(self) -> None:
        table: FastStringLookup[int] = FastStringLookup(size=1)
        table.set("a", 1)

        self.assertEqual(table.bucket_state("a"), "direct")
        self.assertEqual(table.bucket_state("zzz"), "direct")
        self.assertIsNone(table.get("zzz"))
        self.assertIsNone(table.get("aa"))

    def test_collision_falls_back_to_exact_match(self) -> None:
        table: FastStringLookup[int] = FastStringLookup(size=1)
        for idx, key in enumerate(("eq", "neq", "gt", "contains")):
            table.set(key, idx)

        self.assertEqual(table.bucket_state("eq"), "collided")
        self.assertEqual(table.get("eq"), 0)
        self.assertEqual(table.get("neq"), 1)
        self.assertEqual(table.get("gt"), 2)
        self.assertEqual(table.get("contains"), 3)
        self.assertIsNone(table.get("lt"))

    def test_collided_bucket_never_reverts(self) -> None:
        table: FastStringLookup[int] = FastStringLookup(size=1)
        table.set("x", 1)
        table.set("y", 2)
        table.set("x", 10)
        table.set("y", 20)

        self.assertEqual(table.bucket_state("x"), "collided")
        self.assertEqual(table.get("x"), 10)
        self.assertEqual(table.get("y"), 20)

    def test_rebinding_same_key_keeps_direct_bucket(self) -> None:
        table: FastStringLookup[int] = FastStringLookup()
        table.set("a", 1)
        table.set("a", 2)

        self.assertEqual(table.bucket_state("a"), "direct")
        self.assertEqual(table.get("a"), 2)
        self.assertEqual(len(table), 1)

    def test_clear_resets_buckets_values_and_fallback(self) -> None:
        table: FastStringLookup[int] = FastStringLookup(size=1)
        table.set("x", 1)
        table.set("y", 2)
        table.clear()

        self.assertEqual(table.bucket_state("x"), "empty")
        self.assertIsNone(table.get("x"))
        self.assertIsNone(table.get("y"))
        self.assertEqual(len(table), 0)

        table.set("y", 3)
        self.assertEqual(table.bucket_state("y"), "direct")
        self.assertEqual(table.get("y"), 3)

    def test_many_keys_remain_retrievable(self) -> None:
        table: FastStringLookup[int] = FastStringLookup(size=7)
        keys = [f"var_{i}" for i in range(200)]
        for idx, key in enumerate(keys):
            table.set(key, idx)

        for idx, key in enumerate(keys):
            with self.subTest(key=key):
                self.assertEqual(table.get(key), idx)
        self.assertEqual(len(table), len(keys))
        self.assertTrue(all(key in table for key in keys))

    def test_non_ascii_keys_hash_utf8_bytes(self) -> None:
        table: FastStringLookup[int] = FastStringLookup()
        table.set("año", 1)
        self.assertEqual(table.get("año"), 1)
        self.assertIsNone(table.get("ano"))

    def test_size_must_be_positive(self) -> None:
        with self.assertRaises(ValueError):
            FastStringLookup(size=0)


if __name__ == "__main__":
    unittest.main()
