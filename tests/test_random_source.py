from __future__ import annotations

import os
import unittest
from unittest.mock import patch

from cauction.access import DEFAULT_ADMIN_IDS, admin_participant_ids, is_admin
from cauction.draw.identifiers import BASE62_ALPHABET, generate_conflict_id
from cauction.draw.random_source import (
    FixedRandomSource,
    SeededRandomSource,
    SystemRandomSource,
    pick_index,
    random_source_from_env,
    shuffle_in_place,
)


class _AlwaysOne:
    def next(self) -> float:
        return 1.0


class RandomSourceTests(unittest.TestCase):
    def test_fixed_source_replays_then_repeats_last_value(self) -> None:
        source = FixedRandomSource(0.1, 0.5)
        self.assertEqual([source.next() for _ in range(4)], [0.1, 0.5, 0.5, 0.5])
        self.assertEqual(source.calls, 4)

    def test_fixed_source_rejects_out_of_range_values(self) -> None:
        with self.assertRaises(ValueError):
            FixedRandomSource(1.0)
        with self.assertRaises(ValueError):
            FixedRandomSource()

    def test_seeded_sources_are_reproducible(self) -> None:
        first = SeededRandomSource(42)
        second = SeededRandomSource(42)
        self.assertEqual(
            [first.next() for _ in range(5)], [second.next() for _ in range(5)]
        )

    def test_system_source_stays_in_unit_interval(self) -> None:
        source = SystemRandomSource()
        for _ in range(100):
            value = source.next()
            self.assertGreaterEqual(value, 0.0)
            self.assertLess(value, 1.0)

    def test_pick_index_clamps_to_last_position(self) -> None:
        self.assertEqual(pick_index(_AlwaysOne(), 4), 3)
        self.assertEqual(pick_index(FixedRandomSource(0.0), 4), 0)
        with self.assertRaises(ValueError):
            pick_index(FixedRandomSource(0.0), 0)

    def test_shuffle_with_zero_source_is_deterministic(self) -> None:
        items = [1, 2, 3]
        shuffle_in_place(items, FixedRandomSource(0.0))
        self.assertEqual(items, [2, 3, 1])

    def test_random_source_from_env_uses_seed(self) -> None:
        with patch.dict(os.environ, {"AUCTION_RANDOM_SEED": "7"}):
            source = random_source_from_env()
        self.assertIsInstance(source, SeededRandomSource)
        self.assertEqual(source.seed, 7)

    def test_random_source_from_env_defaults_to_system(self) -> None:
        with patch.dict(os.environ, {"AUCTION_RANDOM_SEED": ""}):
            self.assertIsInstance(random_source_from_env(), SystemRandomSource)

    def test_random_source_from_env_rejects_garbage(self) -> None:
        with patch.dict(os.environ, {"AUCTION_RANDOM_SEED": "abc"}):
            with self.assertRaises(ValueError):
                random_source_from_env()


class IdentifierTests(unittest.TestCase):
    def test_conflict_ids_are_prefixed_and_distinct(self) -> None:
        first = generate_conflict_id()
        second = generate_conflict_id()
        self.assertTrue(first.startswith("conflict-"))
        self.assertEqual(len(first), len("conflict-") + 12)
        self.assertTrue(all(ch in BASE62_ALPHABET for ch in first[len("conflict-"):]))
        self.assertNotEqual(first, second)


class AccessTests(unittest.TestCase):
    def test_configured_admin_ids(self) -> None:
        with patch.dict(os.environ, {"AUCTION_ADMIN_IDS": " X1, X2 ,"}):
            self.assertEqual(admin_participant_ids(), frozenset({"X1", "X2"}))
            self.assertTrue(is_admin("X2"))
            self.assertFalse(is_admin("ADMIN001"))

    def test_default_admin_ids(self) -> None:
        with patch.dict(os.environ, {}, clear=False):
            os.environ.pop("AUCTION_ADMIN_IDS", None)
            self.assertEqual(admin_participant_ids(), frozenset(DEFAULT_ADMIN_IDS))
            self.assertTrue(is_admin("ADMIN001"))
        self.assertFalse(is_admin(None))
        self.assertFalse(is_admin(""))


if __name__ == "__main__":
    unittest.main()
