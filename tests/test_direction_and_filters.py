from __future__ import annotations

import unittest

from keyset_pager.core.direction import Direction, comparison_operator
from keyset_pager.core.errors import InvalidDirection, ListingError
from keyset_pager.core.filters import Equals, OneOf, parse_filters


class DirectionTests(unittest.TestCase):
    def test_parse_accepts_members_and_names(self) -> None:
        samples = [
            (Direction.ASC, Direction.ASC),
            ("ASC", Direction.ASC),
            ("desc", Direction.DESC),
            (" Desc ", Direction.DESC),
        ]
        for raw, expected in samples:
            with self.subTest(raw=raw):
                self.assertIs(Direction.parse(raw), expected)

    def test_parse_rejects_unknown_values(self) -> None:
        for raw in ("INVALID", "", "ascending", None, 1):
            with self.subTest(raw=raw):
                with self.assertRaises(InvalidDirection) as ctx:
                    Direction.parse(raw)
                self.assertIsInstance(ctx.exception, ListingError)
                self.assertIsInstance(ctx.exception, ValueError)

    def test_comparison_operator(self) -> None:
        self.assertEqual(comparison_operator(Direction.ASC), ">")
        self.assertEqual(comparison_operator("DESC"), "<")
        with self.assertRaises(InvalidDirection):
            comparison_operator("sideways")


class FilterVariantTests(unittest.TestCase):
    def test_one_of_freezes_values_as_tuple(self) -> None:
        item = OneOf(["Elephant", "Leopard"])
        self.assertEqual(item.values, ("Elephant", "Leopard"))
        self.assertEqual(item, OneOf(("Elephant", "Leopard")))

    def test_one_of_rejects_plain_string(self) -> None:
        with self.assertRaises(TypeError):
            OneOf("Elephant")

    def test_variants_are_hashable_and_immutable(self) -> None:
        self.assertEqual(hash(Equals(1)), hash(Equals(1)))
        with self.assertRaises(AttributeError):
            Equals(1).value = 2  # type: ignore[misc]


class ParseFiltersTests(unittest.TestCase):
    def test_scalars_become_equals_and_collections_one_of(self) -> None:
        parsed = parse_filters(
            {"name": "Lion", "rank": 3, "uuid": ["uuid-1", "uuid-2"], "id": (1, 2)}
        )
        self.assertEqual(
            parsed,
            {
                "name": Equals("Lion"),
                "rank": Equals(3),
                "uuid": OneOf(["uuid-1", "uuid-2"]),
                "id": OneOf([1, 2]),
            },
        )

    def test_sets_are_sorted(self) -> None:
        parsed = parse_filters({"rank": {3, 1, 2}})
        self.assertEqual(parsed["rank"], OneOf([1, 2, 3]))

    def test_empty_collections_are_dropped(self) -> None:
        parsed = parse_filters({"name": [], "rank": set(), "uuid": OneOf([]), "id": 1})
        self.assertEqual(parsed, {"id": Equals(1)})

    def test_variants_pass_through(self) -> None:
        item = OneOf(["a"])
        self.assertIs(parse_filters({"name": item})["name"], item)

    def test_empty_input(self) -> None:
        self.assertEqual(parse_filters(None), {})
        self.assertEqual(parse_filters({}), {})

    def test_key_order_is_preserved(self) -> None:
        parsed = parse_filters({"name": "a", "rank": 1, "uuid": "u"})
        self.assertEqual(list(parsed), ["name", "rank", "uuid"])
