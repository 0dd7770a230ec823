from __future__ import annotations

import unittest
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional

from keyset_pager.core.models import (
    pk_field,
    row_to_model,
    table_name,
    unwrap_optional,
)
from keyset_pager.entities import AnimalRanking


@dataclass(frozen=True)
class Note:
    id: int = field(metadata={"pk": True})
    body: Optional[str] = None


@dataclass
class NoPk:
    value: int = 0


class ModelHelperTests(unittest.TestCase):
    def test_table_name(self) -> None:
        self.assertEqual(table_name(AnimalRanking), "animal_rankings")
        self.assertEqual(table_name(Note), "note")
        self.assertEqual(table_name(Note(id=1)), "note")

    def test_pk_field(self) -> None:
        self.assertEqual(pk_field(AnimalRanking).name, "id")
        with self.assertRaises(ValueError):
            pk_field(NoPk)

    def test_unwrap_optional(self) -> None:
        self.assertEqual(unwrap_optional(Optional[int]), (int, True))
        self.assertEqual(unwrap_optional(int | None), (int, True))
        self.assertEqual(unwrap_optional(str), (str, False))


class RowScanTests(unittest.TestCase):
    def row(self, **overrides) -> dict:  # noqa: ANN003
        values = {
            "id": 1,
            "rank": 1,
            "name": "Lion",
            "created_at": "2024-09-25 10:00:00+00:00",
            "updated_at": datetime(2024, 9, 25, 10, 0),
        }
        values.update(overrides)
        return values

    def test_scans_text_timestamps(self) -> None:
        model = row_to_model(AnimalRanking, self.row())
        self.assertEqual(model.created_at, datetime(2024, 9, 25, 10, 0, tzinfo=timezone.utc))
        self.assertEqual(model.updated_at, datetime(2024, 9, 25, 10, 0))

    def test_scans_zulu_and_bytes(self) -> None:
        model = row_to_model(
            AnimalRanking, self.row(created_at=b"2024-09-25T10:00:00Z", name=b"Lion")
        )
        self.assertEqual(model.created_at.tzinfo, timezone.utc)
        self.assertEqual(model.name, "Lion")

    def test_extra_columns_are_ignored(self) -> None:
        model = row_to_model(AnimalRanking, self.row(extra="ignored"))
        self.assertEqual(model.rank, 1)

    def test_type_mismatches(self) -> None:
        samples = {
            "missing": {k: v for k, v in self.row().items() if k != "rank"},
            "bool rank": self.row(rank=True),
            "text rank": self.row(rank="1"),
            "int name": self.row(name=1),
            "bad timestamp": self.row(created_at="noon"),
            "null name": self.row(name=None),
        }
        for label, row in samples.items():
            with self.subTest(label=label):
                with self.assertRaises(TypeError):
                    row_to_model(AnimalRanking, row)

    def test_nullable_fields(self) -> None:
        self.assertIsNone(row_to_model(Note, {"id": 1, "body": None}).body)
