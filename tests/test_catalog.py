"""Tests for the exercise catalog and identifier resolution."""

from soulfit.schemas.goals import EQUIPMENT_CATALOG
from soulfit.services.catalog import ExerciseResolver, filter_by_equipment, load_catalog, normalize


class TestCatalog:
    def test_every_equipment_has_exercises(self):
        catalog = load_catalog()
        for equipment in EQUIPMENT_CATALOG:
            assert filter_by_equipment(catalog, [equipment]), equipment

    def test_ids_are_unique(self):
        ids = [e.id for e in load_catalog()]
        assert len(ids) == len(set(ids))

    def test_filter_by_equipment(self):
        entries = filter_by_equipment(load_catalog(), ["Arm Chair"])
        assert {e.equipment for e in entries} == {"Arm Chair"}
        assert "armchair-biceps" in {e.id for e in entries}

    def test_filter_tolerates_case(self):
        assert filter_by_equipment(load_catalog(), ["cadillac"])


class TestResolver:
    def setup_method(self):
        self.resolver = ExerciseResolver(filter_by_equipment(load_catalog(), ["Mat"]))

    def test_normalize(self):
        assert normalize("  Roll-Up ") == "roll up"
        assert normalize("Child's Pose") == "child s pose"

    def test_exact_id(self):
        assert self.resolver.resolve("mat-hundred").name == "The Hundred"

    def test_normalized_id(self):
        assert self.resolver.resolve("MAT_HUNDRED").id == "mat-hundred"

    def test_name(self):
        assert self.resolver.resolve("the hundred").id == "mat-hundred"

    def test_outside_candidates(self):
        assert self.resolver.resolve("ref-footwork") is None
