"""Tests for type-key resolution and the seed providers."""

from __future__ import annotations

from src.config import Priority
from src.sla.domain import ComplaintTypeConfig, TypeCatalog
from src.sla.infrastructure.repositories import (
    StaticSeedProvider,
    YAMLSeedProvider,
    decode_value,
    parse_legacy_type,
)
from tests.factories import NOISE, ROADS, WATER, catalog


class TestTypeCatalog:
    """Alias lookup and display-name fallback."""

    def test_lookup_by_key_name_and_id(self) -> None:
        entry = ComplaintTypeConfig(key="SEWAGE", name="Sewage", sla_hours=24, id="a1b2")
        types = TypeCatalog.build([entry])
        for alias in ("SEWAGE", "sewage", "Sewage", "A1B2"):
            assert types.lookup(alias) is entry, f"{alias!r} should resolve to the sewage entry"

    def test_first_entry_wins(self) -> None:
        structured = ComplaintTypeConfig(key="ROADS", name="Roads", sla_hours=72)
        legacy = ComplaintTypeConfig(key="ROADS", name="Old Roads", sla_hours=12)
        types = TypeCatalog.build([structured, legacy])
        assert types.sla_hours("roads") == 72, "the structured entry should shadow the legacy one"
        assert types.display_name("ROADS") == "Roads"

    def test_display_name_falls_back_to_raw_key(self) -> None:
        types = catalog()
        assert types.display_name("WATER_SUPPLY") == "Water Supply", "known key gets its display name"
        assert types.display_name("UNLISTED") == "UNLISTED", "unknown key is shown as-is"
        assert types.display_name(None) == "Others", "a missing type is grouped as Others"

    def test_canonical_key_and_aliases(self) -> None:
        types = catalog()
        assert types.canonical_key("Road Repair") == "ROAD_REPAIR", "names should map to keys"
        assert types.canonical_key("mystery") == "mystery", "unknown aliases are left alone"
        assert set(types.aliases("road repair")) == {"ROAD_REPAIR", "Road Repair", "road repair"}

    def test_default_priority(self) -> None:
        types = catalog()
        assert types.default_priority("WATER_SUPPLY") == Priority.HIGH
        assert types.default_priority("NOISE") is None

    def test_sla_hours_none_for_unusable(self) -> None:
        assert catalog().sla_hours("NOISE") is None, "type without hours has no SLA"
        assert not NOISE.has_sla and WATER.has_sla


class TestLegacyRecords:
    """COMPLAINT_TYPE_<KEY> records in system_config."""

    def test_parse_json_document(self) -> None:
        entry = parse_legacy_type(
            "COMPLAINT_TYPE_DRAINAGE", '{"name": "Drainage", "slaHours": 36, "priority": "high"}'
        )
        assert entry.key == "DRAINAGE", "prefix should be stripped"
        assert entry.sla_hours == 36
        assert entry.priority == Priority.HIGH, "priority should be case-insensitive"

    def test_rejects_other_keys_and_non_objects(self) -> None:
        assert parse_legacy_type("APP_NAME", {"name": "x"}) is None
        assert parse_legacy_type("COMPLAINT_TYPE_", {"name": "x"}) is None
        assert parse_legacy_type("COMPLAINT_TYPE_X", "not json") is None

    def test_decode_value(self) -> None:
        assert decode_value("48") == 48, "JSON numbers decode"
        assert decode_value("plain text") == "plain text", "non-JSON stays text"
        assert decode_value(None) is None


class TestSeedProviders:
    """Static seed table."""

    def test_static_seed_with_legacy_entries(self) -> None:
        seed = StaticSeedProvider(
            system_config={"COMPLAINT_TYPE_LITTER": {"name": "Litter", "slaHours": 12}},
            complaint_types=[ROADS],
        )
        keys = [entry.key for entry in seed.type_catalog()]
        assert keys == ["ROAD_REPAIR", "LITTER"], "structured types first, legacy second"
        assert seed.get("LITTER") == 12, "legacy type keys resolve to hours"
        assert seed.get("road repair") == 72

    def test_yaml_seed(self, tmp_path) -> None:
        path = tmp_path / "seed.yaml"
        path.write_text(
            "system_config:\n"
            "  SLA_WARNING_WINDOW_HOURS: 12\n"
            "complaint_types:\n"
            "  - key: WATER_SUPPLY\n"
            "    name: Water Supply\n"
            "    sla_hours: 24\n"
            "    priority: HIGH\n"
            "  - name: missing key is skipped\n",
            encoding="utf-8",
        )
        seed = YAMLSeedProvider(path)
        assert seed.get("SLA_WARNING_WINDOW_HOURS") == 12
        assert [e.key for e in seed.type_catalog()] == ["WATER_SUPPLY"], "entries without a key are skipped"
        assert seed.get("Water Supply") == 24

    def test_missing_yaml_gives_empty_seed(self, tmp_path) -> None:
        seed = YAMLSeedProvider(tmp_path / "absent.yaml")
        assert seed.type_catalog() == [], "missing file should give an empty catalog"
        assert seed.get("ANYTHING") is None

    def test_shipped_seed_file(self) -> None:
        from pathlib import Path

        seed = YAMLSeedProvider(Path(__file__).resolve().parent.parent / "config_seed.yaml")
        assert seed.get("WATER_SUPPLY") == 24, "shipped seed should carry the water supply SLA"
        assert seed.get("SLA_WARNING_WINDOW_HOURS") == 24
        assert len(seed.type_catalog()) == 10
