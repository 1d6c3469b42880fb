import json
import tempfile
import unittest
from pathlib import Path

from guildhall.game.catalog import RecordStore
from guildhall.game.errors import LoadFailure, ParseFailure
from guildhall.game.repository import DataStore
from guildhall.models import Contract, Hero


def hero_record(hero_id, clan="red", **stats):
    return {
        "type": "hero",
        "id": hero_id,
        "name": hero_id.replace("_", " ").title(),
        "clan": clan,
        "hero": {"base_stats": stats or {"strength": 10}},
    }


def contract_record(contract_id, category="economy", mandatory=False, probability=0.5):
    return {
        "type": "contract",
        "id": contract_id,
        "name": contract_id.replace("_", " ").title(),
        "is_mandatory": mandatory,
        "contract": {
            "category": category,
            "difficulty": 1.0,
            "base_duration_seconds": 60,
            "spawn_probability": probability,
        },
    }


class FakeLoader:
    """Serve records from a dict; exceptions stored as values are raised."""

    def __init__(self, records):
        self.records = records
        self.requests = []

    def load_record(self, kind, name):
        self.requests.append((kind, name))
        value = self.records[(kind, name)]
        if isinstance(value, Exception):
            raise value
        return value


class RecordStoreLookupTests(unittest.TestCase):
    def setUp(self):
        self.store = RecordStore()
        self.store.populate(
            [
                Hero.model_validate(hero_record("fire_wizard", clan="red")),
                Hero.model_validate(hero_record("forest_ranger", clan="green")),
                Hero.model_validate(hero_record("ember_knight", clan="red")),
            ],
            [
                Contract.model_validate(contract_record("copper_mining", "economy")),
                Contract.model_validate(contract_record("bandit_attack", "combat", mandatory=True)),
                Contract.model_validate(contract_record("trade_spices", "economy")),
                Contract(id="no_terms", name="No Terms"),
            ],
        )

    def test_lookup_by_id(self):
        self.assertEqual(self.store.get_hero("forest_ranger").clan, "green")
        self.assertEqual(self.store.get_contract("bandit_attack").category, "combat")
        self.assertIsNone(self.store.get_hero("missing"))
        self.assertIsNone(self.store.get_contract("missing"))

    def test_lists_keep_load_order(self):
        self.assertEqual(
            [hero.id for hero in self.store.list_heroes()],
            ["fire_wizard", "forest_ranger", "ember_knight"],
        )
        self.assertEqual(self.store.contract_count, 4)

    def test_filters_preserve_order(self):
        self.assertEqual(
            [hero.id for hero in self.store.heroes_by_clan("red")],
            ["fire_wizard", "ember_knight"],
        )
        self.assertEqual(
            [contract.id for contract in self.store.contracts_by_category("economy")],
            ["copper_mining", "trade_spices"],
        )
        self.assertEqual(
            [contract.id for contract in self.store.mandatory_contracts()],
            ["bandit_attack"],
        )

    def test_returned_lists_do_not_alias_catalog(self):
        heroes = self.store.list_heroes()
        heroes.clear()
        self.assertEqual(self.store.hero_count, 3)

    def test_duplicate_ids_keep_later_definition_in_first_slot(self):
        first = Hero.model_validate(hero_record("twin", strength=1))
        second = Hero.model_validate(hero_record("twin", strength=9))
        other = Hero.model_validate(hero_record("other"))
        store = RecordStore()
        with self.assertLogs("guildhall.catalog", level="WARNING"):
            store.populate([first, other, second], [])

        self.assertEqual([hero.id for hero in store.list_heroes()], ["twin", "other"])
        self.assertEqual(store.get_hero("twin").stat("strength"), 9)


class RecordStoreReloadTests(unittest.TestCase):
    def test_failed_sources_are_skipped_and_reported(self):
        bad_type = hero_record("imposter")
        bad_type["type"] = "contract"
        loader = FakeLoader(
            {
                ("hero", "a.json"): hero_record("hero_a"),
                ("hero", "missing.json"): LoadFailure("missing.json", "resource not found"),
                ("hero", "broken.json"): ParseFailure("broken.json", "invalid JSON"),
                ("hero", "imposter.json"): bad_type,
                ("hero", "b.json"): hero_record("hero_b"),
                ("contract", "c.json"): contract_record("contract_c"),
                ("contract", "nameless.json"): {"type": "contract", "id": "x", "name": ""},
            }
        )
        store = RecordStore()

        with self.assertLogs("guildhall.catalog", level="INFO") as logs:
            report = store.reload(
                loader,
                ["a.json", "missing.json", "broken.json", "imposter.json", "b.json"],
                ["c.json", "nameless.json"],
            )

        self.assertEqual([hero.id for hero in store.list_heroes()], ["hero_a", "hero_b"])
        self.assertEqual([c.id for c in store.list_contracts()], ["contract_c"])
        self.assertEqual(report.heroes, 2)
        self.assertEqual(report.contracts, 1)
        self.assertFalse(report.ok)
        self.assertEqual(
            [(f.kind, f.source, f.failure) for f in report.failures],
            [
                ("hero", "missing.json", "load"),
                ("hero", "broken.json", "parse"),
                ("hero", "imposter.json", "parse"),
                ("contract", "nameless.json", "parse"),
            ],
        )
        self.assertTrue(any("Data loading complete. Heroes: 2, Contracts: 1" in line for line in logs.output))

    def test_records_need_an_exact_type_tag(self):
        untagged_contract = contract_record("contract_c")
        del untagged_contract["type"]
        shouting = hero_record("hero_b")
        shouting["type"] = "HERO"
        loader = FakeLoader(
            {
                ("hero", "untagged.json"): {"id": "h", "name": "H"},
                ("hero", "shouting.json"): shouting,
                ("hero", "a.json"): hero_record("hero_a"),
                ("contract", "untagged.json"): untagged_contract,
            }
        )
        store = RecordStore()

        with self.assertLogs("guildhall.catalog", level="ERROR"):
            report = store.reload(loader, ["untagged.json", "shouting.json", "a.json"], ["untagged.json"])

        self.assertEqual([hero.id for hero in store.list_heroes()], ["hero_a"])
        self.assertEqual(store.contract_count, 0)
        self.assertEqual(
            [(f.kind, f.source, f.failure) for f in report.failures],
            [
                ("hero", "untagged.json", "parse"),
                ("hero", "shouting.json", "parse"),
                ("contract", "untagged.json", "parse"),
            ],
        )

    def test_non_finite_stat_in_source_is_reported(self):
        raw = json.loads('{"type": "hero", "id": "h", "name": "H", "hero": {"base_stats": {"strength": NaN}}}')
        loader = FakeLoader({("hero", "nan.json"): raw})
        store = RecordStore()

        with self.assertLogs("guildhall.catalog", level="ERROR"):
            report = store.reload(loader, ["nan.json"], [])

        self.assertEqual(store.hero_count, 0)
        self.assertEqual([f.failure for f in report.failures], ["parse"])

    def test_reload_replaces_previous_catalog(self):
        store = RecordStore()
        store.populate([Hero.model_validate(hero_record("old"))], [])

        loader = FakeLoader({("hero", "new.json"): hero_record("new")})
        report = store.reload(loader, ["new.json"], [])

        self.assertTrue(report.ok)
        self.assertIsNone(store.get_hero("old"))
        self.assertIsNotNone(store.get_hero("new"))

    def test_abandoned_reload_keeps_previous_catalog(self):
        store = RecordStore()
        store.populate(
            [Hero.model_validate(hero_record("keeper"))],
            [Contract.model_validate(contract_record("kept"))],
        )
        loader = FakeLoader(
            {
                ("hero", "ok.json"): hero_record("fresh"),
                ("hero", "boom.json"): RuntimeError("disk vanished"),
            }
        )

        with self.assertRaises(RuntimeError):
            store.reload(loader, ["ok.json", "boom.json"], [])

        self.assertEqual([hero.id for hero in store.list_heroes()], ["keeper"])
        self.assertIsNone(store.get_hero("fresh"))
        self.assertIsNotNone(store.get_contract("kept"))


class DataStoreLoaderTests(unittest.TestCase):
    def setUp(self):
        self.tmpdir = tempfile.TemporaryDirectory()
        self.addCleanup(self.tmpdir.cleanup)
        self.base = Path(self.tmpdir.name)
        self.datastore = DataStore(self.base)
        self.datastore.heroes_dir.mkdir(parents=True)
        self.datastore.contracts_dir.mkdir(parents=True)

    def test_load_record_reads_json_object(self):
        path = self.datastore.heroes_dir / "hero_a.json"
        path.write_text(json.dumps(hero_record("hero_a")), encoding="utf-8")

        record = self.datastore.load_record("hero", "hero_a.json")
        self.assertEqual(record["id"], "hero_a")

    def test_missing_file_is_load_failure(self):
        with self.assertRaises(LoadFailure) as ctx:
            self.datastore.load_record("contract", "nope.json")
        self.assertEqual(ctx.exception.source, "nope.json")

    def test_malformed_json_is_parse_failure(self):
        (self.datastore.contracts_dir / "bad.json").write_text("{not json", encoding="utf-8")
        with self.assertRaises(ParseFailure):
            self.datastore.load_record("contract", "bad.json")

    def test_non_object_json_is_parse_failure(self):
        (self.datastore.contracts_dir / "list.json").write_text("[1, 2]", encoding="utf-8")
        with self.assertRaises(ParseFailure):
            self.datastore.load_record("contract", "list.json")

    def test_unknown_kind_is_rejected(self):
        with self.assertRaises(ValueError):
            self.datastore.resource_path("dragon", "x.json")

    def test_record_store_reload_from_disk(self):
        (self.datastore.heroes_dir / "hero_a.json").write_text(
            json.dumps(hero_record("hero_a", clan="blue", intelligence=14)), encoding="utf-8"
        )
        (self.datastore.contracts_dir / "mining.json").write_text(
            json.dumps(contract_record("mining")), encoding="utf-8"
        )
        (self.datastore.contracts_dir / "bad.json").write_text("[]", encoding="utf-8")
        store = RecordStore()

        with self.assertLogs("guildhall.catalog", level="ERROR"):
            report = store.reload(self.datastore, ["hero_a.json", "gone.json"], ["mining.json", "bad.json"])

        self.assertEqual(store.get_hero("hero_a").stats, {"intelligence": 14})
        self.assertEqual(store.get_contract("mining").spawn_probability, 0.5)
        self.assertEqual(
            [(f.source, f.failure) for f in report.failures],
            [("gone.json", "load"), ("bad.json", "parse")],
        )

    def test_configure_paths_overrides_directories(self):
        self.datastore.configure_paths({"data_dir": "game_data", "contracts_dir": "custom/contracts"})

        self.assertEqual(self.datastore.data_dir, (self.base / "game_data").resolve())
        self.assertEqual(self.datastore.heroes_dir, (self.base / "game_data" / "heroes").resolve())
        self.assertEqual(self.datastore.contracts_dir, (self.base / "custom" / "contracts").resolve())


if __name__ == "__main__":
    unittest.main()
