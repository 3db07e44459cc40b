import asyncio
import json

import pytest

from dartmacro.shared.datastore import JsonDataStore
from dartmacro.shared.errors import MacroNotFoundError, MacroValidationError
from dartmacro.shared.models.base import next_timestamp, utcnow
from dartmacro.shared.repositories import AliasRepository, VariableRepository
from tests.conftest import make_alias


class TestScopes:
    def test_merged_order_character_first(self):
        async def main():
            repo = AliasRepository()
            await repo.switch_character("Gandalf")
            repo.insert(make_alias("g1", "x", id="g1"), "global")
            repo.insert(make_alias("c1", "x", id="c1"), "character")
            repo.insert(make_alias("g2", "x", id="g2"), "global")
            return [alias.id for alias in repo.merged()]

        assert asyncio.run(main()) == ["c1", "g1", "g2"]

    def test_character_scope_needs_character(self):
        repo = AliasRepository()
        assert repo.list_scope("character") == []
        with pytest.raises(MacroValidationError):
            repo.insert(make_alias("x", "y"), "character")

    def test_get_missing(self):
        with pytest.raises(MacroNotFoundError):
            AliasRepository().get("nope", "global")

    def test_list_enabled_skips_disabled(self):
        repo = AliasRepository()
        repo.insert(make_alias("on", "x", id="on"), "global")
        repo.insert(make_alias("off", "x", id="off", enabled=False), "global")
        assert [alias.id for alias in repo.list_enabled()] == ["on"]


class TestVariableStore:
    def test_lookup_case_insensitive_character_wins(self):
        async def main():
            repo = VariableRepository()
            repo.set_value("Target", "global-orc", "global")
            await repo.switch_character("Frodo")
            repo.set_value("target", "char-orc", "character")
            return repo.lookup("TARGET"), repo.visible()

        value, visible = asyncio.run(main())
        assert value == "char-orc"
        assert visible == [("target", "char-orc")]

    def test_set_value_falls_back_to_global(self):
        repo = VariableRepository()
        variable = repo.set_value("hp", "10")
        assert repo.scope_of(variable.id) == "global"

    def test_set_value_updates_in_place(self):
        repo = VariableRepository()
        first = repo.set_value("hp", "10", "global")
        stamp = first.updated_at
        second = repo.set_value("HP", "11", "global")
        assert second.id == first.id
        assert second.updated_at > stamp
        assert repo.lookup("hp") == "11"

    def test_disabled_variable_invisible(self):
        repo = VariableRepository()
        repo.set_value("hp", "10", "global").enabled = False
        assert repo.lookup("hp") is None

    def test_delete_by_name_prefers_character(self):
        async def main():
            repo = VariableRepository()
            repo.set_value("x", "g", "global")
            await repo.switch_character("Sam")
            repo.set_value("x", "c", "character")
            assert repo.delete_by_name("x")
            return repo.lookup("x")

        assert asyncio.run(main()) == "g"

    def test_reserved_names_rejected(self):
        with pytest.raises(MacroValidationError):
            VariableRepository().set_value("line", "x", "global")


def test_next_timestamp_strictly_increases():
    now = utcnow()
    later = next_timestamp(now.replace(year=now.year + 1))
    assert later > now.replace(year=now.year + 1)


class TestPersistence:
    def test_flush_and_reload(self, tmp_path):
        async def write():
            repo = AliasRepository(JsonDataStore(tmp_path))
            await repo.switch_character("Gandalf")
            repo.insert(make_alias("g", "global body", id="g"), "global")
            repo.insert(make_alias("c", "char body", id="c"), "character")
            await repo.flush()

        async def read():
            repo = AliasRepository(JsonDataStore(tmp_path))
            await repo.load_global()
            before = [alias.id for alias in repo.merged()]
            await repo.switch_character("gandalf")
            return before, [alias.body for alias in repo.merged()]

        asyncio.run(write())
        saved = json.loads((tmp_path / "aliases.json").read_text())
        assert set(saved) == {"global", "gandalf"}
        assert saved["gandalf"]["c"]["matchMode"] == "prefix"

        before, bodies = asyncio.run(read())
        assert before == ["g"]
        assert bodies == ["char body", "global body"]

    def test_switch_character_flushes_previous(self, tmp_path):
        async def main():
            store = JsonDataStore(tmp_path)
            repo = AliasRepository(store)
            await repo.switch_character("Merry")
            repo.insert(make_alias("m", "x", id="m"), "character")
            await repo.switch_character("Pippin")
            assert repo.merged() == []
            await repo.switch_character("Merry")
            return [alias.id for alias in repo.merged()]

        assert asyncio.run(main()) == ["m"]

    def test_malformed_records_skipped(self, tmp_path):
        (tmp_path / "aliases.json").write_text(
            json.dumps({"global": {"bad": {"pattern": "x"}, "ok": {"id": "ok", "pattern": "y"}}})
        )

        async def main():
            repo = AliasRepository(JsonDataStore(tmp_path))
            await repo.load_global()
            return [alias.id for alias in repo.merged()]

        assert asyncio.run(main()) == ["ok"]

    def test_unreadable_file_loads_empty(self, tmp_path):
        (tmp_path / "aliases.json").write_text("{not json")

        async def main():
            return await JsonDataStore(tmp_path).get("aliases.json", "global")

        assert asyncio.run(main()) is None
