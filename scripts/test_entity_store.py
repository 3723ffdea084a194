"""
scripts/test_entity_store.py — файловое хранилище (wallets.json / projects.json / logs.jsonl).

Run:
    python -m scripts.test_entity_store
"""

from __future__ import annotations

import asyncio
import json
import tempfile
from pathlib import Path

from scripts.report_fixtures import ensure_project_root_on_path, make_store, utc

ensure_project_root_on_path()

from core.types_report import LogQuery  # noqa: E402
from runtime.entity_codec import parse_ts  # noqa: E402
from runtime.entity_store import JsonEntityStore  # noqa: E402


def _seeded(tmp: str) -> JsonEntityStore:
    src = make_store()
    store = JsonEntityStore(Path(tmp) / "data")
    store.save_projects(src.projects)
    store.save_wallets(src.wallets)
    store.append_logs(src.logs)
    return store


def test_ensure_files_is_idempotent() -> None:
    with tempfile.TemporaryDirectory() as tmp:
        store = JsonEntityStore(Path(tmp) / "nested" / "data")
        store.ensure_files()
        assert json.loads(store.wallets_path.read_text(encoding="utf-8")) == []
        assert store.logs_path.read_text(encoding="utf-8") == ""

        store.wallets_path.write_text('[{"address": "0x1"}]', encoding="utf-8")
        store.ensure_files()
        assert len(store.load_wallets()) == 1


def test_queries_over_saved_files() -> None:
    with tempfile.TemporaryDirectory() as tmp:
        store = _seeded(tmp)
        assert asyncio.run(store.list_project_names()) == ["Alpha", "Beta"]
        beta = asyncio.run(store.find_by_name("Beta"))
        assert beta.project_id == "p2"
        assert asyncio.run(store.find_by_name("beta")) is None

        wallets = asyncio.run(store.find_by_addresses(["0xbb"]))
        assert [w.address for w in wallets] == ["0xBb"]
        in_alpha = asyncio.run(store.find_by_project("p1"))
        assert [w.index for w in in_alpha] == [1, 2, 4]

        logs = asyncio.run(store.find(LogQuery(project_name="Alpha", start_date=utc(2024, 6, 1))))
        assert [e.message for e in logs] == ["late", "fail"]
        assert logs[1].stack_trace == "Traceback: boom"
        assert logs[1].date == utc(2024, 6, 15, 12, 30, 5)


def test_balances_and_metrics_survive_round_trip() -> None:
    with tempfile.TemporaryDirectory() as tmp:
        store = _seeded(tmp)
        first = store.load_wallets()[0]
        assert first.balances == {"ETH": {"balance": {"amount": 1.5}}}
        assert first.address_lower == "0xaa"
        assert first.projects[0].metrics["points"] == "10"


def test_mongo_export_shapes() -> None:
    with tempfile.TemporaryDirectory() as tmp:
        store = JsonEntityStore(Path(tmp))
        store.projects_path.write_text(json.dumps([
            {"_id": {"$oid": "65ab"}, "name": "Gamma", "wallet_ids": [{"$oid": "w9"}],
             "created_at": {"$date": "2024-02-01T10:00:00Z"}},
        ]), encoding="utf-8")
        store.wallets_path.write_text(json.dumps([
            {"address": "0xEE", "index": {"$numberInt": "9"},
             "projects": [{"project_id": {"$oid": "65ab"}, "project_name": "Gamma", "metrics": {"xp": 1}}]},
        ]), encoding="utf-8")

        project = store.load_projects()[0]
        assert project.project_id == "65ab"
        assert project.wallet_ids == ["w9"]
        assert project.created_at == utc(2024, 2, 1, 10, 0, 0)

        wallet = store.load_wallets()[0]
        assert wallet.index == 9
        assert wallet.address_lower == "0xee"
        assert [w.address for w in asyncio.run(store.find_by_project("65ab"))] == ["0xEE"]


def test_broken_lines_and_files_are_skipped() -> None:
    with tempfile.TemporaryDirectory() as tmp:
        store = JsonEntityStore(Path(tmp))
        store.logs_path.write_text(
            '{"message": "a", "date": "2024-01-01T00:00:00Z"}\n'
            "{not json\n"
            "\n"
            '{"message": "b", "date": 1704153600}\n',
            encoding="utf-8",
        )
        assert [e.message for e in store.load_logs()] == ["a", "b"]

        store.wallets_path.write_text("{broken", encoding="utf-8")
        assert store.load_wallets() == []
        assert store.load_projects() == []


def test_parse_ts_variants() -> None:
    expected = utc(2024, 1, 2, 0, 0, 0)
    assert parse_ts("2024-01-02T00:00:00Z") == expected
    assert parse_ts("2024-01-02T00:00:00") == expected
    assert parse_ts(1704153600) == expected
    assert parse_ts(1704153600000) == expected
    assert parse_ts({"$date": {"$numberLong": "1704153600000"}}) == expected
    assert parse_ts("yesterday") is None
    assert parse_ts(None) is None


def test_prune_logs_keeps_recent_and_undated() -> None:
    with tempfile.TemporaryDirectory() as tmp:
        store = _seeded(tmp)
        with store.logs_path.open("a", encoding="utf-8") as f:
            f.write('{"message": "no date", "extra": 1}\n')

        removed = store.prune_logs(days=90, now=utc(2025, 3, 1))
        assert removed == 3
        lines = [json.loads(x) for x in store.logs_path.read_text(encoding="utf-8").splitlines()]
        assert [x["message"] for x in lines] == ["late", "no date"]
        # raw fields are preserved
        assert lines[1]["extra"] == 1

        assert store.prune_logs(days=90, now=utc(2025, 3, 1)) == 0


def main() -> None:
    for name, fn in sorted(globals().items()):
        if name.startswith("test_") and callable(fn):
            fn()
            print(f"ok  {name}")
    print("OK: entity store")


if __name__ == "__main__":
    main()
