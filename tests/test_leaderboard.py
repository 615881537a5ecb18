from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path

import pytest

from safety_dodger.errors import LeaderboardImportError, RecordValidationError
from safety_dodger.leaderboard import LeaderboardStore, ScoreRecord, iso_now

WHEN = datetime(2024, 5, 1, 8, 30, 15, 250000, tzinfo=timezone.utc)


def _rec(name: str, score: int, dept: str = "QA") -> ScoreRecord:
    return ScoreRecord(name=name, dept=dept, score=score, date_iso="2024-05-01T08:30:15.250Z")


def _store(tmp_path: Path) -> LeaderboardStore:
    store = LeaderboardStore(tmp_path / "lb.json")
    store.load()
    return store


def test_iso_now_matches_browser_format() -> None:
    assert iso_now(WHEN) == "2024-05-01T08:30:15.250Z"


def test_load_missing_file_is_empty(tmp_path: Path) -> None:
    assert LeaderboardStore(tmp_path / "nope.json").load() == []


@pytest.mark.parametrize("content", ["{not json", '{"name": "x"}', '[{"name": "x"}]', "[1, 2]"])
def test_load_corrupt_storage_is_empty(tmp_path: Path, content: str) -> None:
    path = tmp_path / "lb.json"
    path.write_text(content, encoding="utf-8")
    store = LeaderboardStore(path)
    assert store.load() == []
    assert store.records == []


def test_save_first_record(tmp_path: Path) -> None:
    store = _store(tmp_path)
    rec = ScoreRecord.create("Kim", "QA", 5, now=WHEN)

    board = store.save(rec)

    assert board == [ScoreRecord("Kim", "QA", 5, "2024-05-01T08:30:15.250Z")]
    stored = json.loads((tmp_path / "lb.json").read_text(encoding="utf-8"))
    assert stored == [{"name": "Kim", "dept": "QA", "score": 5, "dateISO": "2024-05-01T08:30:15.250Z"}]


def test_save_keeps_board_sorted_descending(tmp_path: Path) -> None:
    store = _store(tmp_path)
    store.save(_rec("a", 5))
    board = store.save(_rec("b", 10))
    assert [r.score for r in board] == [10, 5]
    board = store.save(_rec("c", 7))
    assert [r.score for r in board] == [10, 7, 5]


def test_equal_scores_keep_insertion_order(tmp_path: Path) -> None:
    store = _store(tmp_path)
    store.save(_rec("first", 3))
    board = store.save(_rec("second", 3))
    assert [r.name for r in board] == ["first", "second"]


def test_memory_and_storage_agree_after_every_change(tmp_path: Path) -> None:
    store = _store(tmp_path)
    store.save(_rec("a", 1))
    store.import_text(json.dumps([_rec("b", 9).to_dict()]))
    assert LeaderboardStore(store.path).load() == store.records
    store.clear()
    assert LeaderboardStore(store.path).load() == store.records == []


def test_clear_removes_the_file(tmp_path: Path) -> None:
    store = _store(tmp_path)
    store.save(_rec("a", 1))
    store.clear()
    assert not store.path.exists()
    store.clear()


def test_create_requires_name_and_department() -> None:
    with pytest.raises(RecordValidationError):
        ScoreRecord.create("  ", "QA", 1)
    with pytest.raises(RecordValidationError):
        ScoreRecord.create("Kim", "", 1)
    rec = ScoreRecord.create("  Kim ", " QA", 1, now=WHEN)
    assert (rec.name, rec.dept) == ("Kim", "QA")


def test_import_merges_and_sorts(tmp_path: Path) -> None:
    store = _store(tmp_path)
    store.save(_rec("mine", 5))
    text = json.dumps([None, {"name": "x", "dept": "Ops", "score": 10, "dateISO": ""}, 0, False])

    board = store.import_text(text)

    assert [(r.name, r.score) for r in board] == [("x", 10), ("mine", 5)]


@pytest.mark.parametrize("text", ["not json", '{"score": 3}', "[5]", '[{"name": "no score"}]'])
def test_failed_import_changes_nothing(tmp_path: Path, text: str) -> None:
    store = _store(tmp_path)
    store.save(_rec("mine", 5))
    before = store.path.read_text(encoding="utf-8")

    with pytest.raises(LeaderboardImportError):
        store.import_text(text)

    assert [r.name for r in store.records] == ["mine"]
    assert store.path.read_text(encoding="utf-8") == before


def test_import_missing_file_fails(tmp_path: Path) -> None:
    store = _store(tmp_path)
    with pytest.raises(LeaderboardImportError):
        store.import_file(tmp_path / "missing.json")


def test_export_then_import_round_trip(tmp_path: Path) -> None:
    src = LeaderboardStore(tmp_path / "src.json")
    for rec in (_rec("a", 3), _rec("b", 8, dept="Ops"), _rec("c", 1)):
        src.save(rec)

    dst = LeaderboardStore(tmp_path / "dst.json")
    dst.load()
    dst.import_text(src.export())

    assert set(dst.records) == set(src.records)
    assert "\n  " in src.export()


def test_export_file(tmp_path: Path) -> None:
    store = _store(tmp_path)
    store.save(_rec("a", 2))
    out = store.export_file(tmp_path / "out" / "export.json")
    assert json.loads(out.read_text(encoding="utf-8"))[0]["name"] == "a"


DEEP_ARRAY = "[" * 100_000 + "]" * 100_000


@pytest.mark.parametrize("content", ['[{"score": 1e999}]', '[{"score": Infinity}]', '[{"score": NaN}]', DEEP_ARRAY])
def test_load_survives_out_of_range_json(tmp_path: Path, content: str) -> None:
    path = tmp_path / "lb.json"
    path.write_text(content, encoding="utf-8")
    assert LeaderboardStore(path).load() == []


@pytest.mark.parametrize("text", ['[{"score": 1e999}]', '[{"score": -Infinity}]', DEEP_ARRAY])
def test_import_of_out_of_range_json_is_an_import_error(tmp_path: Path, text: str) -> None:
    store = _store(tmp_path)
    store.save(_rec("mine", 5))

    with pytest.raises(LeaderboardImportError):
        store.import_text(text)

    assert [r.name for r in store.records] == ["mine"]


def test_import_keeps_fractional_scores(tmp_path: Path) -> None:
    store = _store(tmp_path)
    store.save(_rec("mine", 5))

    board = store.import_text('[{"name": "f", "dept": "QA", "score": 5.9, "dateISO": ""}]')

    assert [r.score for r in board] == [5.9, 5]
    assert json.loads(store.path.read_text(encoding="utf-8"))[0]["score"] == 5.9


def test_null_fields_become_empty_strings(tmp_path: Path) -> None:
    store = _store(tmp_path)
    board = store.import_text('[{"name": null, "dept": null, "score": 1, "dateISO": null}]')
    assert board == [ScoreRecord(name="", dept="", score=1, date_iso="")]
