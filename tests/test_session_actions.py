from __future__ import annotations

import json
from datetime import datetime, timezone

import pygame

from safety_dodger.config import load_settings
from safety_dodger.game import FIELD_NAME, STATE_GAMEOVER, STATE_IDLE, Game
from safety_dodger.input_handler import TouchControl
from safety_dodger.leaderboard import LeaderboardStore, ScoreRecord

WHEN = datetime(2024, 5, 1, 8, 30, 15, 250000, tzinfo=timezone.utc)


def _game_over(game: Game, score: int) -> Game:
    game.start(0)
    game.score = score
    game.end_game()
    return game


def test_save_without_details_shows_notice_and_keeps_game_over(game) -> None:
    _game_over(game, 5)
    game.form.values[FIELD_NAME] = "Kim"

    assert game.save_record() is None

    assert game.dialog is not None
    assert game.state == STATE_GAMEOVER
    assert game.leaderboard == []
    assert not game.store.path.exists()


def test_save_record_goes_to_title_and_remembers_player(game, settings) -> None:
    _game_over(game, 5)
    game.form.values.update(name="Kim", dept="QA")

    rec = game.save_record(now=WHEN)

    assert rec == ScoreRecord("Kim", "QA", 5, "2024-05-01T08:30:15.250Z")
    assert game.leaderboard == [rec]
    assert game.state == STATE_IDLE
    reloaded = load_settings(settings.state_dir)
    assert (reloaded.player_name, reloaded.player_dept) == ("Kim", "QA")


def test_form_is_prefilled_from_settings(settings, timer) -> None:
    settings.player_name = "Lee"
    settings.player_dept = "Ops"
    game = Game(LeaderboardStore(settings.leaderboard_path), settings=settings, touch=TouchControl(set_timer=timer))
    assert (game.form.name, game.form.dept) == ("Lee", "Ops")


def test_typing_fills_the_entry_form(game) -> None:
    _game_over(game, 2)
    game.handle_event(pygame.event.Event(pygame.TEXTINPUT, text="QA"))
    game.handle_event(pygame.event.Event(pygame.KEYDOWN, key=pygame.K_TAB))
    game.handle_event(pygame.event.Event(pygame.TEXTINPUT, text="Kimm"))
    game.handle_event(pygame.event.Event(pygame.KEYDOWN, key=pygame.K_BACKSPACE))
    assert (game.form.dept, game.form.name) == ("QA", "Kim")

    game.handle_event(pygame.event.Event(pygame.KEYDOWN, key=pygame.K_RETURN))
    assert game.state == STATE_IDLE
    assert game.leaderboard[0].score == 2


def test_typing_is_ignored_outside_game_over(game) -> None:
    game.handle_event(pygame.event.Event(pygame.TEXTINPUT, text="x"))
    assert game.form.dept == ""


def test_clear_asks_first(game) -> None:
    game.store.save(ScoreRecord("a", "b", 1, ""))
    game.leaderboard = list(game.store.records)

    game.handle_key("c")
    assert game.dialog is not None and game.dialog.is_confirm
    game.handle_key("escape")
    assert len(game.leaderboard) == 1

    game.handle_key("c")
    game.handle_key("y")
    assert game.leaderboard == []
    assert game.dialog is None
    assert not game.store.path.exists()


def test_export_and_import_from_the_title_screen(game, settings) -> None:
    game.store.save(ScoreRecord("a", "b", 4, ""))
    game.leaderboard = list(game.store.records)

    game.handle_key("e")
    assert json.loads(settings.export_path.read_text(encoding="utf-8"))[0]["score"] == 4
    game.close_dialog(True)

    settings.import_path.write_text(json.dumps([{"name": "z", "dept": "y", "score": 9, "dateISO": ""}]),
                                    encoding="utf-8")
    game.handle_key("i")
    assert game.dialog.title == "Import"
    assert [r.score for r in game.leaderboard] == [9, 4]


def test_bad_import_reports_and_keeps_board(game, settings) -> None:
    game.store.save(ScoreRecord("a", "b", 4, ""))
    game.leaderboard = list(game.store.records)
    settings.import_path.write_text("not json", encoding="utf-8")

    assert game.import_leaderboard() is False

    assert game.dialog.title == "Import failed"
    assert [r.score for r in game.leaderboard] == [4]


def test_help_toggles_on_title(game) -> None:
    game.handle_key("h")
    assert game.show_help
    game.handle_key("escape")
    assert not game.show_help
    assert game.state == STATE_IDLE


def test_import_of_out_of_range_scores_shows_notice(game, settings) -> None:
    settings.state_dir.mkdir(parents=True, exist_ok=True)
    settings.import_path.write_text('[{"name": "x", "dept": "y", "score": 1e999}]', encoding="utf-8")

    assert game.import_leaderboard() is False

    assert game.dialog.title == "Import failed"
    assert game.leaderboard == []


def test_corrupt_leaderboard_file_does_not_stop_startup(settings, timer) -> None:
    settings.state_dir.mkdir(parents=True, exist_ok=True)
    settings.leaderboard_path.write_text("[" * 100_000 + "]" * 100_000, encoding="utf-8")

    game = Game(LeaderboardStore(settings.leaderboard_path), settings=settings, touch=TouchControl(set_timer=timer))

    assert game.leaderboard == []
