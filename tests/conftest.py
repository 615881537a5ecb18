from __future__ import annotations

import os

os.environ.setdefault("SDL_VIDEODRIVER", "dummy")
os.environ.setdefault("SDL_AUDIODRIVER", "dummy")

import pygame  # noqa: E402
import pytest  # noqa: E402

from safety_dodger.config import Settings  # noqa: E402
from safety_dodger.game import Game  # noqa: E402
from safety_dodger.input_handler import TouchControl  # noqa: E402
from safety_dodger.leaderboard import LeaderboardStore  # noqa: E402


class ScriptedRandom:
    """Stands in for random.Random; hands out the given values in order."""

    def __init__(self, values) -> None:
        self.values = list(values)

    def random(self) -> float:
        return self.values.pop(0)


class FakeTimer:
    def __init__(self) -> None:
        self.calls: list[tuple[int, int]] = []

    def __call__(self, event_type: int, millis: int) -> None:
        self.calls.append((event_type, millis))


@pytest.fixture(scope="session", autouse=True)
def _pygame_headless():
    pygame.init()
    yield
    pygame.quit()


@pytest.fixture(autouse=True)
def _state_dir(tmp_path, monkeypatch):
    monkeypatch.setenv("SAFETY_DODGER_STATE_DIR", str(tmp_path / "state"))


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(state_dir=tmp_path / "state")


@pytest.fixture
def timer() -> FakeTimer:
    return FakeTimer()


@pytest.fixture
def game(settings, timer) -> Game:
    store = LeaderboardStore(settings.leaderboard_path)
    return Game(store, settings=settings, touch=TouchControl(set_timer=timer))
