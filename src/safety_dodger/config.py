"""Gameplay constants and user settings stored at ~/.safety_dodger/settings.json."""

from __future__ import annotations

import json
import logging
import os
import secrets
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)

# Playfield
CANVAS_W, CANVAS_H = 420, 640
PLAYER_W, PLAYER_H = 60, 16
PLAYER_GAP = 6  # space between paddle and bottom edge
ITEM_W, ITEM_H = 54, 28
ITEM_RADIUS = 6

# Window layout around the playfield
PANEL_W = 340
TOUCH_BAR_H = 64
WINDOW_W, WINDOW_H = CANVAS_W + PANEL_W, CANVAS_H + TOUCH_BAR_H

# Motion, normalised to 60 updates per second
FRAME_MS = 1000 / 60.0
PLAYER_SPEED = 6.0
BASE_SPEED = 2.2
SPEED_JITTER = 1.4
FALL_MULTIPLIER = 3
DESPAWN_MARGIN = 40

# Spawning and difficulty
SPAWN_MS = 700
MIN_SPAWN_MS = 180
SAFETY_CHANCE = 0.55
SPEED_RAMP = 0.0007
MIN_SCALE, MAX_SCALE = 1.0, 3.5

# Touch buttons nudge the paddle on their own timer
TOUCH_STEP = 8
TOUCH_INTERVAL_MS = 16

LABEL_MAX_CHARS = 12
STORAGE_KEY = "safety_dodger_lb_v1"

HAZARDS = [
    "No toolbox talk",
    "No safety harness",
    "Guard bypassed",
    "Ladder misuse",
    "No fall guardrail",
    "Confined space skipped",
    "No lockout/tagout",
    "No safety glasses",
    "No extinguisher",
    "Work permit ignored",
]

SAFETIES = [
    "Toolbox talk held",
    "Harness worn",
    "Gas levels measured",
    "Guard in place",
    "Guardrail installed",
    "Confined space OK",
    "Lockout/tagout done",
    "PPE worn",
    "Extinguisher checked",
    "Work permit followed",
]


def default_state_dir() -> Path:
    override = os.environ.get("SAFETY_DODGER_STATE_DIR")
    if override:
        return Path(override)
    return Path.home() / ".safety_dodger"


@dataclass
class Settings:
    """User-configurable settings.  Empty strings mean 'not set'."""

    # Where the leaderboard, exports and this file live.
    state_dir: Path = field(default_factory=default_state_dir)
    # Frame cap for the main loop.
    fps: int = 60
    # Repeat rate of the on-screen touch buttons.
    touch_interval_ms: int = TOUCH_INTERVAL_MS
    # Fixed seed for item spawning (None = random).
    seed: Optional[int] = None
    # Defaults for the game-over entry form.
    player_name: str = ""
    player_dept: str = ""

    @property
    def leaderboard_path(self) -> Path:
        return Path(self.state_dir) / f"{STORAGE_KEY}.json"

    @property
    def export_path(self) -> Path:
        return Path(self.state_dir) / "leaderboard_export.json"

    @property
    def import_path(self) -> Path:
        return Path(self.state_dir) / "leaderboard_import.json"

    @property
    def settings_path(self) -> Path:
        return Path(self.state_dir) / "settings.json"


_INT_FIELDS = ("fps", "touch_interval_ms")
_STR_FIELDS = ("player_name", "player_dept")


def load_settings(state_dir=None, **overrides) -> Settings:
    """Read settings.json leniently, then apply non-None overrides."""
    base = Path(state_dir) if state_dir else default_state_dir()
    cfg = Settings(state_dir=base)
    raw = {}
    p = cfg.settings_path
    if p.exists():
        try:
            raw = json.loads(p.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning("Ignoring unreadable settings file %s: %s", p, e)
            raw = {}
    if not isinstance(raw, dict):
        raw = {}

    for name in _INT_FIELDS:
        val = raw.get(name)
        if isinstance(val, (int, float)) and not isinstance(val, bool) and val > 0:
            setattr(cfg, name, int(val))
    for name in _STR_FIELDS:
        val = raw.get(name)
        if isinstance(val, str):
            setattr(cfg, name, val)
    seed = raw.get("seed")
    if isinstance(seed, int) and not isinstance(seed, bool):
        cfg.seed = seed

    for name, val in overrides.items():
        if val is not None and hasattr(cfg, name):
            setattr(cfg, name, val)
    return cfg


def save_settings(cfg: Settings) -> None:
    d = Path(cfg.state_dir)
    d.mkdir(parents=True, exist_ok=True)
    data = asdict(cfg)
    data.pop("state_dir")
    p = cfg.settings_path
    tmp = p.with_name(f"{p.name}.{os.getpid()}.{secrets.token_hex(4)}.tmp")
    tmp.write_text(json.dumps(data, indent=2, sort_keys=True) + "\n", encoding="utf-8")
    tmp.replace(p)
