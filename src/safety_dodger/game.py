import logging

import pygame

from .config import CANVAS_H, DESPAWN_MARGIN, FRAME_MS, MAX_SCALE, MIN_SCALE, SPEED_RAMP, Settings, save_settings
from .errors import DodgerError, LeaderboardImportError, RecordValidationError
from .input_handler import PAUSE_KEY, START_KEYS, TOUCH_REPEAT_EVENT, InputHandler, TouchControl, key_name
from .leaderboard import LeaderboardStore, ScoreRecord
from .player import Player
from .spawner import Spawner

logger = logging.getLogger(__name__)

STATE_IDLE = "idle"
STATE_RUNNING = "running"
STATE_PAUSED = "paused"
STATE_GAMEOVER = "gameover"

FIELD_DEPT = "dept"
FIELD_NAME = "name"
FIELD_MAX_CHARS = 24


def clamp(n, lo, hi):
    return max(lo, min(hi, n))


class Dialog:
    """Modal notice. Confirm dialogs run ``on_confirm`` when accepted."""

    def __init__(self, message, title="", on_confirm=None):
        self.message = message
        self.title = title
        self.on_confirm = on_confirm

    @property
    def is_confirm(self):
        return self.on_confirm is not None


class EntryForm:
    """Department/name text fields shown on the game-over screen."""

    def __init__(self, name="", dept=""):
        self.values = {FIELD_DEPT: dept, FIELD_NAME: name}
        self.active = FIELD_DEPT

    @property
    def name(self):
        return self.values[FIELD_NAME]

    @property
    def dept(self):
        return self.values[FIELD_DEPT]

    def switch(self):
        self.active = FIELD_NAME if self.active == FIELD_DEPT else FIELD_DEPT

    def type(self, text):
        cur = self.values[self.active]
        self.values[self.active] = (cur + text)[:FIELD_MAX_CHARS]

    def backspace(self):
        self.values[self.active] = self.values[self.active][:-1]


class Game:
    """One play session: run state, items, input and a handle to the leaderboard store."""

    def __init__(self, store=None, settings=None, rng=None, touch=None):
        self.settings = settings or Settings()
        self.store = store if store is not None else LeaderboardStore(self.settings.leaderboard_path)
        self.leaderboard = self.store.load()
        self.input = InputHandler()
        self.touch = touch or TouchControl(interval_ms=self.settings.touch_interval_ms)
        self.spawner = Spawner(rng=rng)
        self.player = Player()
        self.items = []
        self.score = 0
        self.speed_scale = MIN_SCALE
        self.running = False
        self.paused = False
        self.game_over = False
        self.paused_at_ms = None
        self.last_frame_ms = None

        self.form = EntryForm(self.settings.player_name, self.settings.player_dept)
        self.dialog = None
        self.show_help = False
        self.request_quit = False

    @property
    def state(self):
        if self.running:
            return STATE_RUNNING
        if self.game_over:
            return STATE_GAMEOVER
        if self.paused:
            return STATE_PAUSED
        return STATE_IDLE

    # -- state transitions -------------------------------------------------

    def start(self, now_ms):
        self.items = []
        self.score = 0
        self.speed_scale = MIN_SCALE
        self.game_over = False
        self.paused = False
        self.running = True
        self.show_help = False
        self.spawner.reset_timer(now_ms)
        self.last_frame_ms = now_ms
        logger.info("Run started")

    def pause(self, now_ms=None):
        if not self.running:
            return
        self.running = False
        self.paused = True
        self.paused_at_ms = now_ms
        logger.info("Paused at score %d", self.score)

    def resume(self, now_ms):
        if not self.paused:
            return
        if self.paused_at_ms is not None:
            self.spawner.shift_timer(now_ms - self.paused_at_ms)
        self.paused = False
        self.paused_at_ms = None
        self.running = True
        self.last_frame_ms = now_ms
        logger.info("Resumed")

    def toggle_pause(self, now_ms):
        if self.running:
            self.pause(now_ms)
        elif self.paused:
            self.resume(now_ms)

    def end_game(self):
        self.running = False
        self.paused = False
        self.game_over = True
        logger.info("Game over with score %d", self.score)

    def reset(self):
        self.items = []
        self.score = 0
        self.speed_scale = MIN_SCALE
        self.running = False
        self.paused = False
        self.game_over = False
        self.paused_at_ms = None
        self.player = Player()

    def shutdown(self):
        self.touch.release()
        self.input.release_all()
        self.running = False

    # -- per-frame update --------------------------------------------------

    def tick(self, now_ms):
        """Advance one animation frame using wall-clock time."""
        if self.last_frame_ms is None:
            self.last_frame_ms = now_ms
        dt = (now_ms - self.last_frame_ms) / FRAME_MS
        self.last_frame_ms = now_ms
        if self.dialog is None:
            self.update(dt, now_ms)

    def update(self, dt, now_ms):
        if not self.running:
            return

        self.player.move(self.input.direction(), dt)

        item = self.spawner.maybe_spawn(now_ms, self.speed_scale)
        if item is not None:
            self.items.append(item)

        # speed never decreases during a run
        self.speed_scale = clamp(self.speed_scale + SPEED_RAMP * dt, MIN_SCALE, MAX_SCALE)

        self.advance_items(dt)

    def advance_items(self, dt):
        kept = []
        gained = 0
        for it in self.items:
            ny = it.next_y(dt)
            if it.hits(self.player, ny):
                if it.is_hazard:
                    # the whole frame is discarded, including pickups already counted
                    self.items = []
                    self.end_game()
                    return
                gained += 1
                continue
            if ny < CANVAS_H + DESPAWN_MARGIN:
                it.y = ny
                kept.append(it)
        self.items = kept
        self.score += gained

    def on_touch_repeat(self):
        if self.running:
            self.player.nudge(self.touch.delta())

    # -- leaderboard actions -----------------------------------------------

    def alert(self, message, title=""):
        self.dialog = Dialog(message, title=title)

    def confirm(self, message, on_confirm, title=""):
        self.dialog = Dialog(message, title=title, on_confirm=on_confirm)

    def close_dialog(self, accepted):
        dialog, self.dialog = self.dialog, None
        if dialog is not None and accepted and dialog.on_confirm is not None:
            dialog.on_confirm()

    def save_record(self, now=None):
        if not self.game_over:
            return None
        try:
            record = ScoreRecord.create(self.form.name, self.form.dept, self.score, now=now)
            self.leaderboard = self.store.save(record)
        except RecordValidationError as e:
            self.alert(str(e), title="Missing details")
            return None
        except DodgerError as e:
            logger.error("Could not save score: %s", e)
            self.alert(str(e), title="Save failed")
            return None
        self.remember_player(record)
        self.game_over = False
        return record

    def remember_player(self, record):
        self.settings.player_name = record.name
        self.settings.player_dept = record.dept
        try:
            save_settings(self.settings)
        except OSError as e:
            logger.warning("Could not store player defaults: %s", e)

    def request_clear(self):
        self.confirm("Delete every leaderboard record?", self.clear_leaderboard, title="Clear leaderboard")

    def clear_leaderboard(self):
        try:
            self.store.clear()
        except DodgerError as e:
            self.alert(str(e), title="Clear failed")
            return
        self.leaderboard = []

    def export_leaderboard(self, path=None):
        path = path or self.settings.export_path
        try:
            written = self.store.export_file(path)
        except DodgerError as e:
            self.alert(str(e), title="Export failed")
            return None
        self.alert(f"Saved {len(self.leaderboard)} records to {written}", title="Export")
        return written

    def import_leaderboard(self, path=None):
        path = path or self.settings.import_path
        try:
            self.leaderboard = self.store.import_file(path)
        except LeaderboardImportError as e:
            logger.warning("Import failed: %s", e)
            self.alert("The JSON format is not valid.", title="Import failed")
            return False
        except DodgerError as e:
            self.alert(str(e), title="Import failed")
            return False
        self.alert("Import complete!", title="Import")
        return True

    # -- events ------------------------------------------------------------

    def handle_event(self, event, now_ms=0):
        if event.type == pygame.QUIT:
            self.request_quit = True
        elif event.type == pygame.KEYDOWN:
            self.handle_key(key_name(event.key), now_ms)
        elif event.type == pygame.KEYUP:
            self.input.key_up(key_name(event.key))
        elif event.type == pygame.TEXTINPUT:
            if self.state == STATE_GAMEOVER and self.dialog is None:
                self.form.type(event.text)
        elif event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
            if self.dialog is None:
                self.touch.press(event.pos)
        elif event.type == pygame.MOUSEBUTTONUP and event.button == 1:
            self.touch.release()
        elif event.type == TOUCH_REPEAT_EVENT:
            self.on_touch_repeat()

    def handle_key(self, name, now_ms=0):
        """Key-down dispatch. Movement keys are always tracked; the rest depend on the screen."""
        if self.dialog is not None:
            if name in ("enter", " ", "y"):
                self.close_dialog(True)
            elif name in ("escape", "n"):
                self.close_dialog(False)
            return

        state = self.state
        if state == STATE_GAMEOVER:
            if name == "tab":
                self.form.switch()
            elif name == "backspace":
                self.form.backspace()
            elif name == "enter":
                self.save_record()
            elif name == "escape":
                self.reset()
            return

        self.input.key_down(name)
        if name == "escape":
            if self.show_help:
                self.show_help = False
            else:
                self.reset()
        elif state == STATE_IDLE:
            if name in START_KEYS:
                self.start(now_ms)
            elif name == "h":
                self.show_help = not self.show_help
            elif name == "e":
                self.export_leaderboard()
            elif name == "i":
                self.import_leaderboard()
            elif name == "c":
                self.request_clear()
        elif name == PAUSE_KEY:
            self.toggle_pause(now_ms)
        elif state == STATE_PAUSED and name in START_KEYS:
            self.resume(now_ms)
