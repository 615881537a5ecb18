import pygame

from .config import CANVAS_H, CANVAS_W, TOUCH_BAR_H, TOUCH_INTERVAL_MS, TOUCH_STEP

LEFT_KEYS = ("arrowleft", "a")
RIGHT_KEYS = ("arrowright", "d")
START_KEYS = (" ", "enter")
PAUSE_KEY = "p"

# pygame key codes -> browser-style lowercase key names
_SPECIAL_NAMES = {
    pygame.K_LEFT: "arrowleft",
    pygame.K_RIGHT: "arrowright",
    pygame.K_UP: "arrowup",
    pygame.K_DOWN: "arrowdown",
    pygame.K_SPACE: " ",
    pygame.K_RETURN: "enter",
    pygame.K_KP_ENTER: "enter",
    pygame.K_ESCAPE: "escape",
    pygame.K_TAB: "tab",
    pygame.K_BACKSPACE: "backspace",
}

TOUCH_REPEAT_EVENT = pygame.USEREVENT + 1


def key_name(key):
    if key in _SPECIAL_NAMES:
        return _SPECIAL_NAMES[key]
    return pygame.key.name(key).lower()


class InputHandler:
    """Tracks which keys are currently held."""

    def __init__(self):
        self.keys = {}

    def key_down(self, name):
        self.keys[name.lower()] = True

    def key_up(self, name):
        self.keys[name.lower()] = False

    def held(self, name):
        return self.keys.get(name, False)

    def release_all(self):
        self.keys.clear()

    @property
    def left(self):
        return any(self.held(k) for k in LEFT_KEYS)

    @property
    def right(self):
        return any(self.held(k) for k in RIGHT_KEYS)

    def direction(self):
        return int(self.right) - int(self.left)


class TouchControl:
    """Two on-screen buttons under the playfield.

    Holding a button arms a repeating timer event; every tick of that timer
    nudges the paddle, so movement continues without per-frame input.
    """

    def __init__(self, interval_ms=TOUCH_INTERVAL_MS, step=TOUCH_STEP, set_timer=None, top=CANVAS_H,
                 width=CANVAS_W, height=TOUCH_BAR_H):
        self.interval_ms = interval_ms
        self.step = step
        self._set_timer = set_timer or pygame.time.set_timer
        self.direction = None
        pad = 8
        half = width // 2
        self.buttons = {
            "left": pygame.Rect(pad, top + pad, half - pad - pad // 2, height - 2 * pad),
            "right": pygame.Rect(half + pad // 2, top + pad, half - pad - pad // 2, height - 2 * pad),
        }

    @property
    def armed(self):
        return self.direction is not None

    def button_at(self, pos):
        for name, rect in self.buttons.items():
            if rect.collidepoint(pos):
                return name
        return None

    def press(self, pos):
        name = self.button_at(pos)
        if name is None:
            return False
        if not self.armed:
            self._set_timer(TOUCH_REPEAT_EVENT, self.interval_ms)
        self.direction = name
        return True

    def release(self):
        if self.armed:
            self._set_timer(TOUCH_REPEAT_EVENT, 0)
        self.direction = None

    def delta(self):
        if self.direction == "left":
            return -self.step
        if self.direction == "right":
            return self.step
        return 0
