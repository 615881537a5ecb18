import random

from .config import (BASE_SPEED, CANVAS_W, HAZARDS, ITEM_H, ITEM_W, MIN_SPAWN_MS, SAFETIES,
                     SAFETY_CHANCE, SPAWN_MS, SPEED_JITTER)
from .item import HAZARD, SAFETY, Item


def spawn_interval(speed_scale):
    """Milliseconds between spawns; shrinks as the game speeds up, never below the floor."""
    return max(MIN_SPAWN_MS, SPAWN_MS / speed_scale)


class Spawner:
    """Creates falling items on a wall-clock timer.

    ``rng`` only needs a ``random()`` method, so tests can pass a scripted source.
    Ids keep counting across runs so they are never reused within a session.
    """

    def __init__(self, rng=None, screen_width=CANVAS_W):
        self.rng = rng if rng is not None else random.Random()
        self.screen_width = screen_width
        self.next_id = 1
        self.last_spawn_ms = 0

    def reset_timer(self, now_ms):
        self.last_spawn_ms = now_ms

    def shift_timer(self, delta_ms):
        self.last_spawn_ms += delta_ms

    def due(self, now_ms, speed_scale):
        return now_ms - self.last_spawn_ms > spawn_interval(speed_scale)

    def maybe_spawn(self, now_ms, speed_scale):
        if not self.due(now_ms, speed_scale):
            return None
        self.last_spawn_ms = now_ms
        return self.make_item(speed_scale)

    def _pick(self, labels):
        return labels[min(len(labels) - 1, int(self.rng.random() * len(labels)))]

    def make_item(self, speed_scale):
        is_safety = self.rng.random() < SAFETY_CHANCE
        item = Item(
            id=self.next_id,
            x=self.rng.random() * (self.screen_width - ITEM_W),
            y=-ITEM_H,
            vy=(BASE_SPEED + self.rng.random() * SPEED_JITTER) * speed_scale,
            kind=SAFETY if is_safety else HAZARD,
            label=self._pick(SAFETIES if is_safety else HAZARDS),
        )
        self.next_id += 1
        return item
