import pygame

from .config import FALL_MULTIPLIER, ITEM_H, ITEM_RADIUS, ITEM_W, LABEL_MAX_CHARS

HAZARD = "hazard"
SAFETY = "safety"

COLORS = {
    HAZARD: (239, 68, 68),
    SAFETY: (59, 130, 246),
}
LABEL_COLOR = (249, 250, 251)


def short_label(label, limit=LABEL_MAX_CHARS):
    if len(label) > limit:
        return label[:limit] + "…"
    return label


class Item:
    """A falling block. Hazards end the run on contact, safety blocks score a point."""

    width = ITEM_W
    height = ITEM_H

    def __init__(self, id, x, y, vy, kind, label):
        self.id = id
        self.x = float(x)
        self.y = float(y)
        self.vy = float(vy)
        self.kind = kind
        self.label = label

    def __repr__(self):
        return f"Item(id={self.id}, kind={self.kind!r}, x={self.x:.1f}, y={self.y:.1f})"

    @property
    def is_hazard(self):
        return self.kind == HAZARD

    @property
    def rect(self):
        return pygame.Rect(int(self.x), int(self.y), self.width, self.height)

    def next_y(self, dt):
        return self.y + self.vy * dt * FALL_MULTIPLIER

    def hits(self, player, y=None):
        """Bottom edge inside the paddle band and horizontal extents overlapping."""
        y = self.y if y is None else y
        return (y + self.height >= player.y
                and self.x < player.x + player.width
                and self.x + self.width > player.x)

    def draw(self, surface, font=None):
        pygame.draw.rect(surface, COLORS.get(self.kind, (200, 200, 200)), self.rect, border_radius=ITEM_RADIUS)
        if font is not None:
            txt = font.render(short_label(self.label), True, LABEL_COLOR)
            surface.blit(txt, (int(self.x) + 6, int(self.y) + (self.height - txt.get_height()) // 2))
