import pygame

from .config import CANVAS_H, CANVAS_W, PLAYER_GAP, PLAYER_H, PLAYER_SPEED, PLAYER_W


class Player:
    """The paddle. Only moves horizontally; its row is fixed near the bottom."""

    def __init__(self, x=None, width=PLAYER_W, height=PLAYER_H, color=(34, 197, 94), speed=PLAYER_SPEED,
                 screen_width=CANVAS_W, screen_height=CANVAS_H):
        self.width = width
        self.height = height
        self.color = color
        self.speed = speed
        self.screen_width = screen_width
        self.x = float(x) if x is not None else (screen_width - width) / 2
        self.y = screen_height - height - PLAYER_GAP

    @property
    def rect(self):
        return pygame.Rect(int(self.x), int(self.y), self.width, self.height)

    @property
    def max_x(self):
        return self.screen_width - self.width

    def move(self, direction, dt):
        self.nudge(direction * self.speed * dt)

    def nudge(self, delta):
        self.x = max(0.0, min(self.max_x, self.x + delta))

    def draw(self, surface):
        pygame.draw.rect(surface, self.color, self.rect)
