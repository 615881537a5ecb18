"""
Drawing for every screen.

The renderer only reads the session; it never changes game state.  It paints
the playfield on its own 420x640 surface, then the leaderboard panel on the
right and the touch buttons underneath.
"""

from datetime import datetime

import pygame

from .config import CANVAS_H, CANVAS_W, PANEL_W, TOUCH_BAR_H
from .game import FIELD_DEPT, FIELD_NAME, STATE_GAMEOVER, STATE_IDLE, STATE_PAUSED

BG_TOP = (15, 23, 42)
BG_BOTTOM = (17, 24, 39)
TEXT = (229, 231, 235)
TEXT_BRIGHT = (248, 250, 252)
TEXT_DIM = (148, 163, 184)
PANEL_BG = (30, 41, 59)
ROW_LINE = (51, 65, 85)
BUTTON = (51, 65, 85)
BUTTON_HELD = (71, 85, 105)
ACCENT = (37, 99, 235)

IDLE_SHADE = 115      # 0.45 alpha
GAMEOVER_SHADE = 153  # 0.6 alpha
LEADERBOARD_ROWS = 18


def vertical_gradient(size, top, bottom):
    w, h = size
    surf = pygame.Surface((w, h))
    for y in range(h):
        t = y / max(1, h - 1)
        col = tuple(int(a + (b - a) * t) for a, b in zip(top, bottom))
        pygame.draw.line(surf, col, (0, y), (w, y))
    return surf


def hud_text(game):
    return f"Score: {game.score}", f"Speed: x{game.speed_scale:.2f}"


def format_date(date_iso):
    try:
        dt = datetime.fromisoformat(date_iso.replace("Z", "+00:00"))
    except (AttributeError, ValueError):
        return date_iso or ""
    return dt.astimezone().strftime("%Y-%m-%d %H:%M")


class Renderer:
    def __init__(self, screen):
        self.screen = screen
        self.canvas = pygame.Surface((CANVAS_W, CANVAS_H))
        self.background = vertical_gradient((CANVAS_W, CANVAS_H), BG_TOP, BG_BOTTOM)
        self.hud_font = pygame.font.Font(None, 26)
        self.item_font = pygame.font.Font(None, 17)
        self.title_font = pygame.font.Font(None, 40)
        self.font = pygame.font.Font(None, 24)
        self.small_font = pygame.font.Font(None, 20)

    def draw(self, game):
        self.draw_canvas(game)
        self.screen.blit(self.canvas, (0, 0))
        self.draw_touch_bar(game)
        if self.screen.get_width() >= CANVAS_W + PANEL_W:
            self.draw_panel(game)
        if game.dialog is not None:
            self.draw_dialog(game.dialog)

    # -- playfield ---------------------------------------------------------

    def draw_canvas(self, game):
        surf = self.canvas
        surf.blit(self.background, (0, 0))

        score_text, speed_text = hud_text(game)
        score_s = self.hud_font.render(score_text, True, TEXT)
        speed_s = self.hud_font.render(speed_text, True, TEXT)
        surf.blit(score_s, (12, 10))
        surf.blit(speed_s, (CANVAS_W - 150, 10))

        game.player.draw(surf)
        for it in game.items:
            it.draw(surf, self.item_font)

        state = game.state
        if state == STATE_IDLE:
            self.shade(surf, IDLE_SHADE)
            if game.show_help:
                self.draw_help(surf)
            else:
                self.center_lines(surf, 220, [
                    (self.title_font, "Safety Dodger"),
                    (self.font, "Collect Safety, Avoid Hazards"),
                    (self.font, "Press Space to Start"),
                    (self.small_font, "H: help"),
                ])
        elif state == STATE_PAUSED:
            self.shade(surf, IDLE_SHADE)
            self.center_lines(surf, 260, [
                (self.title_font, "Paused"),
                (self.font, "Press P or Space to resume"),
            ])
        elif state == STATE_GAMEOVER:
            self.shade(surf, GAMEOVER_SHADE)
            self.center_lines(surf, 220, [
                (self.title_font, "GAME OVER"),
                (self.font, f"Your Score: {game.score}"),
                (self.font, "Enter info & Save to Leaderboard"),
            ])
            self.draw_entry_form(surf, game.form)

    def shade(self, surf, alpha):
        overlay = pygame.Surface(surf.get_size(), pygame.SRCALPHA)
        overlay.fill((0, 0, 0, alpha))
        surf.blit(overlay, (0, 0))

    def center_lines(self, surf, top, lines, color=TEXT_BRIGHT, spacing=10):
        y = top
        for font, text in lines:
            txt = font.render(text, True, color)
            surf.blit(txt, (surf.get_width() // 2 - txt.get_width() // 2, y))
            y += txt.get_height() + spacing
        return y

    def draw_help(self, surf):
        self.center_lines(surf, 180, [
            (self.title_font, "How to play"),
            (self.font, "Move: Left/Right arrows or A/D"),
            (self.font, "Touch: hold the buttons below"),
            (self.font, "Blue blocks (safety): +1 point"),
            (self.font, "Red blocks (hazard): game over"),
            (self.font, "It gets faster over time"),
            (self.small_font, "P pause  -  Esc back to title"),
        ])

    def draw_entry_form(self, surf, form):
        box = pygame.Rect(20, CANVAS_H - 190, CANVAS_W - 40, 160)
        pygame.draw.rect(surf, PANEL_BG, box, border_radius=14)
        pygame.draw.rect(surf, ROW_LINE, box, width=1, border_radius=14)
        fields = ((FIELD_DEPT, "Department"), (FIELD_NAME, "Name"))
        for i, (key, placeholder) in enumerate(fields):
            rect = pygame.Rect(box.x + 14, box.y + 14 + i * 46, box.width - 28, 36)
            active = form.active == key
            pygame.draw.rect(surf, BG_TOP, rect, border_radius=10)
            pygame.draw.rect(surf, ACCENT if active else ROW_LINE, rect, width=2, border_radius=10)
            value = form.values[key]
            shown = value + ("_" if active else "") if value else placeholder
            txt = self.font.render(shown, True, TEXT if value else TEXT_DIM)
            surf.blit(txt, (rect.x + 10, rect.y + (rect.height - txt.get_height()) // 2))
        hint = self.small_font.render("Tab: switch field   Enter: save   Esc: skip", True, TEXT_DIM)
        surf.blit(hint, (box.centerx - hint.get_width() // 2, box.bottom - 34))

    # -- touch bar ---------------------------------------------------------

    def draw_touch_bar(self, game):
        bar = pygame.Rect(0, CANVAS_H, CANVAS_W, TOUCH_BAR_H)
        pygame.draw.rect(self.screen, BG_BOTTOM, bar)
        labels = {"left": "< Left", "right": "Right >"}
        for name, rect in game.touch.buttons.items():
            col = BUTTON_HELD if game.touch.direction == name else BUTTON
            pygame.draw.rect(self.screen, col, rect, border_radius=12)
            txt = self.font.render(labels[name], True, TEXT)
            self.screen.blit(txt, txt.get_rect(center=rect.center))

    # -- leaderboard panel -------------------------------------------------

    def draw_panel(self, game):
        panel = pygame.Rect(CANVAS_W, 0, self.screen.get_width() - CANVAS_W, self.screen.get_height())
        pygame.draw.rect(self.screen, PANEL_BG, panel)
        x = panel.x + 16
        title = self.title_font.render("Leaderboard", True, TEXT_BRIGHT)
        self.screen.blit(title, (x, 16))

        y = 64
        records = game.leaderboard
        if not records:
            for line in ("No records yet.", "Play a game and save your score."):
                txt = self.small_font.render(line, True, TEXT_DIM)
                self.screen.blit(txt, (x, y))
                y += txt.get_height() + 4
        else:
            cols = (0, 34, 120, 206, 252)
            for cx, head in zip(cols, ("#", "Dept", "Name", "Score", "Date")):
                self.screen.blit(self.small_font.render(head, True, TEXT_DIM), (x + cx, y))
            y += 22
            for rank, rec in enumerate(records[:LEADERBOARD_ROWS], start=1):
                pygame.draw.line(self.screen, ROW_LINE, (x, y - 3), (panel.right - 16, y - 3))
                cells = (str(rank), rec.dept[:9], rec.name[:9], str(rec.score), format_date(rec.date_iso)[5:])
                for cx, cell in zip(cols, cells):
                    self.screen.blit(self.small_font.render(cell, True, TEXT), (x + cx, y))
                y += 24
            if len(records) > LEADERBOARD_ROWS:
                more = self.small_font.render(f"... {len(records) - LEADERBOARD_ROWS} more", True, TEXT_DIM)
                self.screen.blit(more, (x, y))

        hints = ("E export   I import   C clear", "(on the title screen)")
        hy = panel.bottom - 52
        for line in hints:
            txt = self.small_font.render(line, True, TEXT_DIM)
            self.screen.blit(txt, (x, hy))
            hy += 20

    # -- modal dialog ------------------------------------------------------

    def draw_dialog(self, dialog):
        self.shade(self.screen, 140)
        w = min(380, self.screen.get_width() - 40)
        box = pygame.Rect(0, 0, w, 150)
        box.center = (self.screen.get_width() // 2, self.screen.get_height() // 2)
        pygame.draw.rect(self.screen, PANEL_BG, box, border_radius=14)
        pygame.draw.rect(self.screen, ROW_LINE, box, width=1, border_radius=14)
        if dialog.title:
            t = self.font.render(dialog.title, True, TEXT_BRIGHT)
            self.screen.blit(t, (box.x + 16, box.y + 14))
        msg = dialog.message
        # shrink with an ellipsis until it fits, e.g. long export paths
        while self.small_font.size(msg)[0] > box.width - 32 and len(msg) > 4:
            msg = msg[:-4] + "..."
        m = self.small_font.render(msg, True, TEXT)
        self.screen.blit(m, (box.x + 16, box.y + 56))
        hint = "Enter/Y: OK   Esc/N: cancel" if dialog.is_confirm else "Enter: OK"
        h = self.small_font.render(hint, True, TEXT_DIM)
        self.screen.blit(h, (box.right - h.get_width() - 16, box.bottom - 30))
