from __future__ import annotations

import argparse
import logging
import random
import sys
from typing import Optional, Sequence

from .config import WINDOW_H, WINDOW_W, load_settings
from .errors import DodgerError
from .leaderboard import LeaderboardStore

logger = logging.getLogger(__name__)


def run_game(settings) -> int:
    import pygame

    from .game import Game
    from .renderer import Renderer

    pygame.init()
    screen = pygame.display.set_mode((WINDOW_W, WINDOW_H))
    pygame.display.set_caption("Safety Dodger")
    clock = pygame.time.Clock()

    rng = random.Random(settings.seed) if settings.seed is not None else None
    game = Game(LeaderboardStore(settings.leaderboard_path), settings=settings, rng=rng)
    renderer = Renderer(screen)
    logger.info("Leaderboard at %s (%d records)", settings.leaderboard_path, len(game.leaderboard))

    try:
        while not game.request_quit:
            now = pygame.time.get_ticks()
            for event in pygame.event.get():
                game.handle_event(event, now)
            game.tick(pygame.time.get_ticks())
            renderer.draw(game)
            pygame.display.flip()
            clock.tick(settings.fps)
    finally:
        game.shutdown()
        pygame.quit()
    return 0


def _print_table(records) -> None:
    if not records:
        print("No records yet.")
        return
    print(f"{'#':>3}  {'Dept':<16} {'Name':<16} {'Score':>6}  Date")
    for rank, r in enumerate(records, start=1):
        print(f"{rank:>3}  {r.dept:<16} {r.name:<16} {r.score:>6}  {r.date_iso}")


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="safety-dodger", description="Collect safety blocks, dodge hazards.")
    ap.add_argument("--state-dir", help="Directory for the leaderboard and settings (default: ~/.safety_dodger).")
    ap.add_argument("--log-level", default="WARNING", help="Logging level (DEBUG, INFO, WARNING, ...).")
    ap.add_argument("--seed", type=int, help="Seed item spawning for a repeatable run.")
    ap.add_argument("--fps", type=int, help="Frame cap for the game window.")

    sub = ap.add_subparsers(dest="command")
    sub.add_parser("play", help="Run the game (default).")
    sub.add_parser("leaderboard", help="Print the leaderboard.")
    p_export = sub.add_parser("export", help="Print the leaderboard as JSON or write it to a file.")
    p_export.add_argument("file", nargs="?")
    p_import = sub.add_parser("import", help="Merge records from a JSON file.")
    p_import.add_argument("file")
    p_clear = sub.add_parser("clear", help="Delete every record.")
    p_clear.add_argument("--yes", action="store_true", help="Do not ask for confirmation.")
    return ap


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, str(args.log_level).upper(), logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    settings = load_settings(args.state_dir, seed=args.seed, fps=args.fps)
    command = args.command or "play"

    if command == "play":
        return run_game(settings)

    store = LeaderboardStore(settings.leaderboard_path)
    store.load()
    try:
        if command == "leaderboard":
            _print_table(store.records)
        elif command == "export":
            if args.file:
                store.export_file(args.file)
                print(f"Wrote {len(store.records)} records to {args.file}")
            else:
                print(store.export())
        elif command == "import":
            before = len(store.records)
            records = store.import_file(args.file)
            print(f"Imported {len(records) - before} records ({len(records)} total)")
        elif command == "clear":
            if not args.yes:
                answer = input("Delete every leaderboard record? [y/N] ")
                if answer.strip().lower() not in ("y", "yes"):
                    print("Cancelled.")
                    return 1
            store.clear()
            print("Leaderboard cleared.")
    except DodgerError as e:
        print(f"error: {e}", file=sys.stderr)
        return 2
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
