"""Safety Dodger: collect safety blocks, dodge hazards, top the local leaderboard."""

__version__ = "0.1.0"
