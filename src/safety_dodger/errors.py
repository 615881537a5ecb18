class DodgerError(Exception):
    """Base class for errors raised by safety_dodger."""


class StorageError(DodgerError):
    """The leaderboard file could not be written or removed."""


class LeaderboardImportError(StorageError):
    """Import text (or file) is not a valid list of score records."""


class RecordValidationError(DodgerError):
    """A score record is missing its name or department."""
