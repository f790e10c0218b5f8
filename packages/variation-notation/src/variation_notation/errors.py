from __future__ import annotations


class NotationError(ValueError):
    """Imported notation could not be turned into a move tree."""


class PositionLoadError(NotationError):
    pass


class MovetextParseError(NotationError):
    pass
