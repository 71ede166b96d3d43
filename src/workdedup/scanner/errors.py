from __future__ import annotations


class DedupError(Exception):
    def __init__(self, message: str, code: str) -> None:
        super().__init__(message)
        self.code = code


class ConfigurationError(DedupError):
    pass


class TraversalError(DedupError):
    pass


class HashingError(DedupError):
    pass


class HashCollisionError(DedupError):
    pass


class PlacementError(DedupError):
    pass
