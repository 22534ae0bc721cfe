from __future__ import annotations

from typing import Optional


class DataExplorationError(Exception):
    """Base exception for nl_explorer."""


class ConfigurationError(DataExplorationError):
    pass


class CatalogError(DataExplorationError):
    pass


class NotFoundError(DataExplorationError):
    def __init__(self, database: str):
        super().__init__(f"Database not found in catalog: {database!r}")
        self.database = database


class TranslationError(DataExplorationError):
    def __init__(self, message: str, database: Optional[str] = None):
        super().__init__(message)
        self.database = database


class ParseError(TranslationError):
    """Model output did not contain a well-formed tagged translation."""


class ExecutionError(DataExplorationError):
    def __init__(self, message: str, database: Optional[str] = None, translation=None):
        super().__init__(message)
        self.database = database
        self.translation = translation
