"""
Generator error taxonomy.

Every error here aborts the whole generation run; a partially generated
module is never returned or written.
"""

from typing import Optional


class GenerationError(Exception):
    """Base class for all apigen generation failures."""


class SchemaConflictError(GenerationError):
    """Two declarations would emit the same TypeScript name, or a type has an unsupported shape."""

    def __init__(self, message: str, name: Optional[str] = None):
        super().__init__(message)
        self.name = name


class TemplateMismatchError(GenerationError):
    """Path placeholders and declared parameters do not line up."""

    def __init__(self, message: str, endpoint: Optional[str] = None, path: Optional[str] = None):
        super().__init__(message)
        self.endpoint = endpoint
        self.path = path


class WriteError(GenerationError):
    """The generated module could not be written to its destination."""

    def __init__(self, path: str, reason: str):
        super().__init__(f"Failed to write {path}: {reason}")
        self.path = path
        self.reason = reason
