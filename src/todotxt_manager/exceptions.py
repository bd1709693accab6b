"""Error types raised by the todo.txt engine."""

from pathlib import Path
from typing import Optional, Union


class TodoTxtError(Exception):
    """Base class for every error raised by todotxt_manager."""


class StaleReferenceError(TodoTxtError):
    """A task no longer matches the line it was parsed from."""
    
    def __init__(self, raw: str, line_number: Optional[int] = None):
        self.raw = raw
        self.line_number = line_number
        where = f" at line {line_number + 1}" if line_number is not None else ""
        super().__init__(f"Task no longer present in file{where}: {raw!r}")


class UnrecognizedPatternError(TodoTxtError):
    """A recurrence pattern could not be interpreted."""
    
    def __init__(self, pattern: str):
        self.pattern = pattern
        super().__init__(f"Unrecognized recurrence pattern: {pattern!r}")


class StorageError(TodoTxtError):
    """Reading or writing the backing todo file failed."""
    
    def __init__(self, message: str, path: Union[str, Path]):
        self.path = Path(path)
        super().__init__(f"{message}: {self.path}")


class ConfigError(TodoTxtError):
    """A configuration or state file could not be loaded."""


class AmbiguousLineError(TodoTxtError):
    """A task whose description would be read back as a line marker."""
    
    def __init__(self, line: str):
        self.line = line
        super().__init__(f"Line would not read back as the same task: {line!r}")
