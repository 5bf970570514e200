"""
Exceptions raised by the PTB builder core.

Structural validation problems are never raised; they are reported by the
GraphValidator as error/warning lists. These exceptions cover the hard
failures: illegal references at build time, rejected edits, malformed
serialized data, and module interface lookups.
"""

from typing import Optional, Any, Dict


class PTBError(Exception):
    """Base exception for all PTB builder errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.details = details or {}


class ResultReferenceError(PTBError):
    """Raised when a Result argument cannot be resolved against the result table."""

    def __init__(self, message: str, command_index: int, result_from: int,
                 details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details)
        self.command_index = command_index
        self.result_from = result_from


class CommandUpdateError(PTBError):
    """Raised when a partial update would change a command's variant or identity."""

    def __init__(self, message: str, command_id: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details)
        self.command_id = command_id


class CommandFormatError(PTBError):
    """Raised when a serialized command or argument cannot be decoded."""
    pass


class TemplateError(PTBError):
    """Raised when a template record is malformed."""
    pass


class UnsupportedLanguageError(PTBError):
    """Raised when code emission is requested for an unknown language."""

    def __init__(self, language: str, supported: Optional[list] = None):
        super().__init__(f"Unsupported language: {language}", {'supported': supported or []})
        self.language = language


class ModuleInterfaceError(PTBError):
    """Raised when a package's module interface cannot be fetched."""

    def __init__(self, message: str, package_id: str, network: str,
                 details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details)
        self.package_id = package_id
        self.network = network
