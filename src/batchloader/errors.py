"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Exception hierarchy for batch loaders and request scopes.
"""

from __future__ import annotations


class DataLoaderError(RuntimeError):
    """Base batch loader error."""


class InvalidKeyError(DataLoaderError, TypeError):
    """Raised when a key is neither an integer nor a string."""


class BatchResultError(DataLoaderError):
    """Raised when a batch function returns something that is not iterable."""


class DuplicateKeyError(DataLoaderError, KeyError):
    """Raised when priming a key that is already cached without overwrite."""

    def __str__(self) -> str:
        # KeyError.__str__ reprs its argument; keep the plain message.
        return str(self.args[0]) if self.args else ""


class LoaderNotRegisteredError(DataLoaderError, LookupError):
    """Raised when a request scope has no loader registered under a name."""


class LoaderRegistrationError(DataLoaderError):
    """Raised when a loader name is registered twice in one scope."""
