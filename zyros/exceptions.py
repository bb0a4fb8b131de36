"""Error types raised by Zyros.

Every error carries a human-readable ``message`` so the CLI can print it
without a traceback. Errors tied to a file also carry its ``path``.

Classes:
    ZyrosError: Base class for all Zyros errors.
    NotFoundError: Missing content file, page or slug.
    ParseError: The content file is not well-formed JSON.
    SchemaError: Required fields are missing or have the wrong shape.
    DuplicateSlugError: A page with the same slug already exists.
    ValidationError: Aggregated validation errors blocking a build.
    WriteError: The content file could not be written.
"""

from __future__ import annotations

from pathlib import Path


class ZyrosError(Exception):
    """Base class for Zyros errors.

    Attributes:
        message: Human-readable error message.
        path: File the error relates to, if any.
    """

    def __init__(self, message: str, path: Path | None = None):
        self.message = message
        self.path = path
        super().__init__(f"{path}: {message}" if path else message)


class NotFoundError(ZyrosError):
    """Raised when the content file, a page or a slug does not exist."""


class ParseError(ZyrosError):
    """Raised when the content file is not well-formed."""


class SchemaError(ZyrosError):
    """Raised when required fields are missing from the document or input."""


class DuplicateSlugError(ZyrosError):
    """Raised when a page slug is already taken.

    Attributes:
        slug: The conflicting slug.
    """

    def __init__(self, slug: str):
        self.slug = slug
        super().__init__(f'A page with slug "{slug}" already exists')


class ValidationError(ZyrosError):
    """Raised when validation errors block an operation.

    Attributes:
        errors: All validation errors, in report order.
        warnings: Validation warnings collected alongside the errors.
    """

    def __init__(self, errors: list[str], warnings: list[str] | None = None):
        self.errors = list(errors)
        self.warnings = list(warnings or [])
        count = len(self.errors)
        super().__init__(f"{count} validation error{'s' if count != 1 else ''}")


class WriteError(ZyrosError):
    """Raised when persisting the content file fails."""
