"""Exceptions raised by the collection schema engine.

Validation problems are never raised; they are returned as a
``ValidationResult``. The exceptions below cover the surrounding concerns:
reading definition files and refusing unsafe migrations.
"""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .migrations.warnings import MigrationWarning


class ColschemaError(Exception):
    """Base exception for all engine errors.

    Allows callers to catch every engine failure with a single except clause.
    """

    def __init__(self, message: str, cause: Exception | None = None):
        """Initialize engine error.

        Args:
            message: Human-readable error description
            cause: Optional underlying exception that caused this error
        """
        super().__init__(message)
        self.cause = cause


class DefinitionLoadError(ColschemaError):
    """Error reading or parsing a collection definition file.

    Raised when:
    - The file does not exist or cannot be read
    - The file is not valid YAML/JSON
    - The top-level document is not a mapping
    """

    pass


class MigrationRefusedError(ColschemaError):
    """A migration was refused because it carries destructive warnings.

    Raised only when the caller explicitly asks for a safe plan. The warnings
    that caused the refusal are attached for display.
    """

    def __init__(
        self,
        message: str,
        warnings: "list[MigrationWarning] | None" = None,
        cause: Exception | None = None,
    ):
        super().__init__(message, cause)
        self.warnings: "list[MigrationWarning]" = warnings or []
