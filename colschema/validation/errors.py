"""Error and result data structures for the collection validator.

Validation never raises: every problem found in a definition is collected
into a ``ValidationResult`` so a caller can show all of them at once.
"""

from dataclasses import dataclass, field
from typing import Any


@dataclass
class ValidationError:
    """A single problem found in a collection definition.

    ``field`` is the path of the offending value inside the definition, e.g.
    ``name`` or ``fields[2].enumValues``.
    """

    field: str
    message: str
    type: str = "invalid_definition"

    def __str__(self) -> str:
        """Return a formatted string representation of the error."""
        return f"{self.field}: {self.message}"

    def to_dict(self) -> dict[str, str]:
        """Serialize to a plain dictionary."""
        return {"field": self.field, "message": self.message, "type": self.type}


@dataclass
class ValidationResult:
    """Complete validation result.

    Contains the overall validation status, every error found, and the parsed
    definition when the result came from a raw payload.
    """

    valid: bool
    errors: list[ValidationError] = field(default_factory=list)
    model: Any | None = None

    @property
    def error_count(self) -> int:
        """Number of validation errors."""
        return len(self.errors)

    def add_error(self, error: ValidationError) -> None:
        """Add a validation error to the result."""
        self.errors.append(error)
        self.valid = False

    def extend_errors(self, errors: list[ValidationError]) -> None:
        """Add multiple validation errors to the result."""
        self.errors.extend(errors)
        if errors:
            self.valid = False

    def messages(self) -> list[str]:
        """Error messages in the order they were found."""
        return [error.message for error in self.errors]

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a plain dictionary."""
        return {
            "valid": self.valid,
            "errors": [error.to_dict() for error in self.errors],
        }

    def __str__(self) -> str:
        """Return a formatted string representation of the validation result."""
        if self.valid:
            return "✅ Valid"

        lines = [f"❌ Invalid ({self.error_count} errors)"]
        for error in self.errors:
            lines.append(f"  - {error}")
        return "\n".join(lines)
