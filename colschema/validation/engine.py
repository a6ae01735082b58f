"""Validation engine that gates definitions before diffing or compiling.

The ``CollectionValidator`` runs every rule group in order and accumulates
their errors instead of failing fast. Downstream components (differ and DDL
compiler) assume their inputs have passed this gate and do not re-validate.
"""

from collections.abc import Mapping
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from ..core.logging import get_logger
from ..core.schema import CollectionDefinition
from .errors import ValidationError, ValidationResult
from .rules import FieldRules, IndexRules, NamingRules

logger = get_logger(__name__)


class CollectionValidator:
    """Validates collection definitions against naming and shape rules."""

    def __init__(self) -> None:
        self.rule_groups = (NamingRules, FieldRules, IndexRules)

    def validate(self, definition: CollectionDefinition) -> ValidationResult:
        """Validate a parsed collection definition.

        Args:
            definition: The definition to check

        Returns:
            ValidationResult listing every problem found, in rule order
        """
        result = ValidationResult(valid=True, model=definition)

        for rules in self.rule_groups:
            result.extend_errors(rules.validate(definition))

        if not result.valid:
            result.model = None

        logger.debug(
            "Collection validated",
            collection=definition.name,
            valid=result.valid,
            error_count=result.error_count,
        )
        return result

    def validate_data(self, data: Mapping[str, Any]) -> ValidationResult:
        """Parse and validate a raw definition payload.

        Shape problems reported by the model (missing keys, unknown field
        kinds, wrong value types) are converted to field-scoped errors rather
        than raised.

        Args:
            data: The JSON/YAML payload of a collection definition

        Returns:
            ValidationResult with the parsed definition in ``model`` when valid
        """
        try:
            definition = CollectionDefinition.model_validate(dict(data))
        except PydanticValidationError as e:
            errors = self._convert_pydantic_errors(e)
            logger.debug("Collection payload rejected", error_count=len(errors))
            return ValidationResult(valid=False, errors=errors)

        return self.validate(definition)

    def _convert_pydantic_errors(
        self, pydantic_error: PydanticValidationError
    ) -> list[ValidationError]:
        """Convert Pydantic validation errors to our format."""
        errors = []

        for error in pydantic_error.errors():
            errors.append(
                ValidationError(
                    field=self._format_location(error["loc"]),
                    message=error["msg"],
                    type=self._map_error_type(error["type"]),
                )
            )

        return errors

    def _map_error_type(self, pydantic_type: str) -> str:
        """Map Pydantic error types to our validation types."""
        mapping = {
            "missing": "missing_required_field",
            "enum": "unknown_field_kind",
            "literal_error": "invalid_field_value",
            "string_type": "invalid_field_type",
            "int_type": "invalid_field_type",
            "int_parsing": "invalid_field_type",
            "bool_type": "invalid_field_type",
            "bool_parsing": "invalid_field_type",
            "tuple_type": "invalid_field_type",
            "model_type": "invalid_field_type",
        }
        return mapping.get(pydantic_type, "invalid_field_value")

    def _format_location(self, location: tuple[Any, ...]) -> str:
        """Render a Pydantic error location as a definition path.

        ``('fields', 2, 'kind')`` becomes ``fields[2].kind``.
        """
        path = ""
        for part in location:
            if isinstance(part, int):
                path += f"[{part}]"
            elif path:
                path += f".{part}"
            else:
                path = str(part)
        return path or "definition"


def validate_collection(definition: CollectionDefinition) -> ValidationResult:
    """Validate a collection definition with the default validator."""
    return CollectionValidator().validate(definition)
