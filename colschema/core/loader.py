"""Loading collection definitions from YAML or JSON files.

Definition files hold a single collection document. YAML is a superset of
JSON, so both formats go through the same safe YAML parser.
"""

from pathlib import Path
from typing import Any

from pydantic import ValidationError as PydanticValidationError
import yaml

from ..exceptions import DefinitionLoadError
from .logging import get_logger
from .schema import CollectionDefinition

logger = get_logger(__name__)


def read_definition_data(path: str | Path) -> dict[str, Any]:
    """Read the raw definition mapping from a file.

    Args:
        path: Path to a ``.yaml``, ``.yml`` or ``.json`` file

    Returns:
        The parsed top-level mapping, not yet validated

    Raises:
        DefinitionLoadError: If the file is missing, unreadable or malformed
    """
    file_path = Path(path)

    if not file_path.exists():
        raise DefinitionLoadError(f"Definition file not found: {file_path}")

    try:
        content = file_path.read_text(encoding="utf-8")
    except OSError as e:
        raise DefinitionLoadError(f"Cannot read {file_path}: {e}", cause=e) from e

    try:
        data = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise DefinitionLoadError(
            f"Invalid YAML/JSON in {file_path}: {e}", cause=e
        ) from e

    if not isinstance(data, dict):
        raise DefinitionLoadError(
            f"Definition file {file_path} must contain a mapping at the top level"
        )

    logger.debug("Definition file read", path=str(file_path), keys=len(data))
    return data


def load_definition(path: str | Path) -> CollectionDefinition:
    """Read and parse a collection definition file.

    Only the model shape is checked here; run the collection validator on the
    result before diffing or compiling it.

    Raises:
        DefinitionLoadError: If the file cannot be read or does not match the
            definition model
    """
    data = read_definition_data(path)
    try:
        return CollectionDefinition.model_validate(data)
    except PydanticValidationError as e:
        raise DefinitionLoadError(
            f"Malformed collection definition in {path}: "
            f"{e.error_count()} problem(s)",
            cause=e,
        ) from e
