"""
Vector configurations.

A vector describes the entity metrics are calculated for. Its attribute
declarations are flattened into the BigQuery fields of the dimensions record:

    attributes:
      user_id: string:required
      email: string
      address:
        city: string
        zip: string
"""
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from manifold.exceptions import ConfigurationError, VectorNotFoundError
from manifold.metrics.schema import FieldMode, FieldType, SchemaField

logger = logging.getLogger(__name__)


def parse_type_and_mode(type_str: str) -> tuple[str, str]:
    """Split "type[:mode]" into upper-cased parts, mode defaulting to NULLABLE."""
    type_name, _, mode = str(type_str).partition(":")
    return type_name.strip().upper(), (mode.strip().upper() or FieldMode.NULLABLE.value)


def attributes_to_fields(attributes: Dict[str, Any]) -> List[SchemaField]:
    """Flatten attribute declarations; nested mappings become RECORD fields."""
    fields = []
    for name, declaration in attributes.items():
        if isinstance(declaration, dict):
            fields.append(
                SchemaField(
                    name=name,
                    type=FieldType.RECORD.value,
                    mode=FieldMode.NULLABLE.value,
                    fields=attributes_to_fields(declaration),
                )
            )
            continue
        type_name, mode = parse_type_and_mode(declaration)
        fields.append(SchemaField(name=name, type=type_name, mode=mode))
    return fields


class VectorService:
    """Loads vector configurations from a project's vectors directory."""

    def __init__(self, vectors_directory: Path):
        self.vectors_directory = Path(vectors_directory)

    def config_path(self, vector_name: str) -> Path:
        return self.vectors_directory / f"{vector_name.lower()}.yml"

    def load_vector_config(self, vector_name: str) -> Dict[str, Any]:
        """
        Read a vector configuration file.

        Raises:
            VectorNotFoundError: If the file does not exist.
            ConfigurationError: If the file is not valid YAML.
        """
        path = self.config_path(vector_name)
        if not path.is_file():
            raise VectorNotFoundError(f"Vector configuration not found: {path}")
        try:
            config = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
        except yaml.YAMLError as exc:
            raise ConfigurationError(
                f"Invalid YAML in vector configuration {path}: {exc}"
            ) from exc
        if not isinstance(config, dict):
            raise ConfigurationError(f"Vector configuration {path} must be a mapping")
        return {**config, "name": vector_name.lower()}

    def load_vector_schema(self, vector_name: str) -> SchemaField:
        """The RECORD field a vector contributes to the dimensions record."""
        config = self.load_vector_config(vector_name)
        attributes: Optional[Dict[str, Any]] = config.get("attributes") or {}
        if not isinstance(attributes, dict):
            raise ConfigurationError(
                f"Vector '{vector_name}': 'attributes' must map names to types"
            )
        return SchemaField(
            name=config["name"],
            type=FieldType.RECORD.value,
            mode=None,
            fields=attributes_to_fields(attributes),
        )

    def load_dimension_fields(self, vector_names: List[str]) -> List[SchemaField]:
        fields = []
        for vector in vector_names:
            logger.info(f"Loading vector schema for '{vector}'.")
            fields.append(self.load_vector_schema(vector))
        return fields
