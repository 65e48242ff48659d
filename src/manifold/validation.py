"""
Identifier validation.

Group, condition and aggregation names end up as BigQuery column and table
names, so they are checked when a configuration is loaded rather than when
the generated SQL is deployed.
"""

import re

from .exceptions import InvalidIdentifierError


SQL_IDENTIFIER_PATTERN = re.compile(r"^[a-zA-Z_][a-zA-Z0-9_]*$")
SQL_IDENTIFIER_MAX_LENGTH = 300
DATASET_ID_MAX_LENGTH = 1024


def validate_sql_identifier(
    identifier: str,
    identifier_type: str = "identifier",
    max_length: int = SQL_IDENTIFIER_MAX_LENGTH,
) -> str:
    """
    Validate a BigQuery identifier: a letter or underscore followed by
    letters, digits or underscores, at most ``max_length`` characters.

    Returns the identifier unchanged, or raises ``InvalidIdentifierError``
    naming ``identifier_type``.
    """
    if not identifier:
        raise InvalidIdentifierError(f"Invalid {identifier_type}: cannot be empty")

    if not isinstance(identifier, str):
        raise InvalidIdentifierError(
            f"Invalid {identifier_type}: must be a string, got {type(identifier).__name__}"
        )

    if len(identifier) > max_length:
        raise InvalidIdentifierError(
            f"Invalid {identifier_type}: '{identifier[:50]}...' exceeds maximum length of {max_length} characters"
        )

    if not SQL_IDENTIFIER_PATTERN.match(identifier):
        raise InvalidIdentifierError(
            f"Invalid {identifier_type}: '{identifier}' contains invalid characters. "
            f"Must start with a letter or underscore and contain only alphanumeric characters and underscores."
        )

    return identifier


def validate_field_name(field_name: str) -> str:
    """Validate a generated or configured schema field name."""
    return validate_sql_identifier(field_name, identifier_type="field name")


def validate_dataset_name(dataset_name: str) -> str:
    """Validate a workspace name, which doubles as the BigQuery dataset id."""
    return validate_sql_identifier(
        dataset_name, identifier_type="dataset name", max_length=DATASET_ID_MAX_LENGTH
    )
