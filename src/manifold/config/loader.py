"""Loader for workspace manifold.yml files.

Reads the YAML, validates its raw structure via Pydantic models and
translates it into the canonical ``WorkspaceManifest``. Metrics groups have
been written in several shapes over time; each is detected here and
normalized to one representation of conditions and breakouts:

- canonical: ``conditions`` plus ``breakouts`` listing condition names
- legacy breakouts: ``breakouts`` lists without ``conditions``; every listed
  name is a condition whose SQL is the name itself
- operator breakouts: a breakout holding ``{operator, fields}``; every
  breakout entry is then a condition and there are no breakout groups
- ``contexts``: conditions under an older key
- bare: conditions declared directly as keys of the group
"""

import logging
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import ValidationError

from manifold.config.manifest import WorkspaceManifest
from manifold.config.models import (
    AggregationsSection,
    ManifoldSection,
    MetricsGroupSection,
    TimestampSection,
)
from manifold.context import Settings, settings as default_settings
from manifold.exceptions import ConfigurationError, InvalidOperatorError
from manifold.metrics.models import (
    Aggregations,
    Breakout,
    CompositeCondition,
    Condition,
    FunctionCondition,
    MetricsGroup,
    Operator,
    RawCondition,
    SumIf,
    TimestampConfig,
)
from manifold.validation import validate_dataset_name, validate_field_name

logger = logging.getLogger(__name__)

GROUP_KEYS = {"source", "filter", "timestamp", "aggregations", "metrics"}


class Dialect(str, Enum):
    CANONICAL = "canonical"
    LEGACY_BREAKOUTS = "legacy_breakouts"
    OPERATOR_BREAKOUTS = "operator_breakouts"
    BARE = "bare"


def _is_composite(value: Any) -> bool:
    return isinstance(value, dict) and "operator" in value


def detect_dialect(section: MetricsGroupSection) -> Dialect:
    """Work out which configuration shape a metrics group is written in."""
    if section.breakouts and any(_is_composite(v) for v in section.breakouts.values()):
        return Dialect.OPERATOR_BREAKOUTS
    if section.conditions is not None or section.contexts is not None:
        return Dialect.CANONICAL
    if section.breakouts is not None:
        return Dialect.LEGACY_BREAKOUTS
    return Dialect.BARE


def parse_condition(name: str, value: Any) -> Condition:
    """
    Parse one condition declaration.

    Accepts a SQL predicate string, ``{operator, fields}`` or ``{body, args}``.

    Raises:
        InvalidOperatorError: If the operator is not supported.
        ConfigurationError: If the declaration has any other shape.
    """
    validate_field_name(name)
    if isinstance(value, str):
        return RawCondition(name=name, expression=value.strip())

    if _is_composite(value):
        operator = str(value["operator"]).strip().upper()
        if operator not in Operator.names():
            raise InvalidOperatorError(
                f"Invalid operator: {value['operator']} in condition '{name}'. "
                f"Valid operators are: {', '.join(Operator.names())}"
            )
        operands = value.get("fields", value.get("operands"))
        if isinstance(operands, str):
            operands = [operands]
        if not isinstance(operands, list):
            raise ConfigurationError(
                f"Condition '{name}' must list its operands under 'fields'"
            )
        return CompositeCondition(
            name=name, operator=Operator(operator), operands=tuple(str(o) for o in operands)
        )

    if isinstance(value, dict) and "body" in value:
        args = value.get("args") or {}
        if not isinstance(args, dict):
            raise ConfigurationError(
                f"Condition '{name}': 'args' must map argument names to types"
            )
        return FunctionCondition(
            name=name,
            body=str(value["body"]).strip(),
            args={str(k): str(v).upper() for k, v in args.items()},
        )

    raise ConfigurationError(
        f"Condition '{name}' must be a SQL string, an {{operator, fields}} mapping "
        f"or a {{body, args}} mapping, got: {value!r}"
    )


def _add_condition(conditions: Dict[str, Condition], condition: Condition, group: str) -> None:
    if condition.name in conditions:
        raise ConfigurationError(
            f"Metrics group '{group}' declares condition '{condition.name}' more than once"
        )
    conditions[condition.name] = condition


def _parse_conditions(
    group: str, section: MetricsGroupSection, dialect: Dialect
) -> Dict[str, Condition]:
    conditions: Dict[str, Condition] = {}
    declared = {**(section.conditions or {}), **(section.contexts or {})}

    if dialect == Dialect.BARE:
        declared = {
            k: v for k, v in (section.model_extra or {}).items() if k not in GROUP_KEYS
        }

    for name, value in declared.items():
        _add_condition(conditions, parse_condition(name, value), group)

    if dialect == Dialect.OPERATOR_BREAKOUTS:
        for name, value in (section.breakouts or {}).items():
            if isinstance(value, list):
                raise ConfigurationError(
                    f"Metrics group '{group}': breakout '{name}' lists conditions, which "
                    "cannot be mixed with operator breakouts"
                )
            _add_condition(conditions, parse_condition(name, value), group)

    return conditions


def _parse_breakouts(
    group: str,
    section: MetricsGroupSection,
    dialect: Dialect,
    conditions: Dict[str, Condition],
) -> Dict[str, Breakout]:
    """
    Breakout groups of a canonical or legacy group. String breakouts become a
    same-named condition; legacy groups also turn unknown names into
    self-naming conditions. Mutates ``conditions`` accordingly.
    """
    if dialect not in (Dialect.CANONICAL, Dialect.LEGACY_BREAKOUTS):
        return {}

    breakouts: Dict[str, Breakout] = {}
    for name, value in (section.breakouts or {}).items():
        if isinstance(value, str):
            condition = RawCondition(name=validate_field_name(name), expression=value.strip())
            _add_condition(conditions, condition, group)
            breakouts[name] = Breakout(name=name, conditions=(name,))
            continue
        if isinstance(value, dict):
            raise ConfigurationError(
                f"Metrics group '{group}': breakout '{name}' must be a list of condition names"
            )

        names = [str(n) for n in (value or [])]
        for cond in names:
            if cond in conditions:
                continue
            if dialect == Dialect.CANONICAL:
                raise ConfigurationError(
                    f"Metrics group '{group}': breakout '{name}' references undefined "
                    f"condition '{cond}'"
                )
            conditions[cond] = RawCondition(name=validate_field_name(cond), expression=cond)
        breakouts[name] = Breakout(name=name, conditions=tuple(names))
    return breakouts


def _parse_aggregations(section: Optional[AggregationsSection]) -> Aggregations:
    if section is None:
        return Aggregations()
    sumif = []
    for metric, value in section.sumif.items():
        field = value if isinstance(value, str) else value.field
        sumif.append(SumIf(metric=validate_field_name(metric), field=field.strip()))
    countif = validate_field_name(section.countif) if section.countif else None
    return Aggregations(countif=countif, sumif=tuple(sumif))


def resolve_timestamp(
    section: Optional[TimestampSection],
    inherited: Optional[TimestampConfig],
    settings: Settings,
) -> Optional[TimestampConfig]:
    """Layer a timestamp section over an inherited one and the default interval."""
    if section is None:
        return inherited
    field = section.field or (inherited.field if inherited else None)
    interval = (
        section.interval
        or (inherited.interval if inherited else None)
        or settings.timestamp_interval
    )
    return TimestampConfig(field=field, interval=interval)


def parse_metrics_group(
    name: str,
    section: MetricsGroupSection,
    timestamp: Optional[TimestampConfig] = None,
    settings: Settings = default_settings,
) -> MetricsGroup:
    """Translate one raw metrics group into the canonical model."""
    validate_field_name(name)
    dialect = detect_dialect(section)
    logger.debug(f"Metrics group '{name}' uses the {dialect.value} configuration dialect")

    conditions = _parse_conditions(name, section, dialect)
    breakouts = _parse_breakouts(name, section, dialect, conditions)
    aggregations = section.aggregations if section.aggregations is not None else section.metrics

    return MetricsGroup(
        name=name,
        source=section.source,
        filter=section.filter.strip() if section.filter else None,
        timestamp=resolve_timestamp(section.timestamp, timestamp, settings),
        conditions=conditions,
        breakouts=breakouts,
        aggregations=_parse_aggregations(aggregations),
    )


def parse_manifest(
    raw: Dict[str, Any],
    name: str,
    settings: Settings = default_settings,
) -> WorkspaceManifest:
    """
    Build a ``WorkspaceManifest`` from a parsed manifold.yml mapping.

    Raises:
        ConfigurationError: If the configuration is structurally invalid.
    """
    validate_dataset_name(name)
    try:
        section = ManifoldSection(**(raw or {}))
    except ValidationError as exc:
        raise ConfigurationError(
            f"Invalid manifold configuration for workspace '{name}': {exc}"
        ) from exc

    timestamp = resolve_timestamp(section.timestamp, None, settings)
    metrics = {
        group: parse_metrics_group(group, group_section, timestamp, settings)
        for group, group_section in section.metrics.items()
    }
    merge = section.dimensions.merge if section.dimensions else None

    return WorkspaceManifest(
        name=name,
        vectors=tuple(section.vectors),
        dimensions_source=merge.source if merge else None,
        timestamp=timestamp,
        partitioning_interval=section.partitioning.interval if section.partitioning else None,
        lookback_days=(
            section.lookback_days if section.lookback_days is not None else settings.lookback_days
        ),
        metrics=metrics,
    )


def load_manifest(
    path: Path,
    name: Optional[str] = None,
    settings: Settings = default_settings,
) -> WorkspaceManifest:
    """
    Read and normalize a manifold.yml file.

    Args:
        path: Path to the manifold.yml file.
        name: Workspace name; defaults to the name of the file's directory.

    Raises:
        ConfigurationError: If the file is not valid YAML or not a valid configuration.
    """
    path = Path(path)
    name = name or path.parent.name
    try:
        raw = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"Invalid YAML in manifold configuration {path}: {exc}") from exc

    if raw is not None and not isinstance(raw, dict):
        raise ConfigurationError(f"Manifold configuration {path} must be a mapping")
    return parse_manifest(raw or {}, name, settings)
