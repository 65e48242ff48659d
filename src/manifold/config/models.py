"""Pydantic models for the raw shape of workspace configuration files.

These only check structure (types of sections and keys). Dialect detection
and translation into the canonical ``manifold.metrics.models`` dataclasses is
done by ``manifold.config.loader``.
"""

from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, field_validator


class TimestampSection(BaseModel):
    """Timestamp column and the interval it is truncated to.

    Example YAML::

        timestamp:
          field: event_time
          interval: HOUR
    """

    field: Optional[str] = None
    interval: Optional[str] = None

    @field_validator("interval")
    @classmethod
    def normalize_interval(cls, v: Optional[str]) -> Optional[str]:
        return v.strip().upper() if v else v


class MergeSection(BaseModel):
    source: Optional[str] = None


class DimensionsSection(BaseModel):
    """Where the dimensions merge routine reads its SELECT from.

    Example YAML::

        dimensions:
          merge:
            source: lib/select_dimensions.sql
    """

    merge: Optional[MergeSection] = None


class PartitioningSection(BaseModel):
    interval: str

    @field_validator("interval")
    @classmethod
    def normalize_interval(cls, v: str) -> str:
        return v.strip().upper()


class SumIfSection(BaseModel):
    field: str


class AggregationsSection(BaseModel):
    """Aggregates computed for every condition and combination.

    Example YAML::

        aggregations:
          countif: renderCount
          sumif:
            sequenceSum:
              field: context.sequence
    """

    countif: Optional[str] = None
    sumif: Dict[str, Union[str, SumIfSection]] = {}

    @field_validator("sumif", mode="before")
    @classmethod
    def empty_sumif(cls, v: Any) -> Any:
        return {} if v is None else v


ConditionValue = Union[str, Dict[str, Any]]


class MetricsGroupSection(BaseModel):
    """One entry under ``metrics``.

    Unknown keys are kept: groups written before conditions and breakouts
    existed declare their conditions as bare keys.
    """

    model_config = ConfigDict(extra="allow")

    source: Optional[str] = None
    filter: Optional[str] = None
    timestamp: Optional[TimestampSection] = None
    conditions: Optional[Dict[str, ConditionValue]] = None
    breakouts: Optional[Dict[str, Union[List[str], str, Dict[str, Any], None]]] = None
    contexts: Optional[Dict[str, ConditionValue]] = None
    aggregations: Optional[AggregationsSection] = None
    metrics: Optional[AggregationsSection] = None


class ManifoldSection(BaseModel):
    """Top-level model for workspaces/<name>/manifold.yml."""

    vectors: List[str] = []
    dimensions: Optional[DimensionsSection] = None
    timestamp: Optional[TimestampSection] = None
    partitioning: Optional[PartitioningSection] = None
    lookback_days: Optional[int] = None
    metrics: Dict[str, MetricsGroupSection] = {}

    @field_validator("vectors", "metrics", mode="before")
    @classmethod
    def empty_section(cls, v: Any, info) -> Any:
        if v is None:
            return [] if info.field_name == "vectors" else {}
        return v

    @field_validator("lookback_days")
    @classmethod
    def validate_lookback(cls, v: Optional[int]) -> Optional[int]:
        if v is not None and v < 0:
            raise ValueError("lookback_days must not be negative")
        return v
