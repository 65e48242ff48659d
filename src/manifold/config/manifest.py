from dataclasses import dataclass, field
from typing import Optional

from manifold.metrics.models import MetricsGroup, TimestampConfig


@dataclass(frozen=True)
class WorkspaceManifest:
    """
    Canonical, loaded configuration of one workspace.

    Attributes:
        name: Workspace name, also the BigQuery dataset id.
        vectors: Names of the vectors whose attributes form the dimensions.
        dimensions_source: Path (relative to the workspace) of the SELECT
            feeding the dimensions merge.
        timestamp: Workspace level timestamp, inherited by metrics groups.
        partitioning_interval: Time partitioning of the manifold and metrics tables.
        lookback_days: Window re-merged on every run; 0 merges everything.
        metrics: Metrics groups in declaration order.
    """
    name: str
    vectors: tuple[str, ...] = ()
    dimensions_source: Optional[str] = None
    timestamp: Optional[TimestampConfig] = None
    partitioning_interval: Optional[str] = None
    lookback_days: int = 90
    metrics: dict[str, MetricsGroup] = field(default_factory=dict)
