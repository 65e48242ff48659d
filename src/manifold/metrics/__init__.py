from .combinations import combination_name, generate_combinations
from .conditions import ConditionCompiler
from .models import (
    Aggregations,
    Breakout,
    CombinationField,
    CompositeCondition,
    Condition,
    FunctionCondition,
    GroupField,
    MetricsGroup,
    Operator,
    RawCondition,
    SumIf,
    TimestampConfig,
)
from .plan import GroupPlan, MetricsPlan, resolve_group_fields
from .schema import SchemaBuilder, SchemaField, to_json
from .sql import SQLBuilder
