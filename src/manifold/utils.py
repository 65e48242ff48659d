import re


def capitalize_first(string: str) -> str:
    """
    Upper-cases the first character and leaves the rest untouched.
    E.g. usWest -> UsWest (unlike str.capitalize, which gives Uswest)
    """
    return string[:1].upper() + string[1:]


def to_routine_id(condition_name: str) -> str:
    """
    Builds the scalar function name deployed for a condition. E.g. paid_user -> isPaidUser
    """
    parts = re.split(r"_|\s+", str(condition_name))
    return "is" + "".join(capitalize_first(part) for part in parts if part)


def metrics_table_name(group_name: str) -> str:
    """Physical table holding one metrics group. E.g. renders -> RendersMetrics"""
    return f"{capitalize_first(group_name)}Metrics"
