"""Chart series aggregation.

Groups parsed rows on one field and sums another. Never raises on bad data:
a missing or empty group key is counted under "Unknown" and a value that does
not parse as a number counts as 0, so a chart can always be produced.
"""
import math
import re
from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping

UNKNOWN_LABEL = "Unknown"

# Leading numeric prefix, the same way JavaScript's parseFloat reads it
_FLOAT_PREFIX = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")


@dataclass
class ChartSeries:
    labels: list[str] = field(default_factory=list)
    values: list[float] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {"labels": list(self.labels), "values": list(self.values)}


def aggregate(rows: Iterable[Mapping[str, Any]], group_field: str, value_field: str) -> ChartSeries:
    """Sum `value_field` per distinct `group_field`, keeping first-seen label order."""
    totals: dict[str, float] = {}
    for row in rows:
        label = group_label(row.get(group_field))
        totals[label] = totals.get(label, 0) + parse_number(row.get(value_field))
    return ChartSeries(labels=list(totals), values=list(totals.values()))


def group_label(value: Any) -> str:
    if value is None or value == "":
        return UNKNOWN_LABEL
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def parse_number(value: Any) -> float:
    """Lenient float parse. Anything unreadable becomes 0."""
    if value is None or isinstance(value, bool):
        return 0
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        match = _FLOAT_PREFIX.match(str(value).strip())
        if not match:
            return 0
        number = float(match.group(0))
    # NaN and overflow cannot be stored or served as JSON
    if not math.isfinite(number):
        return 0
    return number
