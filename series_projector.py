"""
Series Projector Module

Turns aggregated per-person completion counts into stacked bar chart
series: one series per completion level present, each holding one value
per person in the aggregate's order.

Usage:
    from series_projector import ChartSeries, ChartData, project, create_chart_data

    result = aggregate(records)
    chart_data = create_chart_data(result)
    drawing = make_completion_bar_chart(chart_data, "Architects")
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Sequence

from reportlab.lib import colors

from completion_aggregator import AggregationResult, PersonAggregate
from completion_levels import color_for, css_color_for, label_for

# All series share one stack so the bars pile up per person
STACK_ID = "bar"


@dataclass
class ChartSeries:
    """A single stacked bar series for one completion level.

    Attributes:
        level: Completion level this series represents
        label: Legend label for the level
        values: Count per person, aligned with the chart labels
        color: Bar fill color
        stack: Stack group identifier
        bar_percentage: Fraction of the category width the bar uses
    """
    level: int
    label: str
    values: List[int] = field(default_factory=list)
    color: colors.Color = colors.black
    stack: str = STACK_ID
    bar_percentage: float = 1

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a Chart.js style dataset mapping."""
        return {
            "label": self.label,
            "data": list(self.values),
            "backgroundColor": css_color_for(self.level),
            "stack": self.stack,
            "barPercentage": self.bar_percentage,
        }


@dataclass
class ChartData:
    """Person labels plus one series per completion level."""
    labels: List[str] = field(default_factory=list)
    datasets: List[ChartSeries] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.labels or not self.datasets

    def totals(self) -> List[int]:
        """Stacked bar height per person."""
        return [sum(series.values[i] for series in self.datasets) for i in range(len(self.labels))]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "labels": list(self.labels),
            "datasets": [series.to_dict() for series in self.datasets],
        }


def project(people: Sequence[PersonAggregate], levels: Sequence[int]) -> List[ChartSeries]:
    """Project per-person counts into one chart series per level.

    Args:
        people: Person aggregates in display order
        levels: Completion levels to emit, ascending

    Returns:
        List of ChartSeries, one per level, each with one value per person
        (0 where the person has no records at that level)

    Example:
        >>> series = project(result.people, result.levels)
        >>> [(s.label, s.values) for s in series]
        [('<25% complete', [2, 0]), ('100% complete', [0, 1])]
    """
    return [
        ChartSeries(
            level=level,
            label=label_for(level),
            values=[person.counts.get(level, 0) for person in people],
            color=color_for(level),
        )
        for level in levels
    ]


def create_chart_data(result: AggregationResult) -> ChartData:
    """Build the full chart payload (labels and series) from an aggregation."""
    return ChartData(
        labels=[person.person_name for person in result.people],
        datasets=project(result.people, result.levels),
    )
