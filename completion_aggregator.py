"""
Completion Aggregator Module

Folds flat (person, completion level) subscription records into one
aggregate per person with a count per completion level. The result keeps
people in the order they first appear in the input and lists the distinct
levels seen in ascending order, ready for projection into chart series.

Usage:
    from completion_aggregator import (
        SubscriptionRecord,
        PersonAggregate,
        AggregationResult,
        InvalidPersonIndexError,
        aggregate,
        format_completion_report,
    )

    result = aggregate(records)
    for person in result.people:
        print(person.person_name, dict(person.counts))
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List

from completion_levels import label_for

# Set up logging
logger = logging.getLogger(__name__)


class InvalidPersonIndexError(IndexError):
    """Raised when a chart position does not resolve to a person."""

    def __init__(self, message, index=None, person_count=0):
        super().__init__(message)
        self.index = index
        self.person_count = person_count

    def __str__(self):
        base_msg = super().__str__()
        if self.index is not None:
            return f"{base_msg} (index: {self.index}, people: {self.person_count})"
        return base_msg


@dataclass(frozen=True)
class SubscriptionRecord:
    """One architect subscription on a fact sheet.

    Attributes:
        person_id: Identifier of the subscribed user
        person_name: Display name of the user
        completion_level: Completion level (0-4) of the fact sheet
    """
    person_id: str
    person_name: str
    completion_level: int


@dataclass
class PersonAggregate:
    """Completion level counts for a single person.

    Attributes:
        person_id: Identifier of the user
        person_name: Display name taken from the user's first record
        counts: Mapping of completion level to number of records
    """
    person_id: str
    person_name: str
    counts: Dict[int, int] = field(default_factory=dict)

    @property
    def total(self) -> int:
        """Total number of records counted for this person."""
        return sum(self.counts.values())

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "id": self.person_id,
            "name": self.person_name,
            "counts": {str(level): count for level, count in sorted(self.counts.items())},
        }


@dataclass
class AggregationResult:
    """People in first-seen order plus the sorted distinct completion levels.

    The result object is handed to both the chart renderer and the
    navigation handler, so a chart position can always be resolved against
    the exact data it was drawn from.
    """
    people: List[PersonAggregate] = field(default_factory=list)
    levels: List[int] = field(default_factory=list)

    @property
    def total_records(self) -> int:
        return sum(person.total for person in self.people)

    def person_id_at(self, index: int) -> str:
        """Resolve a positional chart index back to a person identifier.

        Args:
            index: Position of the bar in the chart (0-based)

        Returns:
            The person identifier at that position

        Raises:
            InvalidPersonIndexError: If no person exists at that position
        """
        if not isinstance(index, int) or index < 0 or index >= len(self.people):
            raise InvalidPersonIndexError(
                "invalid person id",
                index=index,
                person_count=len(self.people),
            )
        return self.people[index].person_id

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "people": [person.to_dict() for person in self.people],
            "levels": list(self.levels),
        }


def aggregate(records: Iterable[SubscriptionRecord]) -> AggregationResult:
    """Fold subscription records into per-person completion level counts.

    People are keyed by person_id and kept in order of first appearance.
    Completion levels are counted opaquely; values outside 0-4 simply
    become extra buckets.

    Args:
        records: Subscription records, possibly empty

    Returns:
        AggregationResult with ordered people and ascending distinct levels

    Example:
        >>> result = aggregate([
        ...     SubscriptionRecord("p1", "Alice", 1),
        ...     SubscriptionRecord("p1", "Alice", 1),
        ...     SubscriptionRecord("p2", "Bob", 4),
        ... ])
        >>> [p.counts for p in result.people]
        [{1: 2}, {4: 1}]
        >>> result.levels
        [1, 4]
    """
    by_person: Dict[str, PersonAggregate] = {}
    seen_levels = set()

    for record in records:
        person = by_person.get(record.person_id)
        if person is None:
            person = PersonAggregate(record.person_id, record.person_name)
            by_person[record.person_id] = person
        person.counts[record.completion_level] = person.counts.get(record.completion_level, 0) + 1
        seen_levels.add(record.completion_level)

    result = AggregationResult(people=list(by_person.values()), levels=sorted(seen_levels))
    logger.debug(
        f"Aggregated {result.total_records} records into "
        f"{len(result.people)} people across levels {result.levels}"
    )
    return result


def format_completion_report(result: AggregationResult) -> str:
    """Format aggregated completion counts as a text report.

    Args:
        result: Aggregation result to format

    Returns:
        Formatted text report string
    """
    lines = []
    lines.append("=" * 90)
    lines.append("ARCHITECT COMPLETION REPORT")
    lines.append("=" * 90)

    if not result.people:
        lines.append("\nNo subscription data available.")
        return "\n".join(lines)

    lines.append(f"\n  People: {len(result.people)}")
    lines.append(f"  Subscriptions: {result.total_records}")

    lines.append("\n" + "-" * 90)
    lines.append("LEVELS")
    lines.append("-" * 90)
    for level in result.levels:
        level_total = sum(person.counts.get(level, 0) for person in result.people)
        lines.append(f"  L{level}: {label_for(level):<20} {level_total:>6}")

    lines.append("\n" + "-" * 90)
    lines.append("COUNTS PER PERSON")
    lines.append("-" * 90)
    header = f"{'#':>3} {'Person':<30}" + "".join(f"{'L' + str(level):>7}" for level in result.levels)
    lines.append(header + f"{'Total':>8}")
    lines.append("-" * 90)

    for index, person in enumerate(result.people):
        name = person.person_name or ""
        row = f"{index:>3} {name[:30]:<30}"
        row += "".join(f"{person.counts.get(level, 0):>7}" for level in result.levels)
        lines.append(row + f"{person.total:>8}")

    lines.append("\n" + "=" * 90)

    return "\n".join(lines)
