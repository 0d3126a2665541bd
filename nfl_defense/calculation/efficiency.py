from typing import Dict, List, NamedTuple, Sequence

from loguru import logger

from nfl_defense.models.record import TeamDefenseRecord
from nfl_defense.utils.misc_utils import round_one


class Component(NamedTuple):
    """One weighted input to the composite efficiency rating."""

    key: str
    weight: float
    lower_is_better: bool


# Fixed approximation of a proprietary metric; weights sum to 100
EFFICIENCY_COMPONENTS = (
    Component("pointsAllowed", 30, True),
    Component("yardsAllowed", 25, True),
    Component("sacks", 20, False),
    Component("interceptions", 15, False),
    Component("fumbles", 10, False),
)


class Bounds(NamedTuple):
    low: float
    high: float

    def normalize(self, value: float) -> float:
        """Min-max scales ``value`` into [0, 1]; a tied batch is 0.5 for everyone."""
        if self.high == self.low:
            return 0.5
        return (value - self.low) / (self.high - self.low)


def batch_bounds(values: Sequence[float]) -> Bounds:
    return Bounds(min(values), max(values))


def component_bounds(records: Sequence[TeamDefenseRecord]) -> Dict[str, Bounds]:
    return {
        component.key: batch_bounds([r.metric(component.key) for r in records])
        for component in EFFICIENCY_COMPONENTS
    }


def contribution(component: Component, bounds: Bounds, value: float) -> float:
    """The component's share of the score, in [0, weight]."""
    norm = bounds.normalize(value)
    if component.lower_is_better:
        norm = 1 - norm
    return norm * component.weight


def compute_efficiency_ratings(
    records: Sequence[TeamDefenseRecord],
) -> List[TeamDefenseRecord]:
    """Scores every team against the whole batch and returns new records.

    Must run after every team's counters are final, since each score depends
    on the batch minimum and maximum of all five components.
    """
    if not records:
        logger.info("No records to score.")
        return []

    bounds = component_bounds(records)
    scored: List[TeamDefenseRecord] = []
    for record in records:
        score = sum(
            contribution(component, bounds[component.key], record.metric(component.key))
            for component in EFFICIENCY_COMPONENTS
        )
        # Clamp guards float drift like 100.00000000000001
        score = min(max(round_one(score), 0.0), 100.0)
        scored.append(record.model_copy(update={"dvoa": score}))

    best = max(scored, key=lambda r: r.dvoa)
    logger.success(
        f"Scored {len(scored)} defenses. Top efficiency: {best.team} ({best.dvoa})"
    )
    return scored
