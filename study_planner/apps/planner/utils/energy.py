'''
Name: apps/planner/utils/energy.py
Description: Aggregates self-reported energy observations into
             per-(weekday, hour) counts and picks the dominant level.
Authors: Planner Team
Created: October 6, 2026
Last Modified: October 15, 2026
'''
import logging
from collections import Counter, defaultdict
from typing import Dict, Iterable, Iterator, Mapping, Tuple

from .constants import DEFAULT_ENERGY_LEVEL, ENERGY_TIE_ORDER, LOGGER_NAME

logger = logging.getLogger(LOGGER_NAME)


def dominant_level(hour_counts: Mapping[str, int]) -> str:
    """
    Level with the greatest count. Ties go to the earlier entry of
    ENERGY_TIE_ORDER (high > medium > low). Hours with no observations
    default to medium so they are neither favored nor penalized.
    """
    best, best_count = DEFAULT_ENERGY_LEVEL, 0
    for level in ENERGY_TIE_ORDER:
        count = hour_counts.get(level, 0) if hour_counts else 0
        if count > best_count:
            best, best_count = level, count
    return best


class EnergyHistogram:
    '''
    Frequency table built from the full observation log.
    Rebuilt on every query; one pass over the log.
    '''

    def __init__(self, counts: Dict[Tuple[int, int], Counter]):
        self._counts = counts

    @classmethod
    def from_observations(cls, observations: Iterable) -> "EnergyHistogram":
        counts: Dict[Tuple[int, int], Counter] = defaultdict(Counter)
        total = 0
        for obs in observations:
            counts[(obs.day_of_week, obs.hour)][str(obs.energy_level)] += 1
            total += 1
        logger.debug("EnergyHistogram: observations=%d buckets=%d", total, len(counts))
        return cls(dict(counts))

    def __len__(self):
        return len(self._counts)

    def counts_at(self, weekday: int, hour: int) -> Dict[str, int]:
        return dict(self._counts.get((weekday, hour), {}))

    def distribution_for(self, weekday: int) -> Dict[int, Dict[str, int]]:
        """hour -> {"high": n, "medium": n, "low": n} for every observed hour of the weekday."""
        out = {}
        for (day, hour), counter in self._counts.items():
            if day == weekday:
                out[hour] = {level: counter.get(level, 0) for level in ENERGY_TIE_ORDER}
        return dict(sorted(out.items()))

    def level_at(self, weekday: int, hour: int) -> str:
        return dominant_level(self.counts_at(weekday, hour))

    def buckets(self) -> Iterator[Tuple[int, int, str, int]]:
        """Flattened (weekday, hour, level, count) rows across all weekdays."""
        for (day, hour), counter in sorted(self._counts.items()):
            for level in ENERGY_TIE_ORDER:
                if counter.get(level):
                    yield day, hour, level, counter[level]
