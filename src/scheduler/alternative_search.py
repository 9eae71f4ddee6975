"""
Alternative-time search: probe fixed offsets around a rejected request
"""
import logging
from datetime import date, timedelta, tzinfo
from typing import Iterable, List, Optional, Sequence

from config.settings import Config
from src.availability.models import Candidate, Recommendation, Slot
from src.scheduler.conflict_detector import detect_conflict

logger = logging.getLogger(__name__)


def probe_order(offsets: Iterable[int]) -> List[int]:
    """Nearest offsets first; the earlier time wins at equal distance"""
    return sorted(set(offsets), key=lambda offset: (abs(offset), offset > 0))


def format_label(start, end) -> str:
    return f"{start.strftime(Config.TIME_FORMAT)} - {end.strftime(Config.TIME_FORMAT)}"


def build_recommendation_message(recommendations: Sequence[Recommendation]) -> str:
    """Human-readable list of the offered times"""
    if not recommendations:
        return "Sorry, there is no time to recommend on that date."
    lines = [f"{i}. {rec.label}" for i, rec in enumerate(recommendations, 1)]
    return "That time is already taken. How about one of these?\n\n" + "\n".join(lines)


class AlternativeTimeSearch:
    """
    Deterministic search for conflict-free times near a requested one.

    Probes keep the candidate's duration, must start inside working hours
    [min_hour, max_hour) and on the candidate's own date.
    """

    def __init__(self, offsets: Optional[Sequence[int]] = None, min_hour: Optional[int] = None,
                 max_hour: Optional[int] = None, max_results: Optional[int] = None):
        search_config = Config.get_search_config()
        self.offsets = probe_order(search_config["offsets"] if offsets is None else offsets)
        self.min_hour = search_config["min_hour"] if min_hour is None else min_hour
        self.max_hour = search_config["max_hour"] if max_hour is None else max_hour
        self.max_results = search_config["max_results"] if max_results is None else max_results

    def _accepts_start(self, probe: Candidate, anchor_day: date) -> bool:
        if not self.min_hour <= probe.start.hour < self.max_hour:
            return False
        return probe.day == anchor_day

    def _search(self, candidate: Candidate, commitments: Sequence[Slot],
                exclude: Optional[Slot] = None) -> List[Recommendation]:
        results: List[Recommendation] = []
        for offset in self.offsets:
            probe = candidate.shifted(timedelta(minutes=offset))
            if not self._accepts_start(probe, candidate.day):
                continue
            if detect_conflict(probe, commitments, exclude=exclude).has_conflict:
                continue
            results.append(Recommendation(probe.start, probe.end, format_label(probe.start, probe.end), offset))
            if len(results) >= self.max_results:
                break

        logger.info(f"🔍 {len(results)} alternative(s) for '{candidate.title}' "
                    f"around {format_label(candidate.start, candidate.end)} on {candidate.day.isoformat()}")
        return results

    def find_alternatives(self, candidate: Candidate, commitments: Iterable[Slot]) -> List[Recommendation]:
        """Conflict-free alternatives for a rejected candidate; empty means no slot found"""
        return self._search(candidate, list(commitments))

    def find_reschedule_options(self, displaced: Slot, commitments: Iterable[Slot],
                                on_date: Optional[date] = None,
                                tz: Optional[tzinfo] = None) -> List[Recommendation]:
        """
        New times for an event pushed out by another one.

        Probes are anchored on the displaced event's own start, and the
        displaced event never conflicts with its former slot.
        """
        candidate = Candidate.from_slot(displaced, on_date=on_date, tz=tz)
        return self._search(candidate, list(commitments), exclude=displaced)
