"""Eligibility predicates over media outlets.

Every predicate returns ``True`` to accept an outlet. Predicates only carry the
parameters bound at construction, so a chain can be evaluated from any number
of threads. Callers combine the ones relevant to a run with :class:`AllOf`.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import Protocol

from postrefresh.core.clock import ReferenceClock
from postrefresh.filters.outlets import (
    MediaOutlet,
    resolve_country,
    resolve_local_percentage,
    resolve_updated_time,
)

logger = logging.getLogger(__name__)

DEFAULT_STALE_AFTER_SECONDS = 300

_LEADING_INT_RE = re.compile(r"\s*([+-]?\d+)", re.ASCII)


class OutletPredicate(Protocol):
    name: str

    def __call__(self, outlet: MediaOutlet) -> bool: ...


@dataclass(frozen=True, slots=True)
class ById:
    target_id: int | str
    name: str = "by_id"

    def __call__(self, outlet: MediaOutlet) -> bool:
        return str(outlet.id) == str(self.target_id)


@dataclass(frozen=True, slots=True)
class ByCategory:
    target_category: str
    name: str = "by_category"

    def __call__(self, outlet: MediaOutlet) -> bool:
        return outlet.category == self.target_category


@dataclass(frozen=True, slots=True)
class IsActive:
    name: str = "is_active"

    def __call__(self, outlet: MediaOutlet) -> bool:
        return outlet.is_active is True


@dataclass(frozen=True, slots=True)
class RecentlyStale:
    """Active outlets whose last update is older than ``threshold_seconds`` at the reference clock."""

    reference_clock: ReferenceClock
    threshold_seconds: int = DEFAULT_STALE_AFTER_SECONDS
    name: str = "recently_stale"

    def __call__(self, outlet: MediaOutlet) -> bool:
        if not outlet.is_active:
            logger.debug("rejecting outlet=%s name=%s: not active", outlet.id, outlet.name)
            return False
        elapsed = self.reference_clock.epoch_seconds - resolve_updated_time(outlet)
        return elapsed > self.threshold_seconds


@dataclass(frozen=True, slots=True)
class LocalEnough:
    """Outlets with enough local audience in ``target_country``.

    A missing percentage counts as unbounded, but a country mismatch always rejects.
    """

    percentage_threshold: float
    target_country: str
    name: str = "local_enough"

    def __call__(self, outlet: MediaOutlet) -> bool:
        local_percentage = resolve_local_percentage(outlet)
        return local_percentage >= self.percentage_threshold and resolve_country(outlet) == self.target_country


@dataclass(frozen=True, slots=True)
class Whitelisted:
    allowed_ids: frozenset[int]
    name: str = "whitelisted"

    def __call__(self, outlet: MediaOutlet) -> bool:
        outlet_id = _parse_leading_int(outlet.id)
        return outlet_id is not None and outlet_id in self.allowed_ids


@dataclass(frozen=True, slots=True)
class AllOf:
    """Conjunction of predicates; evaluation stops at the first rejection."""

    predicates: tuple[OutletPredicate, ...]
    name: str = "all_of"

    def __call__(self, outlet: MediaOutlet) -> bool:
        return self.first_rejection(outlet) is None

    def first_rejection(self, outlet: MediaOutlet) -> OutletPredicate | None:
        for predicate in self.predicates:
            if not predicate(outlet):
                return predicate
        return None

    @property
    def names(self) -> list[str]:
        return [predicate.name for predicate in self.predicates]


def by_id(target_id: int | str) -> ById:
    return ById(target_id=target_id)


def by_category(target_category: str) -> ByCategory:
    return ByCategory(target_category=target_category)


def is_active() -> IsActive:
    return IsActive()


def recently_stale(
    reference_clock: ReferenceClock,
    threshold_seconds: int | None = DEFAULT_STALE_AFTER_SECONDS,
) -> RecentlyStale:
    if threshold_seconds is None:
        threshold_seconds = DEFAULT_STALE_AFTER_SECONDS
    return RecentlyStale(reference_clock=reference_clock, threshold_seconds=threshold_seconds)


def local_enough(percentage_threshold: float, target_country: str) -> LocalEnough:
    return LocalEnough(percentage_threshold=percentage_threshold, target_country=target_country)


def whitelisted(allowed_ids: Iterable[int]) -> Whitelisted:
    return Whitelisted(allowed_ids=frozenset(int(item) for item in allowed_ids))


def all_of(*predicates: OutletPredicate) -> AllOf:
    return AllOf(predicates=tuple(predicates))


def filter_outlets(outlets: Iterable[MediaOutlet], chain: AllOf) -> list[MediaOutlet]:
    accepted: list[MediaOutlet] = []
    for outlet in outlets:
        rejected_by = chain.first_rejection(outlet)
        if rejected_by is None:
            accepted.append(outlet)
            continue
        logger.debug(
            "rejecting outlet=%s name=%s by=%s",
            outlet.id,
            outlet.name,
            rejected_by.name,
            extra={"meta": {"outlet_id": str(outlet.id), "predicate": rejected_by.name}},
        )
    return accepted


def eligible_media_ids(outlets: Sequence[MediaOutlet], chain: AllOf) -> list[int]:
    ids: list[int] = []
    for outlet in filter_outlets(outlets, chain):
        outlet_id = _parse_leading_int(outlet.id)
        if outlet_id is not None and outlet_id > 0:
            ids.append(outlet_id)
    return ids


def _parse_leading_int(value: int | str) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    match = _LEADING_INT_RE.match(str(value))
    if match is None:
        return None
    return int(match.group(1))
