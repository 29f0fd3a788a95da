from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field

from opentelemetry import trace

from postrefresh.core.clock import ReferenceClock
from postrefresh.core.config import Settings
from postrefresh.filters.eligibility import (
    AllOf,
    OutletPredicate,
    all_of,
    eligible_media_ids,
    local_enough,
    recently_stale,
    whitelisted,
)
from postrefresh.filters.outlets import MediaOutlet
from postrefresh.planner.query import QueryMode, QueryPlan, plan_candidate_query, select_mode
from postrefresh.schemas.selection import SelectionRequest
from postrefresh.services.whitelist import configured_media_id_whitelist

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)


@dataclass(slots=True)
class RefreshBatch:
    request: SelectionRequest
    plan: QueryPlan
    rejected_media_ids: list[int] = field(default_factory=list)


def build_default_chain(
    settings: Settings,
    reference_clock: ReferenceClock,
    *,
    whitelist: Iterable[int] | None = None,
) -> AllOf:
    predicates: list[OutletPredicate] = [recently_stale(reference_clock, settings.stale_after_seconds)]
    if settings.local_percentage_threshold is not None:
        predicates.append(local_enough(settings.local_percentage_threshold, settings.country))

    allowed_ids = tuple(whitelist) if whitelist is not None else configured_media_id_whitelist(settings)
    if allowed_ids:
        predicates.append(whitelisted(allowed_ids))
    return all_of(*predicates)


def narrow_request(
    request: SelectionRequest,
    outlets: Sequence[MediaOutlet],
    chain: AllOf,
) -> SelectionRequest:
    """Keep only the requested outlets the chain accepts, in request order.

    With no ``media_ids`` on the request every given outlet is a candidate.
    """

    accepted = eligible_media_ids(outlets, chain)
    if request.media_ids:
        accepted_set = set(accepted)
        narrowed = tuple(media_id for media_id in request.media_ids if media_id in accepted_set)
    else:
        narrowed = tuple(dict.fromkeys(accepted))
    return request.model_copy(update={"media_ids": narrowed})


def prepare_refresh_batch(
    request: SelectionRequest,
    *,
    outlets: Sequence[MediaOutlet] | None = None,
    chain: AllOf | None = None,
) -> RefreshBatch:
    with tracer.start_as_current_span("refresh.prepare_batch") as span:
        narrowed = request
        if outlets is not None and chain is not None and select_mode(request) is not QueryMode.SINGLE_POST:
            narrowed = narrow_request(request, outlets, chain)

        kept = set(narrowed.media_ids)
        rejected = [media_id for media_id in request.media_ids if media_id not in kept]
        if rejected:
            logger.info(
                "outlets rejected by eligibility chain count=%s",
                len(rejected),
                extra={"meta": {"rejected_media_ids": rejected, "chain": chain.names if chain else []}},
            )

        plan = plan_candidate_query(narrowed)
        span.set_attribute("refresh.mode", plan.mode.value)
        span.set_attribute("refresh.media_ids.count", len(plan.media_ids))
        span.set_attribute("refresh.rejected.count", len(rejected))
        return RefreshBatch(request=narrowed, plan=plan, rejected_media_ids=rejected)
