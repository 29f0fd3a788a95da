from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from postrefresh.planner.windows import HourWindows, to_hour_windows
from postrefresh.schemas.selection import SINGLE_POST_RE, InvalidRequestError, SelectionRequest

logger = logging.getLogger(__name__)

OUTPUT_COLUMNS = ("id", "id_medio", "created_time", "name", "since", "max_sugerido")
SINGLE_POST_SUGGESTED_MAX = 100
BACKLOG_DIVISOR = 8
INTERACTIONS_UNKNOWN = -1
POSTS_TO_UPDATE_FUNCTION = "main.get_posts_to_update"


class QueryMode(str, Enum):
    SINGLE_POST = "single_post"
    WITHOUT_INTERACTIONS = "without_interactions"
    SINGLE_OUTLET = "single_outlet"
    MULTI_OUTLET = "multi_outlet"


@dataclass(frozen=True, slots=True)
class PostTarget:
    media_id: int
    post_id: int


@dataclass(frozen=True, slots=True)
class QueryPlan:
    """A rendered candidate query: SQL text with ``$n`` placeholders plus its bound args."""

    mode: QueryMode
    text: str
    args: tuple[Any, ...]
    columns: tuple[str, ...] = OUTPUT_COLUMNS
    fixed_suggested_max: int | None = None
    windows: HourWindows | None = None
    target: PostTarget | None = None
    media_ids: tuple[int, ...] = ()

    def as_dict(self) -> dict[str, Any]:
        return {
            "mode": self.mode.value,
            "sql": self.text,
            "args": list(self.args),
            "columns": list(self.columns),
            "fixed_suggested_max": self.fixed_suggested_max,
            "windows": self.windows.as_dict() if self.windows is not None else None,
            "target": (
                {"media_id": self.target.media_id, "post_id": self.target.post_id}
                if self.target is not None
                else None
            ),
            "media_ids": list(self.media_ids),
        }


@dataclass(slots=True)
class _Params:
    values: list[Any] = field(default_factory=list)

    def bind(self, value: Any) -> str:
        self.values.append(value)
        return f"${len(self.values)}"


def parse_post_target(post_id: str | None) -> PostTarget | None:
    """Return the ``<media_id>_<post_id>`` pair, or ``None`` when the text does not match."""

    if not isinstance(post_id, str):
        return None
    match = SINGLE_POST_RE.fullmatch(post_id)
    if match is None:
        return None
    return PostTarget(media_id=int(match.group(1)), post_id=int(match.group(2)))


def select_mode(request: SelectionRequest) -> QueryMode:
    if parse_post_target(request.post_id) is not None:
        return QueryMode.SINGLE_POST
    if request.without_interactions:
        return QueryMode.WITHOUT_INTERACTIONS
    if len(request.media_ids) == 1:
        return QueryMode.SINGLE_OUTLET
    return QueryMode.MULTI_OUTLET


def suggested_max_for_backlog(backlog_count: int) -> int:
    if backlog_count < 0:
        raise ValueError("backlog_count must be non-negative")
    return math.ceil(backlog_count / BACKLOG_DIVISOR)


def resolve_suggested_max(plan: QueryPlan, backlog_count: int | None = None) -> int:
    if plan.fixed_suggested_max is not None:
        return plan.fixed_suggested_max
    if backlog_count is None:
        raise ValueError(f"{plan.mode.value} plans need the backlog count to size the batch")
    return suggested_max_for_backlog(backlog_count)


def plan_candidate_query(request: SelectionRequest) -> QueryPlan:
    target = parse_post_target(request.post_id)
    if target is not None:
        plan = _plan_single_post(target)
    else:
        mode = select_mode(request)
        if not request.media_ids:
            raise InvalidRequestError(f"{mode.value} selection requires at least one media id")
        plan = _plan_batch(request, mode)

    logger.debug(
        "candidate query planned mode=%s media_ids=%s",
        plan.mode.value,
        len(plan.media_ids),
        extra={"meta": {"sql": plan.text, "args": list(plan.args)}},
    )
    return plan


def _plan_single_post(target: PostTarget) -> QueryPlan:
    params = _Params()
    post_param = params.bind(target.post_id)
    media_param = params.bind(target.media_id)
    text = f"""
select
  id,
  id_medio,
  created_time,
  message as name,
  round(extract(epoch from updated_time))::text as since,
  {SINGLE_POST_SUGGESTED_MAX} as max_sugerido
from public.posts
where id = {post_param}::bigint
  and id_medio = {media_param}::bigint
"""
    return QueryPlan(
        mode=QueryMode.SINGLE_POST,
        text=text,
        args=tuple(params.values),
        fixed_suggested_max=SINGLE_POST_SUGGESTED_MAX,
        target=target,
        media_ids=(target.media_id,),
    )


def _plan_batch(request: SelectionRequest, mode: QueryMode) -> QueryPlan:
    windows = to_hour_windows(
        created_since=request.created_since,
        created_until=request.created_until,
        updated_until=request.updated_until,
        diagnosis_until=request.diagnosis_until,
    )
    params = _Params()
    since_param = params.bind(windows.created_since)
    until_param = params.bind(windows.created_until)
    updated_param = params.bind(windows.updated_until)

    if request.without_interactions:
        fixed_suggested_max: int | None = request.limit
        limit_param = params.bind(request.limit)
        max_expr = f"{limit_param}::int"
    else:
        fixed_suggested_max = None
        diagnosis_param = params.bind(windows.diagnosis_until)
        max_expr = (
            f"ceil((select count(*) from {POSTS_TO_UPDATE_FUNCTION}({since_param}, {until_param}, {diagnosis_param}))"
            f" / {BACKLOG_DIVISOR}.0)::int"
        )
        limit_param = params.bind(request.limit)

    restriction = _render_outlet_restriction(params, request)
    offset_param = params.bind(request.offset)

    text = f"""
select
  id,
  id_medio,
  created_time,
  message as name,
  url as since,
  {max_expr} as max_sugerido
from {POSTS_TO_UPDATE_FUNCTION}({since_param}, {until_param}, {updated_param})
{restriction}
order by updated_time asc, created_time desc
limit {limit_param}
offset {offset_param}
"""
    return QueryPlan(
        mode=mode,
        text=text,
        args=tuple(params.values),
        fixed_suggested_max=fixed_suggested_max,
        windows=windows,
        media_ids=request.media_ids,
    )


def _render_outlet_restriction(params: _Params, request: SelectionRequest) -> str:
    interactions_unknown = f"(reactions = {INTERACTIONS_UNKNOWN} or comments = {INTERACTIONS_UNKNOWN})"
    if len(request.media_ids) == 1:
        clause = f"where id_medio = {params.bind(request.media_ids[0])}"
        if request.without_interactions:
            clause += f"\n  and {interactions_unknown}"
        return clause

    # one array parameter joined through unnest, whatever the number of outlets
    ids_param = params.bind(list(request.media_ids))
    clause = f"join (select unnest({ids_param}::bigint[]) as medios_id) medios on medios.medios_id = id_medio"
    if request.without_interactions:
        clause += f"\nwhere {interactions_unknown}"
    return clause
