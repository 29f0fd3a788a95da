from __future__ import annotations

import pytest

from postrefresh.planner.query import (
    OUTPUT_COLUMNS,
    QueryMode,
    parse_post_target,
    plan_candidate_query,
    resolve_suggested_max,
    select_mode,
    suggested_max_for_backlog,
)
from postrefresh.schemas.selection import InvalidRequestError, SelectionRequest, build_selection_request


def test_single_outlet_request_matches_documented_example() -> None:
    plan = plan_candidate_query(_request(media_ids=[5]))

    assert plan.mode is QueryMode.SINGLE_OUTLET
    assert plan.windows is not None
    assert plan.windows.as_dict() == {
        "created_since": 24,
        "created_until": 720,
        "updated_until": 168,
        "diagnosis_until": 336,
    }
    assert plan.args == (24, 720.0, 168.0, 336.0, 50, 5, 0)
    assert "from main.get_posts_to_update($1, $2, $3)" in plan.text
    assert "where id_medio = $6" in plan.text
    assert "order by updated_time asc, created_time desc" in plan.text
    assert "limit $5" in plan.text
    assert "offset $7" in plan.text
    assert plan.columns == OUTPUT_COLUMNS


def test_single_post_ignores_batch_fields() -> None:
    plan = plan_candidate_query(_request(media_ids=[], without_interactions=True, post_id="12_345"))

    assert plan.mode is QueryMode.SINGLE_POST
    assert plan.args == (345, 12)
    assert "where id = $1::bigint" in plan.text
    assert "and id_medio = $2::bigint" in plan.text
    assert "100 as max_sugerido" in plan.text
    assert "round(extract(epoch from updated_time))::text as since" in plan.text
    assert "limit" not in plan.text
    assert plan.fixed_suggested_max == 100
    assert resolve_suggested_max(plan, backlog_count=9999) == 100


def test_single_post_plan_from_request_with_out_of_range_batch_values() -> None:
    request = build_selection_request(post_id="12_345", limit=0, offset=-1, created_since=1e308)

    plan = plan_candidate_query(request)

    assert plan.mode is QueryMode.SINGLE_POST
    assert plan.args == (345, 12)


@pytest.mark.parametrize("post_id", ["12-345", "abc_1", "12_345_6", "12_345\n", "_1", "", "١٢_٣"])
def test_malformed_post_id_falls_through_to_batch_mode(post_id: str) -> None:
    assert parse_post_target(post_id) is None

    plan = plan_candidate_query(_request(media_ids=[1, 2], post_id=post_id))
    assert plan.mode is QueryMode.MULTI_OUTLET


def test_without_interactions_uses_limit_as_suggested_max() -> None:
    plan = plan_candidate_query(_request(media_ids=[5], limit=40, without_interactions=True))

    assert plan.mode is QueryMode.WITHOUT_INTERACTIONS
    assert plan.fixed_suggested_max == 40
    assert resolve_suggested_max(plan, backlog_count=10_000) == 40
    assert "$4::int as max_sugerido" in plan.text
    assert "get_posts_to_update($1, $2, $4)" not in plan.text
    assert "where id_medio = $5\n  and (reactions = -1 or comments = -1)" in plan.text
    assert plan.args == (24, 720.0, 168.0, 40, 5, 0)


def test_without_interactions_over_many_outlets_filters_after_join() -> None:
    plan = plan_candidate_query(_request(media_ids=[5, 6], without_interactions=True))

    assert plan.mode is QueryMode.WITHOUT_INTERACTIONS
    assert "join (select unnest($5::bigint[]) as medios_id) medios on medios.medios_id = id_medio" in plan.text
    assert "\nwhere (reactions = -1 or comments = -1)" in plan.text


@pytest.mark.parametrize(("backlog", "expected"), [(0, 0), (1, 1), (8, 1), (9, 2), (17, 3), (800, 100)])
def test_backlog_plans_suggest_an_eighth_rounded_up(backlog: int, expected: int) -> None:
    plan = plan_candidate_query(_request(media_ids=[5, 6]))

    assert plan.fixed_suggested_max is None
    assert resolve_suggested_max(plan, backlog_count=backlog) == expected
    assert "ceil((select count(*) from main.get_posts_to_update($1, $2, $4)) / 8.0)::int" in plan.text


def test_backlog_plan_requires_count() -> None:
    plan = plan_candidate_query(_request(media_ids=[5]))

    with pytest.raises(ValueError):
        resolve_suggested_max(plan)
    with pytest.raises(ValueError):
        suggested_max_for_backlog(-1)


def test_single_and_multi_outlet_share_ordering_and_pagination() -> None:
    single = plan_candidate_query(_request(media_ids=[5]))
    multi = plan_candidate_query(_request(media_ids=[5, 6, 7]))

    single_head, single_tail = single.text.split("order by")
    multi_head, multi_tail = multi.text.split("order by")

    assert single_tail == multi_tail
    assert "where id_medio = $6" in single_head
    assert "join" not in single_head
    assert "join (select unnest($6::bigint[]) as medios_id) medios" in multi_head
    assert multi.args[5] == [5, 6, 7]


def test_created_since_rounds_up_but_other_windows_do_not() -> None:
    plan = plan_candidate_query(
        _request(media_ids=[5], created_since=2.1, created_until=2.1, updated_until=2.1, diagnosis_until=2.1)
    )

    assert plan.windows is not None
    assert plan.windows.created_since == 51
    assert plan.windows.created_until == pytest.approx(50.4)
    assert plan.windows.updated_until == pytest.approx(50.4)
    assert plan.windows.diagnosis_until == pytest.approx(50.4)


def test_request_values_are_bound_not_rendered() -> None:
    plan = plan_candidate_query(_request(media_ids=[4242, 4343], limit=37, offset=911))

    assert "4242" not in plan.text
    assert "911" not in plan.text
    assert "37" not in plan.text
    assert 37 in plan.args
    assert 911 in plan.args


@pytest.mark.parametrize("without_interactions", [False, True])
def test_batch_mode_without_media_ids_is_rejected(without_interactions: bool) -> None:
    request = _request(media_ids=[], without_interactions=without_interactions)

    with pytest.raises(InvalidRequestError):
        plan_candidate_query(request)


def test_mode_selection_order() -> None:
    assert select_mode(_request(media_ids=[1, 2], without_interactions=True, post_id="1_2")) is QueryMode.SINGLE_POST
    assert select_mode(_request(media_ids=[1], without_interactions=True)) is QueryMode.WITHOUT_INTERACTIONS
    assert select_mode(_request(media_ids=[1])) is QueryMode.SINGLE_OUTLET
    assert select_mode(_request(media_ids=[1, 2])) is QueryMode.MULTI_OUTLET


def test_plan_serializes_for_output() -> None:
    payload = plan_candidate_query(_request(media_ids=[5])).as_dict()

    assert payload["mode"] == "single_outlet"
    assert payload["args"] == [24, 720.0, 168.0, 336.0, 50, 5, 0]
    assert payload["columns"] == list(OUTPUT_COLUMNS)
    assert payload["target"] is None


def _request(
    *,
    media_ids: list[int],
    limit: int = 50,
    offset: int = 0,
    created_since: float = 1,
    created_until: float = 30,
    updated_until: float = 7,
    diagnosis_until: float = 14,
    without_interactions: bool = False,
    post_id: str | None = None,
) -> SelectionRequest:
    return SelectionRequest(
        media_ids=media_ids,
        limit=limit,
        offset=offset,
        created_since=created_since,
        created_until=created_until,
        updated_until=updated_until,
        diagnosis_until=diagnosis_until,
        without_interactions=without_interactions,
        post_id=post_id,
    )
