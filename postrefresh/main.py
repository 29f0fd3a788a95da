"""Render the candidate query for one refresh batch as JSON."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any

from postrefresh.core.clock import ReferenceClock
from postrefresh.core.config import Settings, get_settings
from postrefresh.core.telemetry import configure_logging, setup_telemetry, shutdown_telemetry
from postrefresh.jobs.refresh import build_default_chain, prepare_refresh_batch
from postrefresh.schemas.selection import InvalidRequestError, build_selection_request
from postrefresh.services.outlet_records import OutletRecordError, load_outlet_records
from postrefresh.services.whitelist import WhitelistError

logger = logging.getLogger(__name__)


def _media_ids(raw: str) -> list[int]:
    ids: list[int] = []
    for item in raw.split(","):
        stripped = item.strip()
        if not stripped:
            continue
        try:
            ids.append(int(stripped))
        except ValueError as exc:
            raise argparse.ArgumentTypeError(f"invalid media id: {stripped!r}") from exc
    return ids


def build_parser(settings: Settings) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Emit the candidate-selection query for a refresh batch.")
    parser.add_argument("--media-ids", type=_media_ids, default=[], help="Comma separated outlet ids")
    parser.add_argument("--limit", type=int, default=settings.default_limit)
    parser.add_argument("--offset", type=int, default=0)
    parser.add_argument("--created-since", type=float, default=settings.default_created_since_days, help="Days")
    parser.add_argument("--created-until", type=float, default=settings.default_created_until_days, help="Days")
    parser.add_argument("--updated-until", type=float, default=settings.default_updated_until_days, help="Days")
    parser.add_argument(
        "--diagnosis-until",
        type=float,
        default=settings.default_diagnosis_until_days,
        help="Days; only used to size the backlog reference",
    )
    parser.add_argument("--without-interactions", action="store_true")
    parser.add_argument("--post-id", default=None, help="<media_id>_<post_id> to target a single post")
    parser.add_argument(
        "--outlets",
        type=Path,
        default=None,
        help="JSON file with outlet records to narrow media ids through the eligibility chain",
    )
    parser.add_argument("--now", type=float, default=None, help="Reference clock as epoch seconds")
    return parser


def run(args: argparse.Namespace, settings: Settings) -> dict[str, Any]:
    request = build_selection_request(
        media_ids=args.media_ids,
        limit=args.limit,
        offset=args.offset,
        created_since=args.created_since,
        created_until=args.created_until,
        updated_until=args.updated_until,
        diagnosis_until=args.diagnosis_until,
        without_interactions=args.without_interactions,
        post_id=args.post_id,
    )

    outlets = None
    chain = None
    if args.outlets is not None:
        outlets = load_outlet_records(args.outlets)
        clock = ReferenceClock.from_epoch(args.now) if args.now is not None else ReferenceClock.capture()
        chain = build_default_chain(settings, clock)

    batch = prepare_refresh_batch(request, outlets=outlets, chain=chain)
    logger.info(
        "candidate query rendered mode=%s media_ids=%s rejected=%s",
        batch.plan.mode.value,
        len(batch.plan.media_ids),
        len(batch.rejected_media_ids),
    )
    payload = batch.plan.as_dict()
    payload["rejected_media_ids"] = batch.rejected_media_ids
    return payload


def main(argv: list[str] | None = None) -> int:
    settings = get_settings()
    configure_logging(settings)
    telemetry_runtime = setup_telemetry(settings)
    args = build_parser(settings).parse_args(argv)

    try:
        payload = run(args, settings)
    except (InvalidRequestError, OutletRecordError, WhitelistError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2
    finally:
        shutdown_telemetry(telemetry_runtime)

    print(json.dumps(payload, indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
