"""Command-line interface for the decision cache.

Usage:
    decision-cache stats
    decision-cache cleanup [expired|all]
    decision-cache lookup exact KEY
    decision-cache lookup semantic KEY QUERY
    decision-cache store exact KEY RESPONSE
    decision-cache store semantic KEY RESPONSE QUERY
    decision-cache warmup FILE
    decision-cache route [--budget N]
    decision-cache feedback BAND {user_approve,user_reject}
    decision-cache serve

RESPONSE arguments are parsed as JSON when possible and stored as plain
strings otherwise. Lookups exit with status 1 on a miss.
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any

from decision_cache.config import settings
from decision_cache.engine import DecisionEngine
from decision_cache.entities import Band, CleanupMode, Feedback
from decision_cache.exceptions import DecisionCacheError
from decision_cache.logging_utils import setup_logging

logger = logging.getLogger(__name__)

# "response" is the exact tier's name in older scripts
CACHE_TYPES = ("exact", "response", "semantic")


def _parse_response(raw: str) -> Any:
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        return raw


def _emit(payload: Any) -> None:
    print(json.dumps(payload, indent=2, ensure_ascii=False))


def _load_warmup_pairs(path: Path) -> list[tuple[str, Any]]:
    """Read warmup pairs from a JSON object {key: response} or a list of {key, response}."""
    with path.open(encoding="utf-8") as f:
        data = json.load(f)

    if isinstance(data, dict):
        return list(data.items())
    if isinstance(data, list):
        pairs = []
        for item in data:
            if isinstance(item, dict) and "key" in item:
                pairs.append((item["key"], item.get("response")))
            else:
                logger.warning("Skipping warmup item without a key: %r", item)
        return pairs
    raise ValueError(f"{path}: expected a JSON object or list, got {type(data).__name__}")


def _cmd_stats(engine: DecisionEngine, args: argparse.Namespace) -> int:
    _emit(engine.cache.get_stats())
    return 0


def _cmd_cleanup(engine: DecisionEngine, args: argparse.Namespace) -> int:
    result = engine.cache.cleanup(args.mode)
    _emit(
        {
            "mode": result.mode.value,
            "exact_removed": result.exact_removed,
            "semantic_removed": result.semantic_removed,
            "total_removed": result.total_removed,
        }
    )
    return 0


def _cmd_lookup(engine: DecisionEngine, args: argparse.Namespace) -> int:
    if args.type == "semantic":
        if not args.query:
            print("Error: query required for semantic lookup", file=sys.stderr)
            return 2
        match = engine.cache.lookup_semantic(args.query)
        if match is None:
            return 1
        _emit(
            {
                "key": match.key,
                "query": match.query,
                "response": match.response,
                "similarity": match.similarity,
                "cached_at": match.cached_at,
            }
        )
        return 0

    entry = engine.cache.lookup_exact(args.key)
    if entry is None:
        return 1
    _emit(entry.response)
    return 0


def _cmd_store(engine: DecisionEngine, args: argparse.Namespace) -> int:
    response = _parse_response(args.response)
    if args.type == "semantic":
        if not args.query:
            print("Error: query required for semantic store", file=sys.stderr)
            return 2
        engine.cache.store_semantic(args.query, args.key, response)
    else:
        engine.cache.store_exact(args.key, response)
    _emit({"success": True, "key": args.key})
    return 0


def _cmd_warmup(engine: DecisionEngine, args: argparse.Namespace) -> int:
    pairs = _load_warmup_pairs(Path(args.file))
    count = engine.cache.warmup(pairs)
    _emit({"success": True, "count": count})
    return 0


def _cmd_route(engine: DecisionEngine, args: argparse.Namespace) -> int:
    decision = engine.routing.decide_from_session(token_budget=args.budget)
    if decision is None:
        _emit({"decision": "pending_analysis"})
        return 0
    _emit(
        {
            "band": decision.band.value,
            "decision": decision.decision.value,
            "reason": decision.reason,
            "complexity_score": decision.complexity_score,
            "recommended_pattern": decision.recommended_pattern,
            "estimated_tokens": decision.estimated_tokens,
            "approval_rate": decision.approval_rate,
        }
    )
    return 0


def _cmd_feedback(engine: DecisionEngine, args: argparse.Namespace) -> int:
    engine.routing.record_feedback(args.band, args.feedback, args.reason)
    _emit(
        {
            "band": args.band,
            "feedback": args.feedback,
            "approval_rate": engine.routing.approval_rate(args.band),
        }
    )
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="decision-cache",
        description="Tiered response cache and complexity-band routing policy",
    )
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("stats", help="Show cache statistics").set_defaults(func=_cmd_stats)

    cleanup = sub.add_parser("cleanup", help="Remove expired entries, or everything")
    cleanup.add_argument("mode", nargs="?", default=CleanupMode.EXPIRED.value, choices=[m.value for m in CleanupMode])
    cleanup.set_defaults(func=_cmd_cleanup)

    lookup = sub.add_parser("lookup", help="Look up a cached entry (exit 1 on miss)")
    lookup.add_argument("type", choices=CACHE_TYPES)
    lookup.add_argument("key")
    lookup.add_argument("query", nargs="?")
    lookup.set_defaults(func=_cmd_lookup)

    store = sub.add_parser("store", help="Store a cache entry")
    store.add_argument("type", choices=CACHE_TYPES)
    store.add_argument("key")
    store.add_argument("response", help="JSON value, or plain text")
    store.add_argument("query", nargs="?")
    store.set_defaults(func=_cmd_store)

    warmup = sub.add_parser("warmup", help="Pre-load the exact cache from a JSON file")
    warmup.add_argument("file")
    warmup.set_defaults(func=_cmd_warmup)

    route = sub.add_parser("route", help="Decide routing for the current session's task analysis")
    route.add_argument("--budget", type=int, default=0, help="Tokens available (0 = no budget)")
    route.set_defaults(func=_cmd_route)

    feedback = sub.add_parser("feedback", help="Record a human approval or rejection")
    feedback.add_argument("band", choices=[b.value for b in Band])
    feedback.add_argument("feedback", choices=[f.value for f in Feedback])
    feedback.add_argument("--reason", default="")
    feedback.set_defaults(func=_cmd_feedback)

    sub.add_parser("serve", help="Run the HTTP API with uvicorn")

    return parser


def main(argv: list[str] | None = None, engine: DecisionEngine | None = None) -> int:
    """Run the CLI.

    Args:
        argv: Arguments without the program name. Defaults to sys.argv[1:].
        engine: Engine to use instead of DecisionEngine.create().

    Returns:
        Process exit status
    """
    args = build_parser().parse_args(argv)
    setup_logging(args.debug or settings.debug)

    if args.command == "serve":
        from decision_cache.api.app import run

        run()
        return 0

    engine = engine or DecisionEngine.create()
    try:
        return args.func(engine, args)
    except (DecisionCacheError, OSError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2
    finally:
        engine.close()


if __name__ == "__main__":
    sys.exit(main())
