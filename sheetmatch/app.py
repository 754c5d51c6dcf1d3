import argparse
import json
from dataclasses import replace
from pathlib import Path
from typing import List

from . import __version__
from .cache import MatchCache
from .config import ConfigError, SCORERS, load_settings
from .env import load_env
from .logger import get_logger
from .matcher import Reconciler, find_best_match, rank_candidates
from .schema import validate_match_request_strict
from .similarity import InputTooLongError, name_similarity, similarity


def read_entries(path: Path) -> List[str]:
    """Read one entry per line (skipping blanks and # comments), or a JSON array for .json files."""
    if not path.exists():
        raise SystemExit(f"Input file not found: {path}")
    with path.open("r", encoding="utf-8") as f:
        if path.suffix.lower() == ".json":
            data = json.load(f)
            if not isinstance(data, list):
                raise SystemExit(f"Expected a JSON array in {path}")
            return data
        entries = []
        for line in f:
            line = line.strip()
            if not line or line.startswith("#"):
                continue
            entries.append(line)
        return entries


def _settings_with_overrides(args: argparse.Namespace):
    settings = load_settings()
    overrides = {}
    if getattr(args, "threshold", None) is not None:
        overrides["threshold"] = args.threshold
    if getattr(args, "scorer", None):
        overrides["scorer"] = args.scorer
    if getattr(args, "db", None):
        overrides["db_path"] = Path(args.db)
    if "threshold" in overrides and not 0 <= overrides["threshold"] <= 100:
        raise SystemExit("--threshold must be between 0 and 100")
    if overrides:
        settings = replace(settings, **overrides)
    return settings


def cmd_score(args: argparse.Namespace) -> None:
    try:
        print(similarity(args.first, args.second))
    except InputTooLongError as e:
        raise SystemExit(str(e))


def cmd_name_score(args: argparse.Namespace) -> None:
    try:
        print(name_similarity(args.first, args.second))
    except InputTooLongError as e:
        raise SystemExit(str(e))


def cmd_match(args: argparse.Namespace) -> None:
    if args.top < 0:
        raise SystemExit("--top must be 0 or greater")
    settings = _settings_with_overrides(args)
    candidates = read_entries(Path(args.candidates))
    request = {
        "title": args.title,
        "candidates": candidates,
        "threshold": settings.threshold,
        "scorer": settings.scorer,
    }
    errors, warnings = validate_match_request_strict(request)
    if errors:
        print("Invalid:")
        for e in errors:
            print(f" - {e}")
        raise SystemExit(2)
    for w in warnings:
        print(f"[warn] {w}")

    result = find_best_match(
        args.title,
        candidates,
        threshold=settings.threshold,
        scorer=settings.scorer,
        max_input_length=settings.max_input_length,
    )
    ranked = rank_candidates(
        args.title,
        candidates,
        scorer=settings.scorer,
        limit=args.top,
        max_input_length=settings.max_input_length,
    )

    if args.json:
        payload = {
            **result.to_dict(),
            "ranking": [{"candidate": r.candidate, "score": r.score} for r in ranked],
        }
        print(json.dumps(payload, indent=2, ensure_ascii=False))
        return

    status = "accepted" if result.accepted else "rejected"
    print(f"Best: {result.candidate} ({result.score}, {result.match_type}, {status})")
    print(f"Top {len(ranked)} candidates:")
    for r in ranked:
        print(f" {r.score:>3}  {r.candidate}")


def cmd_reconcile(args: argparse.Namespace) -> None:
    settings = _settings_with_overrides(args)
    titles = read_entries(Path(args.titles))
    candidates = read_entries(Path(args.candidates))
    if any(not isinstance(c, str) for c in candidates + titles):
        raise SystemExit("Titles and candidates must all be strings")

    logger = get_logger(level=settings.log_level, log_dir=settings.log_dir)
    cache = None if args.no_cache else MatchCache(settings.db_path, logger=logger)
    reconciler = Reconciler(settings=settings, cache=cache, logger=logger)

    logger.info(f"Reconciling {len(titles)} titles against {len(candidates)} candidates")
    summary = reconciler.reconcile_many(titles, candidates)
    logger.log_metrics_summary()

    output = json.dumps(summary, indent=2, ensure_ascii=False)
    if args.output:
        out_path = Path(args.output)
        out_path.parent.mkdir(parents=True, exist_ok=True)
        out_path.write_text(output, encoding="utf-8")
        print(f"Done. found={summary['found']} not-found={summary['not_found']} -> {out_path}")
    else:
        print(output)


def cmd_remember(args: argparse.Namespace) -> None:
    settings = _settings_with_overrides(args)
    status = MatchCache(settings.db_path).remember_manual(args.title, args.name)
    print(f"Status: {status}")


def cmd_cache_list(args: argparse.Namespace) -> None:
    settings = _settings_with_overrides(args)
    if not settings.db_path.exists():
        print(f"Cache not found: {settings.db_path}")
        return
    entries = MatchCache(settings.db_path).all()
    if not entries:
        print("No cached matches.")
        return
    print(f"Found {len(entries)} cached matches in {settings.db_path}:\n")
    for entry in entries:
        print(f"Title: {entry['title']}")
        print(f"  Match: {entry['matched_name']}")
        print(f"  Score: {entry['score']} ({entry['match_type']}{', manual' if entry['manual'] else ''})")
        print(f"  Updated: {entry['updated_at']}")
        print()


def cmd_cache_clear(args: argparse.Namespace) -> None:
    settings = _settings_with_overrides(args)
    if not settings.db_path.exists():
        print(f"Cache not found: {settings.db_path}")
        return
    cache = MatchCache(settings.db_path)
    if args.days is not None:
        before, after = cache.delete_stale(days=args.days)
        print(f"Removed {before - after} stale entries, {after} remaining")
    else:
        print(f"Removed {cache.clear()} entries")


def main(argv=None):
    # Load .env if present (SHEETMATCH_THRESHOLD, SHEETMATCH_DB_PATH, etc.)
    load_env()
    parser = argparse.ArgumentParser(prog="sheetmatch", description="Match video titles to sheet row names")
    parser.add_argument("--version", action="store_true", help="Show version")

    subparsers = parser.add_subparsers(dest="command")
    sc = subparsers.add_parser("score", help="Similarity score (0-100) between two strings")
    sc.add_argument("first")
    sc.add_argument("second")
    sc.set_defaults(func=cmd_score)

    nsc = subparsers.add_parser("name-score", help="Name similarity score (0-100) between two names")
    nsc.add_argument("first")
    nsc.add_argument("second")
    nsc.set_defaults(func=cmd_name_score)

    mt = subparsers.add_parser("match", help="Find the best candidate for a single title")
    mt.add_argument("--title", required=True, help="Video title to look up")
    mt.add_argument("--candidates", required=True, help="File with candidate names (one per line, or JSON array)")
    mt.add_argument("--threshold", type=int, help="Acceptance threshold 0-100 (or set SHEETMATCH_THRESHOLD)")
    mt.add_argument("--scorer", choices=SCORERS, help="Scoring function (or set SHEETMATCH_SCORER)")
    mt.add_argument("--top", type=int, default=5, help="Number of ranked candidates to show (default 5)")
    mt.add_argument("--json", action="store_true", help="Print JSON instead of text")
    mt.set_defaults(func=cmd_match)

    rc = subparsers.add_parser("reconcile", help="Match every title in a file against a candidate list")
    rc.add_argument("--titles", required=True, help="File with video titles")
    rc.add_argument("--candidates", required=True, help="File with candidate names")
    rc.add_argument("--threshold", type=int, help="Acceptance threshold 0-100")
    rc.add_argument("--scorer", choices=SCORERS, help="Scoring function")
    rc.add_argument("--db", help="Match cache path (or set SHEETMATCH_DB_PATH)")
    rc.add_argument("--no-cache", action="store_true", help="Do not read or write the match cache")
    rc.add_argument("--output", help="Write the JSON summary to this file")
    rc.set_defaults(func=cmd_reconcile)

    rm = subparsers.add_parser("remember", help="Store a manual title -> name match")
    rm.add_argument("--title", required=True)
    rm.add_argument("--name", required=True)
    rm.add_argument("--db", help="Match cache path")
    rm.set_defaults(func=cmd_remember)

    cl = subparsers.add_parser("cache-list", help="List cached matches")
    cl.add_argument("--db", help="Match cache path")
    cl.set_defaults(func=cmd_cache_list)

    cc = subparsers.add_parser("cache-clear", help="Clear the match cache")
    cc.add_argument("--db", help="Match cache path")
    cc.add_argument("--days", type=int, help="Only remove automatic entries older than N days")
    cc.set_defaults(func=cmd_cache_clear)

    args = parser.parse_args(argv)

    if args.version:
        print(__version__)
        return

    if hasattr(args, "func"):
        try:
            args.func(args)
        except ConfigError as e:
            raise SystemExit(f"Configuration error: {e}")
        return

    parser.print_help()


if __name__ == "__main__":
    main()
