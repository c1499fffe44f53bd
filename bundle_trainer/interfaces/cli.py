"""
interfaces/cli.py
──────────────────────────────────────────────────────────────────────────────
Command-line interface for bundle training.

Usage:
  # Create every classifier and (over)write the cache file
  python -m bundle_trainer.interfaces.cli

  # Reuse the cache file when it exists
  python -m bundle_trainer.interfaces.cli --cached

  # List the combinations that would be trained; no API calls
  python -m bundle_trainer.interfaces.cli --dry-run

  # Two jobs in flight, stop at the first failed classifier
  python -m bundle_trainer.interfaces.cli --concurrency 2 --policy abort

  # Via installed entry-point (pyproject.toml [project.scripts])
  bundle-trainer --cached --json

Exit codes:
  0 — success
  1 — fatal error (auth, service, archives, failed job under abort policy)
      or interrupted with Ctrl-C
  2 — argument error
"""
from __future__ import annotations

import argparse
import dataclasses
import json
import logging
import sys

from bundle_trainer.config.settings import get_settings
from bundle_trainer.domain.models import ResultSetAdapter
from bundle_trainer.services.container import build_gateway

logger = logging.getLogger(__name__)


# ── Argument parser ────────────────────────────────────────────────────────

def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="bundle-trainer",
        description="Train one classifier per combination of sample archives.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    p.add_argument(
        "--cached",
        action="store_true",
        help="Return the cached classifiers if the cache file exists.",
    )
    p.add_argument(
        "--dry-run",
        action="store_true",
        dest="dry_run",
        help="Only list the combinations that would be trained.",
    )
    p.add_argument(
        "--concurrency", "-c",
        type=int,
        default=None,
        help="Jobs in flight at once. (default: CONCURRENCY setting)",
    )
    p.add_argument(
        "--policy", "-p",
        choices=["record", "abort"],
        default=None,
        help="What to do with a failed job. (default: FAILURE_POLICY setting)",
    )
    p.add_argument(
        "--json",
        action="store_true",
        dest="json_output",
        help="Print the resulting classifiers as JSON.",
    )
    p.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable debug logging.",
    )
    return p


# ── Main logic ─────────────────────────────────────────────────────────────

def run(args: argparse.Namespace) -> int:
    """Execute the requested action.

    Returns:
        Exit code (0 = success, 1 = error, 2 = bad arguments).
    """
    if args.concurrency is not None and args.concurrency < 1:
        print("ERROR: --concurrency must be >= 1", file=sys.stderr)
        return 2

    overrides = {}
    if args.concurrency is not None:
        overrides["concurrency"] = args.concurrency
    if args.policy is not None:
        overrides["failure_policy"] = args.policy
    settings = dataclasses.replace(get_settings(), **overrides)

    try:
        gateway = build_gateway(settings)
    except Exception as exc:
        logger.exception("Failed to initialise bundle trainer")
        print(f"ERROR: Initialisation failed: {exc}", file=sys.stderr)
        return 1

    try:
        if args.dry_run:
            combinations = gateway.list_combinations()
            for combination in combinations:
                print(combination.name)
            logger.info("%d classifiers would be created", len(combinations))
            return 0

        if args.cached:
            results = gateway.get_or_create()
            logger.info(
                "%d classifiers available, details in %s",
                len(results),
                gateway.store.location,
            )
        else:
            logger.info("creating classifiers")
            results = gateway.create_and_persist()
            logger.info(
                "%d classifiers created, details written to %s",
                len(results),
                gateway.store.location,
            )
    except KeyboardInterrupt:
        gateway.orchestrator.stop()
        logger.warning("Interrupted, cache file %s left unchanged", gateway.store.location)
        print("ERROR: Interrupted", file=sys.stderr)
        return 1
    except Exception as exc:
        logger.exception("Classifier creation failed")
        print(f"ERROR: {exc}", file=sys.stderr)
        return 1

    if args.json_output:
        payload = ResultSetAdapter.dump_python(results, mode="json", exclude_none=True)
        print(json.dumps(payload, indent=2, ensure_ascii=False))
    return 0


def main() -> None:
    """Entry point for the bundle-trainer console script."""
    parser = _build_parser()
    args = parser.parse_args()

    log_level = logging.DEBUG if args.verbose else logging.INFO
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s  %(levelname)-8s  %(name)s  %(message)s",
    )

    sys.exit(run(args))


if __name__ == "__main__":
    main()
