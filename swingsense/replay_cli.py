from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from .config import load_config
from .json_utils import events_to_jsonl, safe_json_dumps
from .processing import SwingAnalyzer
from .recording import read_samples_csv

LOGGER = logging.getLogger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Replay a recorded IMU session through the swing analyzer"
    )
    parser.add_argument("input", type=Path, help="Recorded samples (.csv)")
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Optional YAML config (default: built-in defaults)",
    )
    parser.add_argument(
        "--adaptive",
        action="store_true",
        help="Force the adaptive power-ratio threshold on",
    )
    parser.add_argument(
        "--output",
        type=Path,
        default=None,
        help="Write emitted events as JSON lines to this path (default: stdout)",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    try:
        app_config = load_config(args.config)
    except (OSError, ValueError) as exc:
        print(f"Error: invalid config: {exc}", file=sys.stderr)
        return 1
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else app_config.log_level,
        format="%(levelname)s %(name)s: %(message)s",
    )
    if not args.input.exists():
        print(f"Error: input file not found: {args.input}", file=sys.stderr)
        return 1

    if args.adaptive:
        app_config.analyzer.use_adaptive_threshold = True
    analyzer = SwingAnalyzer.from_app_config(app_config)

    try:
        events = list(analyzer.iter_events(read_samples_csv(args.input)))
    except ValueError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    text = events_to_jsonl(events)
    if args.output is not None:
        args.output.parent.mkdir(parents=True, exist_ok=True)
        args.output.write_text(text, encoding="utf-8")
        print(f"wrote {len(events)} events: {args.output}")
    else:
        sys.stdout.write(text)
    stats = analyzer.stats()
    LOGGER.info(
        "Replayed %d samples: %d swings, %d rejected, %d duplicates",
        stats["total_ingested"],
        stats["hit_count"],
        stats["total_rejected"],
        stats["total_suppressed"],
    )
    LOGGER.debug("Analyzer stats: %s", safe_json_dumps(stats))
    analyzer.dispose()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
