"""
Command-line entrypoint for the soulprint service.

Usage:
    python -m soulprint.run --config configs/config.yaml analyze --user alice --text "..."
    python -m soulprint.run ingest transcript.jsonl
    python -m soulprint.run compatibility alice bob
    python -m soulprint.run predict alice bob --progression progression.json
    python -m soulprint.run code alice
    python -m soulprint.run rank alice --limit 5
    python -m soulprint.run evaluate --output report.json

Transcripts are JSON Lines files with one message per line:
    {"user_id": "alice", "text": "...", "context": {"response_latency_ms": 4000}}

All results are printed to stdout as JSON.
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Dict, Any, List, Optional

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


def setup_logging(log_level: str) -> None:
    """Configure logging level from config."""
    level = getattr(logging, log_level.upper(), logging.INFO)
    logging.getLogger().setLevel(level)


def load_runtime_config(config_path: str, store_path: Optional[str] = None) -> Dict[str, Any]:
    """
    Load and validate configuration, falling back to defaults if the file is missing.

    Args:
        config_path: Path to the configuration YAML file
        store_path: Optional override for the JSON store directory

    Returns:
        Configuration dictionary
    """
    from .configs import load_config, validate_config

    try:
        config = load_config(config_path)
    except FileNotFoundError:
        logger.warning(f"Config file {config_path} not found, using defaults")
        config = {}

    for issue in validate_config(config):
        logger.warning(f"Config issue: {issue}")

    if store_path:
        config.setdefault("persistence", {})
        config["persistence"]["backend"] = "json"
        config["persistence"]["path"] = store_path

    setup_logging(config.get("global", {}).get("log_level", "INFO"))
    return config


def read_transcript(filepath: str) -> List[Dict[str, Any]]:
    """Read a JSON Lines transcript, skipping blank lines."""
    messages = []
    with open(filepath, "r", encoding="utf-8") as f:
        for line_number, line in enumerate(f, start=1):
            line = line.strip()
            if not line:
                continue
            message = json.loads(line)
            if "user_id" not in message:
                raise ValueError(f"{filepath}:{line_number}: missing user_id")
            messages.append(message)
    return messages


def run_command(args: argparse.Namespace, config: Dict[str, Any]) -> Dict[str, Any]:
    """
    Execute one CLI command.

    Args:
        args: Parsed command-line arguments
        config: Configuration dictionary

    Returns:
        JSON-serializable result
    """
    from .service import create_service_from_config
    from .encoding import describe
    from .evaluation import create_evaluation_report
    from .prediction import ProgressionData

    service = create_service_from_config(config)

    if args.command == "analyze":
        context = {}
        if args.latency_ms is not None:
            context["response_latency_ms"] = args.latency_ms
        if args.interaction_type:
            context["interaction_type"] = args.interaction_type
        return service.analyze_message(args.user, args.text, context).to_dict()

    if args.command == "ingest":
        messages = read_transcript(args.transcript)
        users = set()
        for message in messages:
            service.analyze_message(message["user_id"], message.get("text"), message.get("context"))
            users.add(message["user_id"])
        logger.info(f"Ingested {len(messages)} messages for {len(users)} users")
        return {"messages": len(messages), "users": sorted(users)}

    if args.command == "compatibility":
        return service.calculate_compatibility(args.user_a, args.user_b).to_dict()

    if args.command == "predict":
        progression = None
        if args.progression:
            with open(args.progression, "r", encoding="utf-8") as f:
                progression = ProgressionData.from_dict(json.load(f))
        return service.generate_success_prediction(args.user_a, args.user_b, progression).to_dict()

    if args.command == "code":
        code = service.get_hex_code(args.user)
        if code is None:
            return {"user_id": args.user, "code": None}
        return {"user_id": args.user, **describe(code)}

    if args.command == "rank":
        ranked = service.rank_candidates(args.user, min_triage=args.min_triage, limit=args.limit)
        return {
            "user_id": args.user,
            "candidates": [
                {**{k: v for k, v in r.items() if k != "compatibility"},
                 "overall": r["compatibility"].overall,
                 "confidence": r["compatibility"].confidence}
                for r in ranked
            ]
        }

    if args.command == "evaluate":
        profiles = [service.get_profile(key) for key in service.store.keys()]
        profiles = [p for p in profiles if p is not None]
        vectors = [service.encoder.encode(p) for p in profiles]
        report = create_evaluation_report(service.engine, vectors, profiles)
        logger.info("\n" + report.summary())
        if args.output:
            report.save(args.output)
        return report.to_dict()

    raise ValueError(f"Unknown command: {args.command}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Conversational personality profiling and compatibility scoring"
    )
    parser.add_argument(
        "--config",
        type=str,
        default="configs/config.yaml",
        help="Path to configuration file"
    )
    parser.add_argument(
        "--store-path",
        type=str,
        default=None,
        help="Directory of the JSON profile store (overrides config)"
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    analyze = subparsers.add_parser("analyze", help="Fold one message into a profile")
    analyze.add_argument("--user", required=True, help="User id")
    analyze.add_argument("--text", required=True, help="Message text")
    analyze.add_argument("--latency-ms", type=float, default=None, help="Reply latency in ms")
    analyze.add_argument("--interaction-type", default=None, help="e.g. casual, support, conflict")

    ingest = subparsers.add_parser("ingest", help="Analyze a JSON Lines transcript")
    ingest.add_argument("transcript", help="Path to transcript file")

    compatibility = subparsers.add_parser("compatibility", help="Score two users")
    compatibility.add_argument("user_a")
    compatibility.add_argument("user_b")

    predict = subparsers.add_parser("predict", help="Predict relationship success")
    predict.add_argument("user_a")
    predict.add_argument("user_b")
    predict.add_argument("--progression", default=None, help="JSON file with progression data")

    code = subparsers.add_parser("code", help="Show a user's personality code")
    code.add_argument("user")

    rank = subparsers.add_parser("rank", help="Rank stored users as candidates")
    rank.add_argument("user")
    rank.add_argument("--min-triage", type=float, default=0.0, help="Minimum code similarity")
    rank.add_argument("--limit", type=int, default=None, help="Maximum number of results")

    evaluate = subparsers.add_parser("evaluate", help="Cohort diagnostics over stored profiles")
    evaluate.add_argument("--output", default=None, help="Write the report to this JSON file")

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the CLI."""
    from .profiles import ProfileStoreError

    args = build_parser().parse_args(argv)

    try:
        config = load_runtime_config(args.config, args.store_path)
        result = run_command(args, config)
    except ProfileStoreError as e:
        logger.error(f"Profile storage failed: {e}")
        return 2
    except Exception as e:
        logger.exception(f"Command {args.command} failed with error: {e}")
        return 1

    print(json.dumps(result, indent=2, default=str))
    return 0


if __name__ == "__main__":
    sys.exit(main())
