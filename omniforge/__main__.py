"""
Command-line entry point.

    python -m omniforge "launch campaign for eco coffee brand" --modalities text,image
"""
import argparse
import asyncio
import json
import logging
import sys

from omniforge.config import config
from omniforge.orchestration import ProductionOrchestrator, ProductionValidationError
from omniforge.persistence import get_asset_repository


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="omniforge",
        description="Generate a multi-modal production from a single prompt.",
    )
    parser.add_argument("prompt", help="Creative prompt")
    parser.add_argument(
        "--modalities",
        default=None,
        help="Comma-separated subset of text,image,audio,video (default: auto-detect)",
    )
    parser.add_argument("--voice", default=None, help="Narration voice for audio")
    parser.add_argument("--json", action="store_true", help="Print the full run as JSON")
    return parser


def parse_modalities(value):
    if value is None:
        return None
    return [name for name in value.split(",") if name.strip()]


def print_summary(run):
    print("=" * 60)
    print(f"PRODUCTION {run.id}")
    print("=" * 60)
    print(f"Type: {run.production_type.value}")
    if run.blueprint:
        print(f"Title: {run.blueprint.title}")
        print(f"Tone: {run.blueprint.tone}")
        print(f"Keywords: {', '.join(run.blueprint.keywords)}")
    print("-" * 60)
    for task in run.tasks:
        line = f"  {task.modality.value:<6} {task.status.value.upper()}"
        if task.error:
            line += f" - {task.error}"
        print(line)
    if run.persistence_errors:
        print("-" * 60)
        for modality, error in run.persistence_errors.items():
            print(f"  {modality.value:<6} NOT SAVED - {error}")
    if run.missing_components:
        print("-" * 60)
        print(f"Incomplete {run.production_type.value}: missing {', '.join(run.missing_components)}")
    print("=" * 60)


async def run_production(args) -> int:
    orchestrator = ProductionOrchestrator(asset_repository=get_asset_repository())
    try:
        run = await orchestrator.start_production(
            args.prompt,
            modalities=parse_modalities(args.modalities),
            voice=args.voice,
        )
    except ProductionValidationError as e:
        print(f"Invalid request: {e}", file=sys.stderr)
        return 2
    finally:
        await orchestrator.close()

    if args.json:
        print(json.dumps(run.to_dict(), indent=2, ensure_ascii=False, default=str))
    else:
        print_summary(run)

    return 0 if run.succeeded() else 1


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if config.debug else logging.INFO,
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )
    config.log_status()

    return asyncio.run(run_production(args))


if __name__ == "__main__":
    sys.exit(main())
