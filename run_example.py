"""
Working example: one production run with live progress.
Run this script to exercise the full pipeline against the configured API.
"""
import asyncio
import logging
import sys
from pathlib import Path

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
)

sys.path.insert(0, str(Path(__file__).parent))

from omniforge.orchestration import (
    ProductionOrchestrator,
    InMemoryProgressStore,
    ProgressEvent,
)
from omniforge.persistence import InMemoryAssetRepository


def print_progress(run_id: str, event: ProgressEvent):
    """Draw a one-line progress bar."""
    bar_length = 30
    filled = int(bar_length * event.percent / 100)
    bar = "=" * filled + "-" * (bar_length - filled)
    print(f"\r[{bar}] {event.percent:3d}% | {event.stage}: {event.message[:50]:<50}", end="", flush=True)
    if event.percent >= 100:
        print()


async def main():
    """Run example production."""
    print("=" * 60)
    print("OMNIFORGE PRODUCTION - TEST")
    print("=" * 60)

    prompt = "launch campaign for eco coffee brand"
    repository = InMemoryAssetRepository()
    store = InMemoryProgressStore()
    store.subscribe(print_progress)
    orchestrator = ProductionOrchestrator(
        progress_store=store,
        asset_repository=repository,
    )

    print(f"\nPrompt: {prompt}")
    print("Modalities: text, image, audio, video")
    print("-" * 60)

    try:
        run = await orchestrator.start_production(
            prompt,
            modalities=["text", "image", "audio", "video"],
        )
    finally:
        await orchestrator.close()

    print("-" * 60)
    print(f"\nTitle: {run.blueprint.title}")
    print(f"Type: {run.production_type.value} (meets template: {run.meets_template})")
    for task in run.tasks:
        print(f"  {task.modality.display_name}: {task.status.value.upper()}")
        if task.error:
            print(f"    Error: {task.error}")

    assets = repository.list_run_assets(run.id)
    print(f"\nStored assets: {len(assets)}")
    for asset in assets:
        print(f"  {asset.id} [{asset.type}] {asset.title[:60]}")

    return run


if __name__ == "__main__":
    asyncio.run(main())
