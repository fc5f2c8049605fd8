"""Script to clear stored video namespaces and optionally reprocess them.

This script:
1. Lists every processed video in the Pinecone index
2. Deletes each video's namespace
3. Optionally reprocesses the same videos with the current chunking settings

Usage:
    uv run python -m scripts.clear_and_reprocess [--reprocess]
"""

import argparse
import asyncio

from dotenv import load_dotenv

from src.video_pipeline.config import get_config
from src.video_pipeline.pipeline import VideoChatPipeline

load_dotenv()


async def clear_and_reprocess(reprocess: bool) -> None:
    """Delete all video namespaces, then reprocess them if requested."""
    pipeline = VideoChatPipeline(get_config())

    stats = await pipeline.get_storage_stats()
    video_ids = stats.video_ids

    print("Current state:")
    print(f"  Videos: {stats.processed_videos}")
    print(f"  Vectors: {stats.total_vectors}")

    if not video_ids:
        print("\nNothing to clear")
        return

    print("\nThis will:")
    print(f"  1. DELETE the namespaces of {len(video_ids)} videos")
    if reprocess:
        print("  2. REPROCESS every deleted video")

    confirm = input("\nAre you sure? Type 'yes' to continue: ")

    if confirm.lower() != "yes":
        print("Aborted")
        return

    print("\nDeleting video namespaces...")
    for video_id in video_ids:
        await pipeline.delete_video(video_id)
        print(f"  deleted {video_id}")

    if not reprocess:
        print("\nDone! Reprocess a video with:")
        print("  uv run python -m src.video_pipeline.cli process <video>")
        return

    print("\nReprocessing videos...")
    for video_id in video_ids:
        try:
            result = await pipeline.process_video(video_id)
        except Exception as e:
            print(f"  ❌ {video_id}: {e}")
            continue
        print(f"  ✅ {video_id}: {result.chunks_count} chunks")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--reprocess", action="store_true", help="Reprocess videos after deleting")
    args = parser.parse_args()
    asyncio.run(clear_and_reprocess(args.reprocess))
