"""Command-line interface for administering processed videos."""

import argparse
import asyncio

from src.utils.logging import get_logger

from .config import get_config
from .errors import ChatbotError
from .pipeline import VideoChatPipeline
from .youtube_service import extract_video_id

logger = get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser with one subcommand per operation."""
    parser = argparse.ArgumentParser(
        description="YouTube Chatbot - Process videos and ask questions about them",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Process a video by URL or id
  python -m src.video_pipeline.cli process https://www.youtube.com/watch?v=dQw4w9WgXcQ

  # Ask a question about a processed video
  python -m src.video_pipeline.cli ask dQw4w9WgXcQ "What is the song about?"

  # Check, list and delete
  python -m src.video_pipeline.cli status dQw4w9WgXcQ
  python -m src.video_pipeline.cli stats
  python -m src.video_pipeline.cli delete dQw4w9WgXcQ
        """,
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    process = subparsers.add_parser("process", help="Fetch, chunk and index a video")
    process.add_argument("video", help="YouTube URL or 11-character video id")

    ask = subparsers.add_parser("ask", help="Ask a question about a processed video")
    ask.add_argument("video", help="YouTube URL or video id")
    ask.add_argument("question", help="Question to answer from the transcript")

    status = subparsers.add_parser("status", help="Check whether a video is processed")
    status.add_argument("video", help="YouTube URL or video id")

    delete = subparsers.add_parser("delete", help="Delete a video's stored vectors")
    delete.add_argument("video", help="YouTube URL or video id")

    subparsers.add_parser("stats", help="Show index statistics")

    return parser


async def run_command(args: argparse.Namespace, pipeline: VideoChatPipeline) -> int:
    """Execute one parsed subcommand.

    Returns:
        Process exit code.
    """
    if args.command == "stats":
        stats = await pipeline.get_storage_stats()
        print("\n" + "=" * 60)
        print("Index Statistics")
        print("=" * 60)
        print(f"Processed videos: {stats.processed_videos}")
        print(f"Total vectors: {stats.total_vectors}")
        print(f"Index dimension: {stats.index_dimension}")
        for video_id in stats.video_ids:
            print(f"  - {video_id}")
        print("=" * 60 + "\n")
        return 0

    video_id = extract_video_id(args.video)
    if not video_id:
        print(f"\n❌ Invalid YouTube URL or video ID: {args.video}")
        return 2

    if args.command == "process":
        result = await pipeline.process_video(video_id)
        print(f"\n✅ Processed {result.video_info.title or video_id}")
        print(f"Chunks stored: {result.chunks_count}")
    elif args.command == "ask":
        answer = await pipeline.answer_question(video_id, args.question)
        print(f"\n{answer.response}")
        print(f"\n(sources: {answer.sources})")
    elif args.command == "status":
        processed = await pipeline.is_processed(video_id)
        print(f"{video_id}: {'processed' if processed else 'not processed'}")
    elif args.command == "delete":
        await pipeline.delete_video(video_id)
        print(f"✅ Deleted data for {video_id}")

    return 0


async def main(argv: list[str] | None = None) -> int:
    """CLI entry point for the YouTube chatbot.

    Parses command-line arguments, builds the pipeline and runs the chosen
    subcommand, printing results to the user.
    """
    args = build_parser().parse_args(argv)
    config = get_config()

    logger.info("cli_started", command=args.command, index_name=config.pinecone_index)

    pipeline = VideoChatPipeline(config)

    try:
        exit_code = await run_command(args, pipeline)
    except ChatbotError as e:
        logger.warning("cli_command_failed", command=args.command, error=e.message)
        print(f"\n❌ {e.message}")
        return 1
    except Exception as e:
        logger.exception("cli_command_failed", command=args.command, error_type=type(e).__name__)
        print(f"\n❌ Command failed: {str(e)}")
        return 1

    logger.info("cli_completed", command=args.command, exit_code=exit_code)
    return exit_code


def run() -> None:
    """Console script entry point."""
    raise SystemExit(asyncio.run(main()))


if __name__ == "__main__":
    run()
