#!/usr/bin/env python3
"""
YouTube Viral Analyzer - Command Line
=====================================
Offline transcript analysis with the same service the web API uses,
plus a shortcut to start the web server.

Usage:
    python main.py --transcript talk.txt --channel techtony
    python main.py --transcript talk.txt --channel techtony --output metadata.json
    python main.py --list-channels
    python main.py --serve
"""

import argparse
import json
import sys
from pathlib import Path

# Add project directory to path
PROJECT_DIR = Path(__file__).parent
sys.path.insert(0, str(PROJECT_DIR))

import config
from channels import get_channel, list_channels
from errors import AppError
from utils import setup_logger

# Setup main logger
logger = setup_logger("main", config.LOG_FILE, config.LOG_LEVEL)


# =============================================================================
# COMMANDS
# =============================================================================

def analyze_file(
    transcript_path: Path,
    channel_id: str,
    visual_context: str = None,
    video_duration: str = None,
    output_path: Path = None
) -> int:
    """Analyze one transcript file and print (or save) the metadata JSON."""
    from api.dependencies import get_metadata_service

    channel = get_channel(channel_id)
    if channel is None:
        logger.error(f"Unknown channel: {channel_id}")
        return 1

    if not transcript_path.exists():
        logger.error(f"Transcript not found: {transcript_path}")
        return 1

    transcript = transcript_path.read_text(encoding="utf-8").strip()
    if not transcript:
        logger.error("Transcript file is empty")
        return 1
    if len(transcript) > config.MAX_TRANSCRIPT_LENGTH:
        logger.error(f"Transcript exceeds {config.MAX_TRANSCRIPT_LENGTH:,} character limit")
        return 1

    try:
        service = get_metadata_service()
        data = service.analyze_transcript(transcript, channel, visual_context, video_duration)
    except AppError as e:
        logger.error(e.message)
        return 1

    result = json.dumps(data, indent=2, ensure_ascii=False)
    if output_path:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(result, encoding="utf-8")
        logger.success(f"Metadata saved to {output_path}")
    else:
        print(result)

    return 0


def print_channels() -> int:
    for channel in list_channels():
        print(f"  {channel['id']:<12} {channel['name']} ({channel['handle']})")
    return 0


def serve() -> int:
    import uvicorn

    if not config.APP_PASSWORD:
        logger.warning("APP_PASSWORD is not set - nobody will be able to log in")

    uvicorn.run(
        "api.main:app",
        host=config.SERVER_HOST,
        port=config.SERVER_PORT,
        reload=config.DEBUG_MODE,
        reload_dirs=[str(PROJECT_DIR)]
    )
    return 0


# =============================================================================
# CLI
# =============================================================================

def main():
    parser = argparse.ArgumentParser(
        description='YouTube Viral Analyzer',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py --transcript talk.txt --channel techtony
  python main.py --transcript talk.txt --channel huntermason --duration 14:20
  python main.py --list-channels
  python main.py --serve
        """
    )

    parser.add_argument(
        '--transcript', '-t',
        type=Path,
        help='Transcript text file to analyze'
    )

    parser.add_argument(
        '--channel', '-c',
        help='Channel id (see --list-channels)'
    )

    parser.add_argument(
        '--visual-context',
        default=None,
        help='Optional description of what is shown on screen'
    )

    parser.add_argument(
        '--duration',
        default=None,
        help='Optional video duration, e.g. 12:34'
    )

    parser.add_argument(
        '--output', '-o',
        type=Path,
        default=None,
        help='Write the metadata JSON here instead of stdout'
    )

    parser.add_argument(
        '--list-channels',
        action='store_true',
        help='List the supported channels'
    )

    parser.add_argument(
        '--serve',
        action='store_true',
        help=f'Start the web server on {config.SERVER_HOST}:{config.SERVER_PORT}'
    )

    args = parser.parse_args()

    if args.list_channels:
        return print_channels()

    if args.serve:
        return serve()

    if not args.transcript or not args.channel:
        parser.error("--transcript and --channel are required for analysis")

    return analyze_file(
        args.transcript,
        args.channel,
        visual_context=args.visual_context,
        video_duration=args.duration,
        output_path=args.output
    )


if __name__ == "__main__":
    sys.exit(main())
