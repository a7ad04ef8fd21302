#!/usr/bin/env python3
"""
mp3tag CLI

Fill in missing ID3 tags from Spotify or Melon.

Usage:
    python cli.py <command> [options]

Commands:
    scan <path>              Show tag status of MP3 files
    edit <file> [--title..]  Edit tags of one file by hand
    fetch <path>             Look up untagged files in a catalog and write tags
    rename <path>            Rename tagged files to "Artist - Title.mp3"
    config                   Store Spotify credentials
"""

import argparse
import sys
from pathlib import Path

from rich.console import Console
from rich.markup import escape
from rich.prompt import IntPrompt, Prompt
from rich.table import Table

# Add project root to path
PROJECT_ROOT = Path(__file__).parent
sys.path.insert(0, str(PROJECT_ROOT))

console = Console()


def cmd_scan(args, config):
    """Show tag status of MP3 files."""
    from utilities.scanner import scan_path

    files = scan_path(args.path)
    if not files:
        console.print(f"No MP3 files found in {args.path}")
        return

    table = Table()
    for column in ("File", "Title", "Artist", "Album", "Tags"):
        table.add_column(column)

    for f in files:
        tags = f.current_tags
        if tags:
            row = (tags.display_title, tags.display_artist, tags.display_album)
        else:
            row = ("-", "-", "-")
        table.add_row(escape(f.filename), *(escape(v) for v in row), "yes" if f.has_tags else "no")

    console.print(table)
    tagged = sum(1 for f in files if f.has_tags)
    console.print(f"\n{len(files)} files (tagged: {tagged}, untagged: {len(files) - tagged})")


def cmd_edit(args, config):
    """Merge manually entered fields over the file's tags."""
    from sources.base import Provenance, TrackInfo
    from utilities.scanner import load_single_file
    from utilities.tagger import merge_tags, write_tags

    audio = load_single_file(args.file)

    album_art = None
    if args.album_art:
        album_art = Path(args.album_art).read_bytes()

    manual = TrackInfo(
        source=Provenance.MANUAL,
        title=args.title,
        artist=args.artist,
        album=args.album,
        album_artist=args.album_artist,
        track_number=args.track,
        year=args.year,
        genre=args.genre,
        album_art=album_art
    )

    merged = merge_tags(audio.current_tags, manual)
    write_tags(audio.path, merged)
    console.print(f"Tags updated: {audio.path}")


def cmd_fetch(args, config):
    """Tag untagged files from a catalog."""
    from agents import FetchAgent
    from sources import create_source

    source_name = args.source or config.default_source
    if source_name == 'spotify' and not config.spotify_configured:
        console.print("Spotify is not configured. Run the 'config' command first.")
        return

    # Authentication happens here, before any file is processed
    source = create_source(source_name, config)

    chooser = None if args.auto else _prompt_choice
    agent = FetchAgent(config, source, chooser=chooser, rename=args.rename)

    def report(item, result, index):
        status = result.get("status")
        detail = result.get("track") or result.get("reason") or result.get("error", "")
        console.print(escape(f"  [{status}] {Path(result['path']).name} {detail}"))

    results = agent.run(args.path, callback=report)

    if results["total"] == 0:
        console.print("Every file already has tags.")
        return

    console.print(f"\n=== Fetch Results ===")
    console.print(f"Untagged files: {results['total']}")
    console.print(f"Tagged: {results['success']}")
    console.print(f"Skipped: {results['skipped']}")
    console.print(f"Failed: {results['failed']}")


def _prompt_choice(item, results):
    """Interactive chooser for FetchAgent; None skips the file."""
    console.print(escape(f"\n--- {item.filename} ---"))
    for i, track in enumerate(results, 1):
        console.print(escape(f"  {i}. {track.summary()}"))
    console.print("  0. Skip this file")

    choice = IntPrompt.ask(
        "  Select a track",
        choices=[str(i) for i in range(len(results) + 1)],
        default=1
    )
    return choice - 1 if choice > 0 else None


def cmd_rename(args, config):
    """Rename tagged files to their canonical name."""
    from agents import RenameAgent

    agent = RenameAgent(config, dry_run=args.dry_run)
    results = agent.run(args.path)

    for item in results["items"]:
        if item.get("new"):
            console.print(escape(f"  [{item['status']}] {item.get('old')} -> {item['new']}"))
        elif item.get("error"):
            console.print(escape(f"  [{item['status']}] {Path(item['path']).name}: {item['error']}"))

    console.print(f"\n=== Rename Results ===")
    console.print(f"Files: {results['total']}")
    console.print(f"Renamed: {results['success']}")
    console.print(f"Skipped: {results['skipped']}")
    console.print(f"Failed: {results['failed']}")
    if args.dry_run:
        console.print("(Dry run - no changes made)")


def cmd_config(args, config):
    """Prompt for Spotify credentials and save them."""
    console.print("Spotify API settings")
    console.print("(Create credentials at https://developer.spotify.com/dashboard)\n")

    client_id = Prompt.ask("Client ID", default=config.get('spotify.client_id') or "")
    client_secret = Prompt.ask("Client Secret", default=config.get('spotify.client_secret') or "")

    config.set('spotify.client_id', client_id)
    config.set('spotify.client_secret', client_secret)
    config.save()
    console.print(f"\nSaved to {config.config_path}")


def build_parser():
    parser = argparse.ArgumentParser(
        prog='mp3tag',
        description='MP3 ID3 tag editor with Spotify and Melon lookup',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__
    )
    parser.add_argument('--config', help='Config file (default: ~/.config/mp3tag/config.yaml)')
    parser.add_argument('--log-level', help='Logging level (default from config, INFO)')

    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    # scan command
    scan_parser = subparsers.add_parser('scan', help='Show tag status of MP3 files')
    scan_parser.add_argument('path', help='Directory or MP3 file')
    scan_parser.set_defaults(func=cmd_scan)

    # edit command
    edit_parser = subparsers.add_parser('edit', help='Edit tags of one file')
    edit_parser.add_argument('file', help='MP3 file')
    edit_parser.add_argument('--title')
    edit_parser.add_argument('--artist')
    edit_parser.add_argument('--album')
    edit_parser.add_argument('--album-artist')
    edit_parser.add_argument('--track', type=int)
    edit_parser.add_argument('--year', type=int)
    edit_parser.add_argument('--genre')
    edit_parser.add_argument('--album-art', help='Image file to embed')
    edit_parser.set_defaults(func=cmd_edit)

    # fetch command
    fetch_parser = subparsers.add_parser('fetch', help='Fetch tags for untagged files')
    fetch_parser.add_argument('path', help='Directory or MP3 file')
    fetch_parser.add_argument('--source', choices=['spotify', 'melon'], help='Catalog to search')
    fetch_parser.add_argument('--auto', action='store_true', help='Take the first result without asking')
    fetch_parser.add_argument('--rename', action='store_true', help='Rename files after tagging')
    fetch_parser.set_defaults(func=cmd_fetch)

    # rename command
    rename_parser = subparsers.add_parser('rename', help='Rename files to "Artist - Title.mp3"')
    rename_parser.add_argument('path', help='Directory or MP3 file')
    rename_parser.add_argument('--dry-run', action='store_true', help='Preview changes without applying')
    rename_parser.set_defaults(func=cmd_rename)

    # config command
    config_parser = subparsers.add_parser('config', help='Store Spotify credentials')
    config_parser.set_defaults(func=cmd_config)

    return parser


def main(argv=None):
    from orchestrator.config import ConfigManager
    from orchestrator.logging_setup import setup_logging

    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 1

    try:
        config = ConfigManager(args.config)
        setup_logging(args.log_level or config.log_level, config.log_file)
        args.func(args, config)
        return 0
    except KeyboardInterrupt:
        console.print("\nOperation cancelled.")
        return 130
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == '__main__':
    sys.exit(main())
