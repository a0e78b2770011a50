"""Main entry point for the page builder CLI."""
from __future__ import annotations

import asyncio
import json
import logging
import sys
from pathlib import Path

from pydantic import ValidationError

from pagebuilder import __version__
from pagebuilder.config import settings
from pagebuilder.kernel.coordinator import RenderCoordinator
from pagebuilder.kernel.files import FileReadError
from pagebuilder.kernel.types import RenderOptions
from pagebuilder.kernel.validation import validate_event
from pagebuilder_cli.models import EventScript, ScriptEvent

logger = logging.getLogger("pagebuilder_cli")


def print_help():
    """Print help message."""
    print(f"""
A4 Page Builder v{__version__}

Usage:
  pagebuilder [options] <command> SCRIPT.json

Commands:
  render SCRIPT     Replay an event script and export the page as HTML
  check SCRIPT      Validate an event script without rendering

Options:
  -o, --output FILE Output file for render (default: {settings.EXPORT_FILENAME})
  --width N         Container width for the preview scale
  --editor          Include the editor panel in the export
  -h, --help        Show this help
  -v, --version     Show version

Environment:
  PAGEBUILDER_LOG_LEVEL          Logging level (default: WARNING)
  PAGEBUILDER_PRINT_SETTLE_MS    Delay before print capture (default: 200)
  PAGEBUILDER_DISCARD_STALE_READS  Drop uploads overtaken by newer ones

Script format:
  {{"title": "...", "container_width": 1200,
    "events": [{{"type": "field.input", "payload": {{"field": "name", "value": "Asha"}}}},
               {{"type": "image.upload", "payload": {{"field": "univ_logo", "path": "logo.png"}}}}]}}
""")


def parse_args(args: list[str]) -> dict:
    """
    Parse command line arguments.

    Returns dict with:
        command: str | None (render, check)
        script: str | None
        output: str
        width: int | None
        editor: bool
        show_help: bool
        show_version: bool
    """
    result = {
        "command": None,
        "script": None,
        "output": settings.EXPORT_FILENAME,
        "width": None,
        "editor": False,
        "show_help": False,
        "show_version": False,
    }

    i = 0
    while i < len(args):
        arg = args[i]

        if arg in ("render", "check") and result["command"] is None:
            result["command"] = arg
        elif arg in ("--output", "-o"):
            if i + 1 < len(args):
                result["output"] = args[i + 1]
                i += 1
            else:
                print("Error: --output requires a file name")
                sys.exit(1)
        elif arg == "--width":
            if i + 1 < len(args) and args[i + 1].isdigit():
                result["width"] = int(args[i + 1])
                i += 1
            else:
                print("Error: --width requires a positive integer")
                sys.exit(1)
        elif arg == "--editor":
            result["editor"] = True
        elif arg in ("--help", "-h"):
            result["show_help"] = True
        elif arg in ("--version", "-v"):
            result["show_version"] = True
        elif arg.startswith("-"):
            print(f"Unknown option: {arg}")
            print("Run 'pagebuilder --help' for usage.")
            sys.exit(1)
        elif result["command"] is not None and result["script"] is None:
            result["script"] = arg
        else:
            print(f"Unknown command: {arg}")
            print("Run 'pagebuilder --help' for usage.")
            sys.exit(1)

        i += 1

    return result


def load_script(path: Path) -> EventScript:
    """Read and validate an event script. Raises ValueError with a readable message."""
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        raise ValueError(f"Failed to read {path}: {e}") from e

    try:
        script = EventScript.model_validate(raw)
    except ValidationError as e:
        raise ValueError(f"Invalid script {path}:\n{e}") from e

    problems: list[str] = []
    for n, event in enumerate(script.events, start=1):
        for error in _script_event_errors(event):
            problems.append(f"  event {n} ({event.type}): {error}")
    if problems:
        raise ValueError(f"Invalid script {path}:\n" + "\n".join(problems))

    return script


def _script_event_errors(event: ScriptEvent) -> list[str]:
    """
    validate_event for one script event. A file-backed upload is checked as
    if its file had already been read into a data URI.
    """
    if not event.needs_file:
        return validate_event(event.type, event.payload)

    errors: list[str] = []
    path = event.payload["path"]
    if not isinstance(path, str) or not path:
        errors.append(f"{event.type} 'path' must be a non-empty string")
    payload = {k: v for k, v in event.payload.items() if k != "path"}
    payload["data_uri"] = "data:"
    return errors + validate_event(event.type, payload)


async def run_script(script: EventScript, base_dir: Path, width: int | None = None) -> RenderCoordinator:
    """Load a document and play every script event into it, in order."""
    coordinator = RenderCoordinator()
    coordinator.load(width or script.container_width)

    for n, event in enumerate(script.events, start=1):
        result = await _play(coordinator, event, base_dir)
        if result is not None and not result.applied:
            print(f"  event {n} ({event.type}) rejected: {result.error}")

    await coordinator.before_print()
    return coordinator


async def _play(coordinator: RenderCoordinator, event: ScriptEvent, base_dir: Path):
    if not event.needs_file:
        return coordinator.dispatch(event.type, event.payload, source="script")

    path = base_dir / event.payload["path"]
    if event.type == "background.image_set":
        return await coordinator.apply_background_image(path)
    return await coordinator.upload_image(event.payload["field"], path)


def main():
    """Main entry point."""
    args = parse_args(sys.argv[1:])

    if args["show_help"]:
        print_help()
        return

    if args["show_version"]:
        print(f"pagebuilder {__version__}")
        return

    logging.basicConfig(
        level=getattr(logging, settings.LOG_LEVEL, logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args["command"] is None or args["script"] is None:
        print_help()
        sys.exit(1)

    script_path = Path(args["script"])
    try:
        script = load_script(script_path)
    except ValueError as e:
        print(f"Error: {e}")
        sys.exit(1)

    if args["command"] == "check":
        print(f"{script_path}: {len(script.events)} events OK")
        return

    try:
        coordinator = asyncio.run(run_script(script, script_path.parent, args["width"]))
    except FileReadError as e:
        print(f"Error: {e}")
        sys.exit(1)

    html = coordinator.export_html(RenderOptions(title=script.title, include_editor=args["editor"]))
    Path(args["output"]).write_text(html, encoding="utf-8")
    logger.info("wrote %d bytes to %s", len(html), args["output"])
    print(f"Wrote {args['output']}")


if __name__ == "__main__":
    main()
