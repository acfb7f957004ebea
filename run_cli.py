"""
Command line interface for the workspace catalog.

Syncs the editor's recently-opened list, lists and edits catalog entries,
and opens workspaces (local, WSL or remote) in the editor.
"""

import argparse
import asyncio
import json
import sys
from pathlib import Path
from typing import Any, List, Optional

from wsrecall.shared.logging.logger import get_logger, setup_logging
from wsrecall.shared.config.config_loader import load_config
from wsrecall.shared.errors import (
    ConfigurationError,
    DuplicateTagError,
    HistoryReadError,
    ImportDataError,
    LaunchError,
    TagNotFoundError,
    WorkspaceNotFoundError,
)
from wsrecall.shared.models.location import LocationKind
from wsrecall.shared.models.workspace import WorkspaceFilter, WorkspaceItem, WorkspaceType, WorkspaceView
from wsrecall.pipeline.context import AppContext, build_context
from wsrecall.__version__ import __version__

# Initialize logging at module level
setup_logging()
logger = get_logger("run_cli")

EXAMPLES = """\
Examples:
  python run_cli.py --sync
  python run_cli.py --list
  python run_cli.py --list 2 20 --location wsl --search api
  python run_cli.py --resolve "\\\\wsl$\\Ubuntu\\home\\me\\proj"
  python run_cli.py --open <ID> --dry-run
  python run_cli.py --set-tags <ID> backend python
  python run_cli.py --export backup.json
"""


# -------------------- CLI Argument Parsing --------------------

def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Recall and reopen recently used editor workspaces",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=EXAMPLES,
    )

    # Version flag
    parser.add_argument(
        "--version", "-v", action="version",
        version=f"wsrecall {__version__}",
        help="Show version and exit"
    )

    # Config
    parser.add_argument(
        "--config", type=str,
        help="Path to config file (default: config/config.yaml)"
    )
    parser.add_argument("--json", action="store_true", help="Output in JSON format")

    # Catalog
    parser.add_argument("--sync", action="store_true", help="Import the editor's recently opened workspaces")
    parser.add_argument(
        "--list", nargs="*", metavar=("PAGE", "SIZE"), dest="list_workspaces",
        help="List workspaces (optional: page number and page size)",
    )
    parser.add_argument("--search", type=str, help="Filter --list by name, path, description or tag")
    parser.add_argument("--tag", action="append", default=[], help="Filter --list by tag (repeatable)")
    parser.add_argument(
        "--location", choices=[k.value for k in LocationKind],
        help="Filter --list by location kind",
    )
    parser.add_argument(
        "--view", choices=[v.value for v in WorkspaceView], default=WorkspaceView.ALL.value,
        help="Filter --list by view (default: all)",
    )
    parser.add_argument(
        "--type", action="append", default=[], dest="types",
        choices=[t.value for t in WorkspaceType],
        help="Filter --list by workspace type (repeatable)",
    )

    # Resolve / open
    parser.add_argument("--resolve", type=str, metavar="REFERENCE", help="Show the launch target for a reference")
    parser.add_argument("--workspace-file", action="store_true", help="Treat --resolve reference as .code-workspace")
    parser.add_argument("--open", type=str, metavar="ID", help="Open a workspace in the editor")
    parser.add_argument("--new-window", action="store_true", help="Open in a new window")
    parser.add_argument("--dry-run", action="store_true", help="Print the editor command without running it")
    parser.add_argument("--distros", action="store_true", help="List installed WSL distributions")

    # Edits
    parser.add_argument("--favorite", type=str, metavar="ID", help="Mark a workspace as favorite")
    parser.add_argument("--unfavorite", type=str, metavar="ID", help="Unmark a favorite workspace")
    parser.add_argument("--pin", type=str, metavar="ID", help="Pin a workspace")
    parser.add_argument("--unpin", type=str, metavar="ID", help="Unpin a workspace")
    parser.add_argument("--set-tags", nargs="+", metavar=("ID", "TAG"), help="Replace a workspace's tags")
    parser.add_argument("--describe", nargs=2, metavar=("ID", "TEXT"), help="Set a workspace description")
    parser.add_argument("--remove", type=str, metavar="ID", help="Remove a workspace from the catalog")

    # Tags
    parser.add_argument("--tags", action="store_true", help="List tags")
    parser.add_argument("--add-tag", type=str, metavar="NAME", help="Create a custom tag")
    parser.add_argument("--color", type=str, help="Color for --add-tag")
    parser.add_argument("--tag-description", type=str, help="Description for --add-tag")
    parser.add_argument("--remove-tag", type=str, metavar="ID", help="Delete a custom tag by id")

    # Export / import
    parser.add_argument("--export", type=str, metavar="FILE", help="Export workspaces and tags to JSON")
    parser.add_argument("--import", type=str, metavar="FILE", dest="import_file", help="Import an exported JSON file")

    return parser.parse_args(argv)


def _print_json(data: Any) -> None:
    print(json.dumps(data, indent=2))


# -------------------- CLI Command Handlers --------------------

def _print_workspaces(workspaces: List[WorkspaceItem], page: int, total_count: int, page_size: int, as_json: bool = False) -> None:
    """Print workspaces in a formatted table or as JSON."""
    if as_json:
        _print_json({
            "page": page,
            "total_count": total_count,
            "page_size": page_size,
            "workspaces": [w.to_dict() for w in workspaces],
        })
        return

    logger.progress(f"\nWorkspaces (page {page}, showing {len(workspaces)} of {total_count}):")
    logger.progress("")
    logger.progress(f"{'ID':<40} {'Name':<28} {'Location':<16} {'Flags':<6} {'Tags'}")
    logger.progress("-" * 110)

    for ws in workspaces:
        ws_id = ws.id if len(ws.id) <= 38 else ws.id[:35] + "..."
        name = (ws.name or "N/A")[:26]
        location = f"{ws.location.kind.icon} {ws.location.display_name}"[:16]
        flags = ("*" if ws.is_favorite else "") + ("P" if ws.is_pinned else "")
        logger.progress(f"{ws_id:<40} {name:<28} {location:<16} {flags:<6} {', '.join(ws.tags)}")

    logger.progress("")
    if total_count > page * page_size:
        total_pages = (total_count + page_size - 1) // page_size
        logger.progress(f"Page {page} of {total_pages} (use --list {page + 1} for next page)")
    logger.progress("")


def handle_list(args: argparse.Namespace, context: AppContext) -> int:
    ws = args.list_workspaces
    page = int(ws[0]) if ws and ws[0].isdigit() else 1
    page_size = int(ws[1]) if len(ws) > 1 and ws[1].isdigit() else 50
    page = max(page, 1)
    page_size = max(page_size, 1)

    flt = WorkspaceFilter(
        search_text=args.search,
        tags=args.tag,
        location=LocationKind(args.location) if args.location else None,
        view=WorkspaceView(args.view),
        types=[WorkspaceType(t) for t in args.types],
    )
    items = context.manager.get_workspaces(flt)
    start = (page - 1) * page_size
    _print_workspaces(items[start:start + page_size], page, len(items), page_size, as_json=args.json)
    return 0


def handle_sync(args: argparse.Namespace, context: AppContext) -> int:
    try:
        workspaces = context.sync_service.sync()
    except HistoryReadError as e:
        logger.error(f"[ERROR] {e}")
        return 1

    if args.json:
        _print_json({"synced": len(workspaces)})
    return 0


async def handle_resolve(args: argparse.Namespace, context: AppContext) -> int:
    location, target = await context.launcher.resolve(args.resolve, args.workspace_file)
    command = context.launcher.build_command(target, args.new_window)

    if args.json:
        _print_json({
            "reference": args.resolve,
            "location": location.to_dict(),
            "target": target.to_dict(),
            "command": command,
        })
        return 0

    logger.progress(f"Location: {location.kind.icon} {location.display_name}")
    logger.progress(f"Target:   {target.uri}")
    logger.progress(f"Command:  {' '.join(command)}")
    return 0


async def handle_open(args: argparse.Namespace, context: AppContext) -> int:
    try:
        result = await context.manager.open_workspace(args.open, args.new_window, args.dry_run)
    except WorkspaceNotFoundError as e:
        logger.error(f"[ERROR] {e}")
        logger.progress("[TIP] Use --list to see workspace IDs")
        return 1
    except LaunchError as e:
        if args.json:
            _print_json({"error": e.message, "guidance": e.guidance})
        logger.error(f"[ERROR] {e.message}")
        if e.guidance:
            logger.progress(f"[TIP] {e.guidance}")
        return 1

    if args.json:
        _print_json(result.to_dict())
    elif result.dry_run:
        logger.progress(" ".join(result.command))
    else:
        logger.progress(f"Opened {result.target.uri}")
    return 0


async def handle_distros(args: argparse.Namespace, context: AppContext) -> int:
    distributions = await context.validator.list_distributions()
    if args.json:
        _print_json({"distributions": distributions})
        return 0

    if not distributions:
        logger.progress("No WSL distributions found")
        return 0
    for i, name in enumerate(distributions):
        logger.progress(f"{name}{' (default)' if i == 0 else ''}")
    return 0


def handle_edit(args: argparse.Namespace, context: AppContext) -> int:
    """Handle the single-workspace edit flags."""
    manager = context.manager
    try:
        if args.favorite:
            workspace = manager.set_favorite(args.favorite, True)
        elif args.unfavorite:
            workspace = manager.set_favorite(args.unfavorite, False)
        elif args.pin:
            workspace = manager.set_pinned(args.pin, True)
        elif args.unpin:
            workspace = manager.set_pinned(args.unpin, False)
        elif args.set_tags:
            workspace = manager.set_tags(args.set_tags[0], args.set_tags[1:])
        elif args.describe:
            workspace = manager.set_description(args.describe[0], args.describe[1])
        else:
            manager.remove_workspace(args.remove)
            if args.json:
                _print_json({"removed": args.remove})
            else:
                logger.progress(f"Removed {args.remove}")
            return 0
    except WorkspaceNotFoundError as e:
        logger.error(f"[ERROR] {e}")
        return 1

    if args.json:
        _print_json(workspace.to_dict())
    else:
        logger.progress(f"Updated {workspace.name}")
    return 0


def handle_tags(args: argparse.Namespace, context: AppContext) -> int:
    if args.add_tag is not None:
        try:
            tag = context.manager.add_custom_tag(args.add_tag, args.color, args.tag_description)
        except (DuplicateTagError, ValueError) as e:
            logger.error(f"[ERROR] {e}")
            return 1
        if args.json:
            _print_json(tag.to_dict())
        else:
            logger.progress(f"Created tag {tag.name}")
        return 0

    if args.remove_tag is not None:
        try:
            tag = context.manager.remove_tag(args.remove_tag)
        except (TagNotFoundError, ValueError) as e:
            logger.error(f"[ERROR] {e}")
            return 1
        logger.progress(f"Removed tag {tag.name}")
        return 0

    tags = context.manager.get_tags()
    if args.json:
        _print_json({"tags": [t.to_dict() for t in tags]})
        return 0
    logger.section(f"Tags ({len(tags)})")
    for tag in tags:
        kind = "system" if tag.is_system else "custom"
        logger.progress(f"{tag.name:<20} {kind:<8} used {tag.usage_count:<4} {tag.id}")
    return 0


def handle_export(args: argparse.Namespace, context: AppContext) -> int:
    data = context.manager.export_data()
    Path(args.export).write_text(json.dumps(data, indent=2), encoding="utf-8")
    logger.progress(f"Exported {len(data['workspaces'])} workspaces to {args.export}")
    return 0


def handle_import(args: argparse.Namespace, context: AppContext) -> int:
    path = Path(args.import_file)
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        logger.error(f"[ERROR] Cannot read {path}: {e}")
        return 1
    if not isinstance(data, dict):
        logger.error(f"[ERROR] {path} is not an export file")
        return 1

    try:
        context.manager.import_data(data)
    except ImportDataError as e:
        logger.error(f"[ERROR] Cannot import {path}: {e}")
        return 1
    logger.progress(f"Imported {len(data.get('workspaces', []))} workspaces from {path}")
    return 0


# -------------------- Main Entry Point --------------------

async def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point. Returns the process exit code."""
    args = parse_args(argv)

    try:
        config = load_config(args.config)
    except ConfigurationError as e:
        logger.error(f"[ERROR] {e}")
        return 1

    # Keep stdout machine-readable in JSON mode
    setup_logging(config.logging.level, stream=sys.stderr if args.json else sys.stdout)

    context = build_context(config)

    if args.sync:
        return handle_sync(args, context)
    if args.list_workspaces is not None:
        return handle_list(args, context)
    if args.resolve is not None:
        return await handle_resolve(args, context)
    if args.open is not None:
        return await handle_open(args, context)
    if args.distros:
        return await handle_distros(args, context)
    if any((args.favorite, args.unfavorite, args.pin, args.unpin, args.set_tags, args.describe, args.remove)):
        return handle_edit(args, context)
    if args.tags or args.add_tag is not None or args.remove_tag is not None:
        return handle_tags(args, context)
    if args.export:
        return handle_export(args, context)
    if args.import_file:
        return handle_import(args, context)

    # No command provided
    logger.error("[ERROR] No command specified")
    logger.progress("[TIP] Use --sync to import history, --list to see workspaces, --open to launch one")
    logger.progress("[TIP] Run with --help for more information")
    return 1


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
