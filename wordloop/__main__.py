"""CLI interface for Wordloop.

Usage:
    python -m wordloop drill               Run an interactive drill
    python -m wordloop next                Show the item that would be shown next
    python -m wordloop stats               Show drill statistics and the working set
    python -m wordloop export FILE         Save the drill state to a JSON file
    python -m wordloop import FILE         Load the drill state from a JSON file
    python -m wordloop clear               Forget all attempts and reshuffle the roster
"""

import argparse
import asyncio
import logging
from datetime import UTC, datetime
from pathlib import Path

from backend.config import settings
from backend.database import async_session, init_db
from backend.srs.assessment import LABELS, label_distance
from backend.srs.session import DrillSession
from backend.srs.state import clear_state, load_state, save_state, state_from_blob, state_to_blob

logger = logging.getLogger(__name__)


async def ensure_db() -> None:
    """Create tables if they don't exist."""
    await init_db()


async def load_drill() -> DrillSession:
    """Load the saved drill for the configured session key."""
    await ensure_db()
    async with async_session() as db:
        state = await load_state(db)
    return DrillSession(state=state)


async def store_drill(drill: DrillSession) -> None:
    async with async_session() as db:
        await save_state(db, drill.state)


async def cmd_drill(args: argparse.Namespace) -> None:
    """Run an interactive drill."""
    drill = await load_drill()
    if drill.current_item is None:
        print("\n  Nothing to show: the roster is empty.")
        return

    print("\n  Drill")
    print(f"  {len(drill.state.log)} attempts so far, {len(drill.state.roster)} items\n")
    print("  Ratings: " + "  ".join(f"{i}={label.value}" for i, label in enumerate(LABELS, 1)))
    print("  Type 'q' to quit\n")

    done = 0
    while args.max_attempts is None or done < args.max_attempts:
        item = drill.current_item
        if item is None:
            break
        print(f"  [{len(drill.state.log)}] {item}  (batch {drill.batch})")

        answer = input("  Rating: ").strip().lower()
        if answer == "q":
            print("\n  Drill ended.")
            break
        if answer.isdigit() and 1 <= int(answer) <= len(LABELS):
            label = LABELS[int(answer) - 1]
        else:
            try:
                label = next(lbl for lbl in LABELS if lbl.value == answer)
            except StopIteration:
                print("  Unknown rating, try again.")
                continue

        drill.record_attempt(label_distance(label))
        await store_drill(drill)
        done += 1

    print(f"\n  Recorded {done} attempts ({len(drill.state.log)} total)\n")


async def cmd_next(args: argparse.Namespace) -> None:
    """Show the next item without recording anything."""
    drill = await load_drill()
    item = drill.current_item
    print(f"  {item}" if item is not None else "  Nothing to show.")


async def cmd_stats(args: argparse.Namespace) -> None:
    """Show drill statistics and the current working set."""
    summary = (await load_drill()).summary()

    print("\n  Wordloop Statistics")
    print(f"  {'Attempts:':<20} {summary.attempts}")
    print(f"  {'Items:':<20} {summary.roster_size}")
    print(f"  {'Seen items:':<20} {summary.seen_items}")
    print(f"  {'Batch:':<20} {summary.batch}")
    print(f"  {'Next item:':<20} {summary.current_item}")
    print("\n  Working set")
    for stats in summary.working_set:
        marker = "*" if stats.item == summary.current_item else " "
        print(
            f"  {marker} {stats.item:<10} err {stats.mean_error:.2f}  "
            f"seen {stats.last_seen}  attempts {len(stats.recent_attempts)}"
        )
    print()


async def cmd_export(args: argparse.Namespace) -> None:
    """Write the drill state blob to a file."""
    drill = await load_drill()
    path = Path(args.file or f"eol-{datetime.now(UTC).strftime('%Y%m%dT%H%M%S')}.json")
    path.write_text(state_to_blob(drill.state), encoding="utf-8")
    print(f"  Saved {len(drill.state.log)} attempts to {path}")


async def cmd_import(args: argparse.Namespace) -> None:
    """Replace the drill state with the contents of a file."""
    await ensure_db()
    state = state_from_blob(Path(args.file).read_text(encoding="utf-8"))
    async with async_session() as db:
        await save_state(db, state)
    print(f"  Loaded {len(state.log)} attempts, {len(state.roster)} items")


async def cmd_clear(args: argparse.Namespace) -> None:
    """Delete the saved drill state."""
    await ensure_db()
    async with async_session() as db:
        await clear_state(db)
    print(f"  Cleared {settings.session_key!r}")


def main() -> None:
    """Entry point for the Wordloop CLI application."""
    parser = argparse.ArgumentParser(
        prog="wordloop",
        description="Adaptive vocabulary drill",
    )
    parser.add_argument("-v", "--verbose", action="store_true")
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    drill_parser = subparsers.add_parser("drill", help="Run an interactive drill")
    drill_parser.add_argument("--max-attempts", type=int, default=None, help="Stop after N attempts")

    subparsers.add_parser("next", help="Show the next item")
    subparsers.add_parser("stats", help="Show drill statistics")

    export_parser = subparsers.add_parser("export", help="Save the drill state to a file")
    export_parser.add_argument("file", nargs="?", default=None, help="Output path")

    import_parser = subparsers.add_parser("import", help="Load the drill state from a file")
    import_parser.add_argument("file", help="JSON file written by export")

    subparsers.add_parser("clear", help="Forget the saved drill state")

    args = parser.parse_args()

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG)

    if not args.command:
        parser.print_help()
        return

    cmd_map = {
        "drill": cmd_drill,
        "next": cmd_next,
        "stats": cmd_stats,
        "export": cmd_export,
        "import": cmd_import,
        "clear": cmd_clear,
    }

    asyncio.run(cmd_map[args.command](args))


if __name__ == "__main__":
    main()
