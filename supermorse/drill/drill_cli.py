"""
SuperMorse: Terminal CLI for Morse Code Drills.

A Rich terminal interface over the progression scheduler.

Commands:
- supermorse status    - Show stage, current symbol and mastery
- supermorse learn     - Show the symbol currently being drilled
- supermorse drill     - Run a timed drill session
- supermorse settings  - Show or change settings
- supermorse alphabet  - Show the code table for the active curriculum
- supermorse reset     - Delete saved progress
"""
from __future__ import annotations

import json
import sys
from typing import Optional

import typer
from loguru import logger
from rich.console import Console
from rich.panel import Panel
from rich.prompt import Confirm, Prompt
from rich.table import Table

from supermorse.config import Settings, get_settings

from .alphabets import curriculum_alphabet, decode_keyed, read_typed, symbol_to_morse
from .clock import SystemClock
from .input_checker import InputChecker, PracticeResult
from .models import DrillSettings, ProgressionState, Stage
from .scheduler import ProgressionScheduler
from .state_store import SQLiteBlobStore

CONFUSIONS_KEY = "supermorse_confusions"

# =============================================================================
# CLI Setup
# =============================================================================

app = typer.Typer(
    name="supermorse",
    help="SuperMorse: adaptive Morse code drills",
    no_args_is_help=True,
)
console = Console()


# =============================================================================
# Styling
# =============================================================================

STYLES = {
    "correct": "bold green",
    "incorrect": "bold red",
    "info": "bold cyan",
    "warning": "bold yellow",
    "stage": {
        Stage.CORE: "cyan",
        Stage.REGIONAL: "magenta",
        Stage.PROSIGNS: "yellow",
        Stage.SPECIAL: "blue",
        Stage.REMEDIAL: "red",
    },
}


def style_stage(stage: Stage) -> str:
    """Get styled stage name."""
    color = STYLES["stage"].get(stage, "white")
    return f"[{color}]{stage.value}[/{color}]"


def format_duration(seconds: float) -> str:
    """Format seconds as HH:MM:SS."""
    total = int(seconds)
    return f"{total // 3600:02d}:{total % 3600 // 60:02d}:{total % 60:02d}"


def mastery_bar(score: float, width: int = 20) -> str:
    filled = round(score * width)
    color = "green" if score >= 0.9 else "yellow" if score >= 0.5 else "red"
    return f"[{color}]{'█' * filled}[/{color}][dim]{'░' * (width - filled)}[/dim] {score:.0%}"


# =============================================================================
# Wiring
# =============================================================================


def load_confusions(store: SQLiteBlobStore) -> InputChecker:
    """Restore confusion counts saved by earlier drills."""
    blob = store.get(CONFUSIONS_KEY)
    if blob is None:
        return InputChecker()
    try:
        data = json.loads(blob)
    except json.JSONDecodeError:
        logger.warning("Saved confusion counts are unreadable, starting over")
        return InputChecker()
    if not isinstance(data, dict):
        return InputChecker()
    return InputChecker.from_dict(data)


def build_scheduler(config: Settings | None = None) -> tuple[ProgressionScheduler, SQLiteBlobStore, InputChecker]:
    """Create a scheduler wired to the local database and restore progress."""
    config = config or get_settings()
    store = SQLiteBlobStore(config.state_db_path)
    checker = load_confusions(store)
    scheduler = ProgressionScheduler(
        confusions=checker,
        store=store,
        clock=SystemClock(),
        settings=DrillSettings.from_config(config),
    )
    scheduler.initialize()
    return scheduler, store, checker


# =============================================================================
# Display Helpers
# =============================================================================


def display_state(state: ProgressionState, settings: DrillSettings) -> None:
    """Show stage, current symbol and mastery table."""
    current = state.current_symbol or "-"
    code = symbol_to_morse(current, settings.curriculum) if state.current_symbol else ""
    console.print(
        Panel(
            f"[bold]{current}[/bold]  [dim]{code}[/dim]",
            title=f"Curriculum {settings.curriculum}  |  Stage {style_stage(state.stage)}",
            title_align="left",
            border_style="cyan",
            padding=(1, 2),
        )
    )

    table = Table()
    table.add_column("Symbol", style="bold")
    table.add_column("Code")
    table.add_column("Mastery")
    for symbol in state.known_symbols:
        code = symbol_to_morse(symbol, settings.curriculum)
        table.add_row(symbol, code, mastery_bar(state.mastery.get(symbol, 0.0)))
    console.print(table)


def display_result(result: PracticeResult) -> None:
    """Show a scored practice round."""
    cells = []
    for index, want in enumerate(result.expected):
        got = result.produced[index] if index < len(result.produced) else ""
        style = STYLES["correct"] if got == want else STYLES["incorrect"]
        cells.append(f"[{style}]{got or '·'}[/{style}]")

    console.print(f"Expected: {' '.join(result.expected)}")
    console.print(f"Keyed:    {' '.join(cells)}")
    console.print(f"Accuracy: [bold]{result.accuracy:.0%}[/bold]")


def read_round(sequence: list[str], mode: str, curriculum: str) -> list[str] | None:
    """
    Prompt for one practice round.

    Returns:
        Produced symbols, or None if the learner asked to quit
    """
    if mode == "copy":
        console.print(f"\n[bold]{'   '.join(symbol_to_morse(s, curriculum) for s in sequence)}[/bold]")
        answer = Prompt.ask("Symbols (space separated, q to quit)")
        if answer.strip().lower() == "q":
            return None
        return [
            read_typed(token, sequence[index] if index < len(sequence) else None, curriculum)
            for index, token in enumerate(answer.split())
        ]

    console.print(f"\n[bold]{' '.join(sequence)}[/bold]")
    answer = Prompt.ask("Codes (space separated, q to quit)")
    if answer.strip().lower() == "q":
        return None
    return [
        decode_keyed(token, sequence[index] if index < len(sequence) else None, curriculum)
        for index, token in enumerate(answer.split())
    ]


# =============================================================================
# Commands
# =============================================================================


@app.command()
def status() -> None:
    """Show learning progress."""
    scheduler, store, _ = build_scheduler()
    try:
        display_state(scheduler.state, scheduler.get_settings())
        if scheduler.is_ready_for_higher_speed():
            console.print("\n[green]Core set fully mastered: ready for a higher speed.[/green]")
    finally:
        scheduler.close()
        store.close()


@app.command()
def learn() -> None:
    """Show the symbol currently being drilled."""
    scheduler, store, _ = build_scheduler()
    try:
        state = scheduler.state
        curriculum = scheduler.get_settings().curriculum
        if state.current_symbol is None:
            console.print("[yellow]Nothing to learn in this curriculum.[/yellow]")
            raise typer.Exit(0)
        console.print(
            Panel(
                f"[bold]{state.current_symbol}[/bold]\n\n{symbol_to_morse(state.current_symbol, curriculum)}",
                title=f"Current symbol ({style_stage(state.stage)})",
                border_style="cyan",
                padding=(1, 4),
            )
        )
    finally:
        scheduler.close()
        store.close()


@app.command()
def drill(
    mode: str = typer.Option(
        "send",
        "--mode", "-m",
        help="send: key the codes for shown symbols; copy: read codes and type the symbols",
    ),
    rounds: Optional[int] = typer.Option(
        None,
        "--rounds", "-r",
        help="Stop after this many rounds",
    ),
    length: Optional[int] = typer.Option(
        None,
        "--length", "-l",
        help="Symbols per round",
    ),
) -> None:
    """
    Run a timed drill session.

    Rounds continue until the session timer runs out, the round limit is
    reached or you enter q.
    """
    if mode not in {"send", "copy"}:
        console.print(f"[red]Unknown mode {mode!r}, use send or copy.[/red]")
        raise typer.Exit(1)

    config = get_settings()
    scheduler, store, checker = build_scheduler(config)
    round_length = length or config.practice_length

    scheduler.on_symbol_introduced(
        lambda symbol: console.print(
            Panel(
                f"New symbol: [bold]{symbol}[/bold]  {symbol_to_morse(symbol, scheduler.get_settings().curriculum)}",
                border_style="green",
            )
        )
    )
    scheduler.on_session_ended(
        lambda state: console.print(
            Panel(
                "Session complete! Take a break before your next session.",
                border_style="green",
            )
        )
    )

    skipped = scheduler.start_session()
    if skipped > 0:
        console.print(f"[yellow]Recommended break still has {format_duration(skipped)} left.[/yellow]")

    completed = 0
    try:
        while scheduler.get_session_time_remaining() > 0:
            if rounds is not None and completed >= rounds:
                break
            sequence = scheduler.generate_practice_sequence(round_length)
            if not sequence:
                console.print("[yellow]No symbols to practice.[/yellow]")
                break

            console.print(f"[dim]Session time left {format_duration(scheduler.get_session_time_remaining())}[/dim]")
            produced = read_round(sequence, mode, scheduler.get_settings().curriculum)
            if produced is None:
                break

            checker.start(sequence)
            result = None
            for symbol in produced[: len(sequence)]:
                result = checker.process(symbol) or result
            if result is None:
                result = checker.finish()

            display_result(result)
            scheduler.update_progress(result)
            store.put(CONFUSIONS_KEY, json.dumps(checker.to_dict()))
            completed += 1

    except KeyboardInterrupt:
        console.print("\n\n[yellow]Session interrupted.[/yellow]")

    finally:
        scheduler.end_session()
        scheduler.close()
        store.close()

    console.print(f"\nRounds completed: {completed}")


@app.command()
def settings(
    curriculum: Optional[str] = typer.Option(
        None,
        "--curriculum", "-c",
        help="Curriculum id (changing it resets progress)",
    ),
    wpm: Optional[int] = typer.Option(None, "--wpm", "-w", help="Drill speed in words per minute"),
    farnsworth: Optional[bool] = typer.Option(
        None,
        "--farnsworth/--no-farnsworth",
        help="Farnsworth spacing",
    ),
    threshold: Optional[float] = typer.Option(None, "--threshold", "-t", help="Mastery threshold (0-1]"),
) -> None:
    """Show or change settings."""
    scheduler, store, checker = build_scheduler()
    try:
        current = scheduler.get_settings()
        if curriculum is not None and curriculum.lower() != current.curriculum.lower():
            if not Confirm.ask(f"Switch to {curriculum}? Progress will be reset.", default=False):
                curriculum = None

        changes = {
            "curriculum": curriculum,
            "wpm": wpm,
            "farnsworth_spacing": farnsworth,
            "mastery_threshold": threshold,
        }
        if any(value is not None for value in changes.values()):
            previous = current
            current = scheduler.update_settings(changes)
            if current.curriculum != previous.curriculum:
                # Confusions from the old curriculum no longer apply
                checker.clear_confusions()
                store.delete(CONFUSIONS_KEY)

        table = Table(show_header=False, box=None)
        table.add_column("Setting", style="dim")
        table.add_column("Value", style="bold")
        table.add_row("Curriculum", current.curriculum)
        table.add_row("Speed", f"{current.wpm} wpm")
        table.add_row("Farnsworth spacing", "on" if current.farnsworth_spacing else "off")
        table.add_row("Mastery threshold", f"{current.mastery_threshold:.0%}")
        table.add_row("Session length", format_duration(current.session_duration))
        table.add_row("Break length", format_duration(current.break_duration))
        console.print(table)
    finally:
        scheduler.close()
        store.close()


@app.command()
def alphabet(
    curriculum: Optional[str] = typer.Option(None, "--curriculum", "-c", help="Curriculum to show"),
) -> None:
    """Show the code table for a curriculum."""
    if curriculum is None:
        scheduler, store, _ = build_scheduler()
        curriculum = scheduler.get_settings().curriculum
        scheduler.close()
        store.close()

    table = Table(title=f"{curriculum} alphabet")
    table.add_column("Symbol", style="bold")
    table.add_column("Code")
    for symbol, code in curriculum_alphabet(curriculum.lower()).items():
        table.add_row(symbol, code)
    console.print(table)


@app.command()
def reset(
    confirm: bool = typer.Option(
        False,
        "--yes", "-y",
        help="Skip confirmation",
    ),
) -> None:
    """Delete saved progress and start over."""
    if not confirm and not Confirm.ask("Delete ALL progress? This cannot be undone!", default=False):
        raise typer.Exit(0)

    scheduler, store, _ = build_scheduler()
    try:
        scheduler.delete_progress()
        store.delete(CONFUSIONS_KEY)
    finally:
        scheduler.close()
        store.close()

    console.print("[green]Progress has been reset.[/green]")


# =============================================================================
# Entry Point
# =============================================================================


def main() -> None:
    """CLI entry point."""
    # Configure logging
    logger.remove()
    logger.add(
        sys.stderr,
        level=get_settings().log_level.upper(),
        format="<level>{message}</level>",
    )

    app()


if __name__ == "__main__":
    main()
