"""
Typer CLI for stepping through a module playlist.

Developer tool: drives a PlaylistEngine against a units JSON export and the
session store, so sequencing can be inspected without the web front end.

Commands:
    playlist init units.json -e enr-1 -m mod-1 --mode full   - Start (or restart) a session
    playlist show units.json -e enr-1 -m mod-1               - Show the sidebar and next decision
    playlist next units.json -e enr-1 -m mod-1               - Resolve and apply the next step
    playlist gate units.json gate-1 -e enr-1 -m mod-1 --failed -f node-1
    playlist mastery units.json node-1 0.8 -e enr-1 -m mod-1 - Update node mastery
    playlist goto units.json 3 -e enr-1 -m mod-1             - Jump to a playlist index
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Optional

import typer
from loguru import logger
from pydantic import ValidationError
from rich.console import Console
from rich.table import Table

from playlist_engine.adaptive.playlist_engine import PlaylistEngine
from playlist_engine.config import get_settings
from playlist_engine.core.mastery import MasteryBand
from playlist_engine.core.models import (
    AdaptiveMode,
    CourseAdaptiveSettings,
    GateDisplayStatus,
    GateResult,
    NodeProgress,
    PlaylistDecision,
)
from playlist_engine.curriculum.unit_source import load_units_file
from playlist_engine.persistence.session_store import SessionStore

app = typer.Typer(
    help="Adaptive playlist engine: inspect and step module sessions",
    no_args_is_help=True,
)

console = Console()

UnitsArg = typer.Argument(..., exists=True, dir_okay=False, help="Units JSON export")
EnrollmentOpt = typer.Option(..., "--enrollment", "-e", help="Enrollment id")
ModuleOpt = typer.Option(..., "--module", "-m", help="Module id")
SessionDirOpt = typer.Option(None, "--session-dir", help="Session directory (default: from config)")

GATE_STYLES = {
    GateDisplayStatus.PENDING: "[yellow]pending[/yellow]",
    GateDisplayStatus.PASSED: "[green]passed[/green]",
    GateDisplayStatus.FAILED: "[red]failed[/red]",
}


@app.callback()
def main_callback():
    """Configure logging for all commands."""
    logger.remove()
    logger.add(
        sys.stderr,
        level=get_settings().log_level.upper(),
        format="<dim>{time:HH:mm:ss}</dim> | <level>{level: <8}</level> | {message}",
    )


# ========================================
# Helpers
# ========================================


def _build_engine(
    units_path: Path,
    enrollment_id: str,
    module_id: str,
    mode: Optional[AdaptiveMode],
    store: SessionStore,
    fresh: bool = False,
) -> PlaylistEngine:
    """
    Build an engine from the units file, restoring the saved session if any.

    Adaptive settings are taken from the saved session when it has them,
    else from the units file, else from the configured default mode.
    An explicit ``--mode`` overrides the mode in all cases.
    """
    units, course_settings = load_units_file(units_path)
    persisted = None if fresh else store.load(enrollment_id, module_id)

    if persisted is not None and persisted.config is not None:
        config = persisted.config
    else:
        config = course_settings or CourseAdaptiveSettings(mode=get_settings().default_mode)
    if mode is not None:
        config = config.model_copy(update={"mode": mode})

    engine = PlaylistEngine(config, units, enrollment_id, module_id)

    if persisted is not None:
        engine.restore_session(persisted.session)
    else:
        engine.initialize_playlist()
    return engine


def _describe(decision: PlaylistDecision) -> str:
    if decision.action == "hold":
        return f"[yellow]hold[/yellow] - {decision.message}"
    if decision.action == "retry":
        return f"[magenta]retry[/magenta] {decision.lu_id}"
    if decision.action == "skip":
        return f"[cyan]skip[/cyan] - {decision.reason}"
    if decision.action == "inject":
        titles = ", ".join(entry.title for entry in decision.entries)
        return f"[blue]inject[/blue] {len(decision.entries)} entries ({titles})"
    if decision.action == "complete":
        return "[green]complete[/green]"
    return "[green]advance[/green]"


def _render(engine: PlaylistEngine) -> None:
    session = engine.session
    table = Table(
        title=f"{session.module_id} / {session.enrollment_id} (mode: {engine.config.mode.value})"
    )
    table.add_column("#", justify="right", style="dim")
    table.add_column("Title")
    table.add_column("Kind", style="dim")
    table.add_column("Status")
    table.add_column("Gate")

    for index, entry in enumerate(engine.get_display_entries()):
        if entry.is_current:
            status = "[bold]> current[/bold]"
        elif entry.is_skipped:
            status = "[cyan]skipped[/cyan]"
        elif entry.is_completed:
            status = "[green]done[/green]"
        else:
            status = ""
        gate = GATE_STYLES[entry.gate_status] if entry.gate_status else ""
        table.add_row(str(index), entry.title, entry.kind, status, gate)

    console.print(table)

    if session.node_progress:
        mastery_table = Table(title="Node mastery")
        mastery_table.add_column("Node")
        mastery_table.add_column("Mastery", justify="right")
        mastery_table.add_column("Attempts", justify="right")
        for node_id, progress in sorted(session.node_progress.items()):
            band = MasteryBand.for_progress(progress)
            mastery_table.add_row(
                node_id,
                f"[{band.color}]{progress.mastery:.0%}[/{band.color}]",
                str(progress.attempts),
            )
        console.print(mastery_table)

    if session.is_complete:
        console.print("[bold green]Module complete[/bold green]")
    else:
        console.print(f"Next: {_describe(engine.resolve_next())}")


# ========================================
# Commands
# ========================================


@app.command("init")
def init_session(
    units: Path = UnitsArg,
    enrollment: str = EnrollmentOpt,
    module: str = ModuleOpt,
    mode: Optional[AdaptiveMode] = typer.Option(None, "--mode", help="Override the course adaptive mode"),
    session_dir: Optional[Path] = SessionDirOpt,
):
    """Start a fresh session, replacing any saved one."""
    store = SessionStore(session_dir)
    engine = _build_engine(units, enrollment, module, mode, store, fresh=True)
    store.save(enrollment, module, engine.session, engine.config)
    _render(engine)


@app.command("show")
def show_session(
    units: Path = UnitsArg,
    enrollment: str = EnrollmentOpt,
    module: str = ModuleOpt,
    mode: Optional[AdaptiveMode] = typer.Option(None, "--mode", help="Override the course adaptive mode"),
    session_dir: Optional[Path] = SessionDirOpt,
):
    """Show the playlist and the decision the engine would make next."""
    store = SessionStore(session_dir)
    engine = _build_engine(units, enrollment, module, mode, store)
    _render(engine)


@app.command("next")
def next_step(
    units: Path = UnitsArg,
    enrollment: str = EnrollmentOpt,
    module: str = ModuleOpt,
    mode: Optional[AdaptiveMode] = typer.Option(None, "--mode", help="Override the course adaptive mode"),
    session_dir: Optional[Path] = SessionDirOpt,
):
    """Resolve the next step, apply it and save the session."""
    store = SessionStore(session_dir)
    engine = _build_engine(units, enrollment, module, mode, store)

    if engine.is_complete:
        console.print("[bold green]Module already complete[/bold green]")
        return

    decision = engine.resolve_next()
    engine.apply_decision(decision)
    store.save(enrollment, module, engine.session, engine.config)

    console.print(f"Applied: {_describe(decision)}")
    _render(engine)


@app.command("gate")
def record_gate(
    units: Path = UnitsArg,
    lu_id: str = typer.Argument(..., help="Gate learning unit id"),
    enrollment: str = EnrollmentOpt,
    module: str = ModuleOpt,
    passed: bool = typer.Option(False, "--passed/--failed", help="Attempt outcome"),
    score: float = typer.Option(0.0, "--score", help="Score achieved (0-1)"),
    failed_nodes: Optional[list[str]] = typer.Option(
        None, "--failed-node", "-f", help="Node below threshold (repeatable)"
    ),
    session_dir: Optional[Path] = SessionDirOpt,
):
    """Record a gate attempt."""
    store = SessionStore(session_dir)
    engine = _build_engine(units, enrollment, module, None, store)

    attempt = len(engine.session.gate_attempts.get(lu_id, ())) + 1
    engine.record_gate_result(GateResult(
        lu_id=lu_id,
        passed=passed,
        score=score,
        attempt_number=attempt,
        failed_nodes=tuple(failed_nodes or ()),
    ))
    store.save(enrollment, module, engine.session, engine.config)

    outcome = "[green]passed[/green]" if passed else "[red]failed[/red]"
    console.print(f"Recorded attempt #{attempt} on {lu_id}: {outcome}")
    _render(engine)


@app.command("mastery")
def update_mastery(
    units: Path = UnitsArg,
    node_id: str = typer.Argument(..., help="Knowledge node id"),
    mastery: float = typer.Argument(..., help="Mastery score (0-1)"),
    enrollment: str = EnrollmentOpt,
    module: str = ModuleOpt,
    attempts: int = typer.Option(1, "--attempts", help="Attempts on this node"),
    session_dir: Optional[Path] = SessionDirOpt,
):
    """Set mastery for a knowledge node."""
    store = SessionStore(session_dir)
    engine = _build_engine(units, enrollment, module, None, store)

    try:
        progress = NodeProgress(mastery=mastery, attempts=attempts)
    except ValidationError as e:
        console.print(f"[red]Invalid progress for {node_id}: {e.errors()[0]['msg']}[/red]")
        raise typer.Exit(code=1)

    engine.update_node_progress(node_id, progress)
    store.save(enrollment, module, engine.session, engine.config)
    _render(engine)


@app.command("goto")
def go_to(
    units: Path = UnitsArg,
    index: int = typer.Argument(..., help="Playlist index"),
    enrollment: str = EnrollmentOpt,
    module: str = ModuleOpt,
    override: Optional[bool] = typer.Option(
        None, "--override/--no-override", help="Allow moving past unresolved gates"
    ),
    session_dir: Optional[Path] = SessionDirOpt,
):
    """Jump to a playlist index."""
    store = SessionStore(session_dir)
    engine = _build_engine(units, enrollment, module, None, store)

    if override is None:
        override = get_settings().free_navigation

    before = engine.session
    after = engine.go_to_index(index, override=override)
    if after is before:
        console.print(f"[red]Cannot move to index {index}[/red]")
        raise typer.Exit(code=1)

    store.save(enrollment, module, after, engine.config)
    _render(engine)


def main() -> None:
    """CLI entry point."""
    app()


if __name__ == "__main__":
    main()
