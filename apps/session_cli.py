from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

import typer

from config.paths import Paths
from core.lifecycle import InProcessHost, LifecycleSignal
from core.persistence import PersistenceKey, read_counter
from core.timing.clock import ManualClock
from core.timing.scheduler import ManualScheduler
from core.tracker import SessionTracker
from plugins.stores.json_file.impl import JsonFileStore
from plugins.stores.memory.impl import MemoryStore
from plugins.writers.jsonl.impl import JsonlWriter
from sdk.config import TrackerConfig, load_config


app = typer.Typer(add_completion=False, no_args_is_help=True)


def _config(data_root: Optional[Path]) -> TrackerConfig:
    if data_root is None:
        return load_config()
    return load_config(paths=Paths(data_root))


@app.callback()
def main(verbose: bool = typer.Option(False, "--verbose", "-v", help="Log session boundaries")) -> None:
    """Inspect and exercise the persisted usage-session counters."""

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@app.command()
def show(
    data_root: Optional[Path] = typer.Option(None, "--data-root", help="Override USAGE_SESSIONS_DATA_ROOT"),
) -> None:
    """Print the persisted previous-session duration and session count."""

    cfg = _config(data_root)
    store = JsonFileStore(cfg.store_path)
    previous = read_counter(store, PersistenceKey.LAST_SESSION_DURATION)
    count = read_counter(store, PersistenceKey.TOTAL_SESSION_COUNT)
    typer.echo(f"store:            {cfg.store_path}")
    typer.echo(f"previous session: {previous:.1f}s")
    typer.echo(f"total sessions:   {count}")


@app.command()
def reset(
    data_root: Optional[Path] = typer.Option(None, "--data-root", help="Override USAGE_SESSIONS_DATA_ROOT"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation"),
) -> None:
    """Zero both persisted counters."""

    cfg = _config(data_root)
    if not yes:
        typer.confirm(f"Reset counters in {cfg.store_path}?", abort=True)
    store = JsonFileStore(cfg.store_path)
    store.save(0.0, PersistenceKey.LAST_SESSION_DURATION)
    store.save(0, PersistenceKey.TOTAL_SESSION_COUNT)
    typer.echo("[usage-sessions] counters reset")


@app.command()
def simulate(
    background: List[float] = typer.Option(..., "--background", "-b", help="Seconds spent in background; repeat per cycle"),
    timeout: Optional[float] = typer.Option(None, help="Session timeout in seconds (default from config)"),
    foreground: float = typer.Option(30.0, help="Seconds spent in foreground before each background interval"),
    grant_deadline: Optional[float] = typer.Option(
        None, help="Expire the keep-alive grant after this many background seconds"
    ),
    terminate: bool = typer.Option(False, help="Post will-terminate after the last cycle"),
    persist: bool = typer.Option(False, help="Use the on-disk store instead of memory"),
    journal: bool = typer.Option(False, help="Append events to the on-disk journal"),
    data_root: Optional[Path] = typer.Option(None, "--data-root", help="Override USAGE_SESSIONS_DATA_ROOT"),
) -> None:
    """Replay background/foreground cycles on a simulated clock."""

    cfg = _config(data_root)
    clock = ManualClock()
    scheduler = ManualScheduler(clock)
    host = InProcessHost()
    store = JsonFileStore(cfg.store_path) if persist else MemoryStore()
    writer = JsonlWriter(cfg.paths.journal_path) if journal else None

    tracker = SessionTracker(
        host,
        store,
        timeout=cfg.session_timeout if timeout is None else timeout,
        clock=clock,
        scheduler=scheduler,
        journal=writer,
    )
    typer.echo(f"[usage-sessions] timeout {tracker.session_timeout:.1f}s, session {tracker.session_id}")
    try:
        for i, seconds in enumerate(background, 1):
            scheduler.advance(foreground)
            host.post(LifecycleSignal.DID_ENTER_BACKGROUND)
            if grant_deadline is not None and grant_deadline < seconds:
                scheduler.advance(grant_deadline)
                host.expire_background_tasks()
                scheduler.advance(seconds - grant_deadline)
            else:
                scheduler.advance(seconds)
            host.post(LifecycleSignal.WILL_ENTER_FOREGROUND)
            typer.echo(
                f"cycle {i}: background {seconds:.1f}s -> session {tracker.session_id} "
                f"count={tracker.total_session_count()} previous={tracker.previous_session_duration():.1f}s"
            )
        if terminate:
            scheduler.advance(foreground)
            host.post(LifecycleSignal.WILL_TERMINATE)
            typer.echo(
                f"terminated: count={tracker.total_session_count()} "
                f"previous={tracker.previous_session_duration():.1f}s"
            )
    finally:
        tracker.close()
        if writer is not None:
            writer.close()


if __name__ == "__main__":
    app()
