from __future__ import annotations
import logging
from typing import Any, Optional
from .config import SDK_CONFIG, TrackerConfig
from .registry import REGISTRY, Registry
from core.lifecycle import HostLifecycle, InProcessHost
from core.timing.clock import Clock
from core.timing.scheduler import Scheduler
from core.tracker import SessionTracker

logger = logging.getLogger(__name__)


def create_store(config: TrackerConfig = SDK_CONFIG, registry: Registry = REGISTRY) -> Any:
    """Instantiate the store plugin named by ``config.store``."""
    registry.update(config.plugins)
    return registry.resolve(config.store).from_config(config)


def open_journal(config: TrackerConfig = SDK_CONFIG, registry: Registry = REGISTRY) -> Optional[Any]:
    if not config.journal:
        return None
    registry.update(config.plugins)
    return registry.create("writer.journal", config.paths.journal_path)


def build_tracker(
    host: Optional[HostLifecycle] = None,
    config: TrackerConfig = SDK_CONFIG,
    *,
    store: Any = None,
    clock: Optional[Clock] = None,
    scheduler: Optional[Scheduler] = None,
    journal: Any = None,
    registry: Registry = REGISTRY,
) -> SessionTracker:
    """
    Composition root: wire one tracker for the lifetime of the process.

    Anything not passed explicitly is resolved from ``config`` through the
    plugin registry. Hand the returned tracker to whoever needs it; there is
    no global instance.
    """
    registry.update(config.plugins)
    host = host if host is not None else InProcessHost()
    store = store if store is not None else create_store(config, registry)
    scheduler = scheduler if scheduler is not None else registry.create(config.scheduler)
    journal = journal if journal is not None else open_journal(config, registry)
    logger.debug("building tracker: timeout=%.1fs store=%s", config.session_timeout, type(store).__name__)
    return SessionTracker(
        host,
        store,
        timeout=config.session_timeout,
        clock=clock,
        scheduler=scheduler,
        journal=journal,
    )
