from __future__ import annotations

import logging
import time
from typing import Any, Callable, Dict

from govdash_node.storage.base import ProposalStore
from govdash_node.storage.demo import demo_proposals
from govdash_node.storage.json_store import JSONProposalStore
from govdash_node.storage.memory_store import InMemoryProposalStore

log = logging.getLogger(__name__)

__all__ = [
    "ProposalStore",
    "InMemoryProposalStore",
    "JSONProposalStore",
    "build_store",
    "demo_proposals",
]


def build_store(cfg: Dict[str, Any], clock: Callable[[], float] = time.time) -> ProposalStore:
    """Pick a backend from ``cfg['storage']`` and seed it when it starts empty."""
    storage = cfg.get("storage", {}) or {}
    driver = str(storage.get("driver", "memory")).strip().lower()

    if driver == "json":
        store: InMemoryProposalStore = JSONProposalStore(
            storage.get("json_path", "govdash_state.json"), clock=clock
        )
    elif driver == "memory":
        store = InMemoryProposalStore(clock=clock)
    else:
        raise ValueError(f"unknown storage driver: {driver!r}")

    if storage.get("seed_demo", True) and not store.list():
        store.seed(demo_proposals(int(clock())))
        log.info("Seeded %d demo proposals (%s store)", len(store.list()), driver)

    return store
