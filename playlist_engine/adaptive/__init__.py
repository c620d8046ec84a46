"""
Adaptive Playlist Engine.

Decides, step by step, what a learner sees next in a module: advance, retry,
skip, hold, or remediation content injected into the sequence.

Components:
- PlaylistStrategy: Static / Guided / Full sequencing policies
- RemediationRouter: Builds practice and review entries for failed gates
- PlaylistEngine: Session orchestration (copy-on-write snapshots)
"""
from playlist_engine.adaptive.playlist_engine import PlaylistEngine
from playlist_engine.adaptive.remediation import RemediationRouter, injected_entry_id
from playlist_engine.adaptive.strategies import (
    FullStrategy,
    GuidedStrategy,
    PlaylistStrategy,
    StaticStrategy,
    get_strategy,
)

__all__ = [
    # Main engine
    "PlaylistEngine",
    # Strategies
    "PlaylistStrategy",
    "StaticStrategy",
    "GuidedStrategy",
    "FullStrategy",
    "get_strategy",
    # Remediation
    "RemediationRouter",
    "injected_entry_id",
]
