"""
Adaptive playlist sequencing engine.

Given a module's ordered learning units and a learner's mastery and gate
history, decides what the learner sees next: advance, retry, skip, hold, or
remediation content injected into the playlist.

Packages:
- core: Domain models and mastery helpers
- adaptive: Strategies, remediation routing, the session engine
- curriculum: Raw catalog record -> learning unit mapping
- persistence: Session snapshot store
- cli: Developer CLI
"""

from playlist_engine.adaptive import (
    FullStrategy,
    GuidedStrategy,
    PlaylistEngine,
    PlaylistStrategy,
    StaticStrategy,
    get_strategy,
)

__version__ = "1.0.0"

__all__ = [
    "PlaylistEngine",
    "PlaylistStrategy",
    "StaticStrategy",
    "GuidedStrategy",
    "FullStrategy",
    "get_strategy",
]
