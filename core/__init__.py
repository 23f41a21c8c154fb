"""Copyright (c) 2025 DFlexy"""
"""https://github.com/DFlexy"""

from core.sync.orchestrator import SyncOrchestrator, episode_needs_update, is_usable_server
from core.sync.run_context import RunContext, RunStats, SyncHints, SyncOutcome

__all__ = [
    'SyncOrchestrator',
    'episode_needs_update',
    'is_usable_server',
    'RunContext',
    'RunStats',
    'SyncHints',
    'SyncOutcome',
]
