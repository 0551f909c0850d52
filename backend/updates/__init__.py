"""
Updates Module

The container replacement protocol.

Architecture:
- StalenessDetector: Is a newer image available?
- ShutdownSequencer: Signal, wait, remove, confirm removal
- RecreationEngine: Create from snapshot, restore networks, start
- CommandExecutor: Run hook commands inside containers
- UpdateExecutor: Runs the above for one container and reports an UpdateOutcome
"""

from updates.command_executor import CommandExecutor, ExecResult
from updates.recreation import RecreationEngine
from updates.shutdown import ShutdownSequencer
from updates.staleness import StalenessDetector
from updates.types import SessionReport, UpdateOutcome, UpdateStage, UpdateState
from updates.update_executor import UpdateExecutor

__all__ = [
    'CommandExecutor',
    'ExecResult',
    'RecreationEngine',
    'ShutdownSequencer',
    'StalenessDetector',
    'UpdateExecutor',
    'UpdateOutcome',
    'UpdateStage',
    'UpdateState',
    'SessionReport',
]
