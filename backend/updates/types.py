"""
Shared types for container updates.

UpdateOutcome is the per-container record handed to whatever reports on an
update session; SessionReport is a thin grouping of those records by state.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, List, Optional

from utils.container_id import short_container_id
from utils.image_id import short_image_id


class UpdateState(Enum):
    """Final state of one container in an update session."""
    SCANNED = "scanned"
    UPDATED = "updated"
    FAILED = "failed"
    SKIPPED = "skipped"
    STALE = "stale"
    FRESH = "fresh"


class UpdateStage(Enum):
    """Stages of a container update, reported through ProgressCallback."""
    CHECKING = "checking"
    PRE_UPDATE = "pre_update"
    STOPPING_OLD = "stopping_old"
    CREATING_NEW = "creating_new"
    POST_UPDATE = "post_update"
    CLEANUP = "cleanup"
    COMPLETED = "completed"
    FAILED = "failed"


# Signature: def callback(stage: UpdateStage, message: str) -> None
ProgressCallback = Callable[[UpdateStage, str], None]


@dataclass
class UpdateOutcome:
    """
    Result of processing one container.

    Returned by UpdateExecutor instead of raising, so a caller can record a
    failure and move on to the next container.
    """
    container_id: str
    container_name: str
    image_name: str
    state: UpdateState
    old_image_id: str = ""
    new_image_id: str = ""
    new_container_id: Optional[str] = None
    error: Optional[str] = None

    @property
    def short_id(self) -> str:
        return short_container_id(self.container_id)

    @property
    def short_new_id(self) -> str:
        return short_container_id(self.new_container_id or "")

    def __str__(self) -> str:
        text = f"{self.container_name} ({self.short_id}): {self.state.value}"
        if self.state == UpdateState.UPDATED:
            text += f" {short_image_id(self.old_image_id)} -> {short_image_id(self.new_image_id)}"
        if self.error:
            text += f" - {self.error}"
        return text


@dataclass
class SessionReport:
    """Outcomes of an update session grouped by state."""
    outcomes: List[UpdateOutcome] = field(default_factory=list)

    def add(self, outcome: UpdateOutcome) -> None:
        self.outcomes.append(outcome)

    def _with_state(self, state: UpdateState) -> List[UpdateOutcome]:
        return [o for o in self.outcomes if o.state == state]

    @property
    def scanned(self) -> List[UpdateOutcome]:
        """Every container looked at, whatever happened to it."""
        return list(self.outcomes)

    @property
    def updated(self) -> List[UpdateOutcome]:
        return self._with_state(UpdateState.UPDATED)

    @property
    def failed(self) -> List[UpdateOutcome]:
        return self._with_state(UpdateState.FAILED)

    @property
    def skipped(self) -> List[UpdateOutcome]:
        return self._with_state(UpdateState.SKIPPED)

    @property
    def stale(self) -> List[UpdateOutcome]:
        """Stale containers that were not (yet) updated."""
        return self._with_state(UpdateState.STALE)

    @property
    def fresh(self) -> List[UpdateOutcome]:
        return self._with_state(UpdateState.FRESH)

    def counts(self) -> Dict[str, int]:
        counts = {state.value: 0 for state in UpdateState}
        for outcome in self.outcomes:
            counts[outcome.state.value] += 1
        counts[UpdateState.SCANNED.value] = len(self.outcomes)
        return counts
