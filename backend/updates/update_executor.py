"""
Per-container update flow.

UpdateExecutor runs the whole replacement protocol for one container:

1. Check for a newer image (optionally pulling)
2. Run the pre-update hook in the old container
3. Stop and remove the old container, confirming removal
4. Recreate and start it from the snapshot
5. Run the post-update hook in the new container
6. Optionally remove the old image

Errors never escape update(); they end up in the returned UpdateOutcome so a
caller processing many containers can record them and continue. There is no
rollback: if recreation fails after removal the outcome says so and the
container is gone.
"""

import logging
from typing import TYPE_CHECKING, Iterable, Optional

from container.errors import ContainerError
from container.models import Container
from updates.types import ProgressCallback, SessionReport, UpdateOutcome, UpdateStage, UpdateState

if TYPE_CHECKING:
    from container.client import ContainerClient

logger = logging.getLogger(__name__)


class UpdateExecutor:
    """Applies image updates to containers through a ContainerClient."""

    def __init__(
        self,
        client: 'ContainerClient',
        monitor_only: bool = False,
        progress_callback: Optional[ProgressCallback] = None,
    ):
        """
        Args:
            client: Container client (carries settings and daemon connection)
            monitor_only: Only report staleness, never replace containers
            progress_callback: Called at each stage transition
        """
        self.client = client
        self.settings = client.settings
        self.monitor_only = monitor_only
        self.progress_callback = progress_callback

    def _progress(self, stage: UpdateStage, message: str) -> None:
        if self.progress_callback:
            self.progress_callback(stage, message)

    def update(self, container: Container) -> UpdateOutcome:
        """
        Update one container if its image changed.

        Returns:
            UpdateOutcome; FRESH when nothing changed, STALE in monitor-only
            mode, UPDATED on success, FAILED with the error otherwise
        """
        outcome = UpdateOutcome(
            container_id=container.id,
            container_name=container.name,
            image_name=container.image_name,
            state=UpdateState.SCANNED,
            old_image_id=container.image_id,
        )
        label = f"{container.name} ({container.short_id})"

        try:
            self._progress(UpdateStage.CHECKING, f"Checking {label} for a newer image")
            new_image_id, stale = self.client.staleness.latest_image_id(container)
            outcome.new_image_id = new_image_id
        except ContainerError as e:
            logger.error(f"Unable to check {label} for updates: {e}")
            return self._failed(outcome, e)

        if not stale:
            outcome.state = UpdateState.FRESH
            return outcome

        if self.monitor_only:
            logger.info(f"Update available for {label} (monitor only)")
            outcome.state = UpdateState.STALE
            return outcome

        try:
            self._run_hook(UpdateStage.PRE_UPDATE, container.id, container.pre_update_command, label)

            self._progress(UpdateStage.STOPPING_OLD, f"Stopping {label}")
            self.client.stop_container(container, self.settings.stop_timeout)

            self._progress(UpdateStage.CREATING_NEW, f"Recreating {container.name}")
            new_id = self.client.start_container(container)
            outcome.new_container_id = new_id

            self._run_hook(UpdateStage.POST_UPDATE, new_id, container.post_update_command, label)
        except ContainerError as e:
            logger.error(f"Update of {label} failed: {e}")
            return self._failed(outcome, e)

        outcome.state = UpdateState.UPDATED
        logger.info(f"Updated {container.name} ({container.short_id} -> {outcome.short_new_id})")

        if self.settings.cleanup:
            self._progress(UpdateStage.CLEANUP, f"Removing old image of {container.name}")
            try:
                self.client.remove_image(container)
            except ContainerError as e:
                # The update itself succeeded; a leftover image is only noise
                logger.warning(f"Failed to remove old image for {label}: {e}")

        self._progress(UpdateStage.COMPLETED, f"Update of {container.name} completed")
        return outcome

    def update_all(self, containers: Iterable[Container]) -> SessionReport:
        """Update each container in turn and collect the outcomes."""
        report = SessionReport()
        for container in containers:
            report.add(self.update(container))
        return report

    def _run_hook(self, stage: UpdateStage, container_id: str, command: str, label: str) -> None:
        if not (self.settings.lifecycle_hooks and command):
            return

        self._progress(stage, f"Running {stage.value} hook for {label}")
        logger.info(f"Executing {stage.value} command for {label}")
        try:
            result = self.client.execute_command(container_id, command)
        except ContainerError as e:
            logger.warning(f"{stage.value} command for {label} could not run: {e}, continuing")
            return
        if not result.succeeded:
            logger.warning(f"{stage.value} command for {label} exited with {result.exit_code}, continuing")

    def _failed(self, outcome: UpdateOutcome, error: Exception) -> UpdateOutcome:
        outcome.state = UpdateState.FAILED
        outcome.error = str(error)
        self._progress(UpdateStage.FAILED, f"Update of {outcome.container_name} failed: {error}")
        return outcome
