"""
Evaluation Progress Service

In-process registry of role agent progress per project. The evaluation
crew emits updates; SSE endpoints and background workers subscribe.
"""

import logging
from typing import Callable

from schemas.evaluation import ProgressUpdate

logger = logging.getLogger("intellibid.services.progress")


ProgressListener = Callable[[ProgressUpdate], None]


class ProgressService:
    """
    Keeps the latest status of every (vendor, role) pair per project.

    Subscribers receive the current snapshot immediately and every
    later update until they unsubscribe.
    """

    def __init__(self):
        self._progress: dict[str, list[ProgressUpdate]] = {}
        self._listeners: dict[str, set[ProgressListener]] = {}

    def subscribe(self, project_id: str, listener: ProgressListener) -> Callable[[], None]:
        """
        Register a listener for a project.

        Returns:
            A callable that removes the listener again
        """
        listeners = self._listeners.setdefault(project_id, set())
        listeners.add(listener)

        for update in list(self._progress.get(project_id, [])):
            self._notify(listener, update)

        def unsubscribe():
            current = self._listeners.get(project_id)
            if current is None:
                return
            current.discard(listener)
            if not current:
                del self._listeners[project_id]

        return unsubscribe

    def emit(self, update: ProgressUpdate) -> None:
        """Record an update, replacing the previous one for the same vendor and role."""
        updates = self._progress.setdefault(update.project_id, [])

        for i, existing in enumerate(updates):
            if existing.vendor_name == update.vendor_name and existing.agent_role == update.agent_role:
                updates[i] = update
                break
        else:
            updates.append(update)

        for listener in list(self._listeners.get(update.project_id, ())):
            self._notify(listener, update)

    def get_progress(self, project_id: str) -> list[ProgressUpdate]:
        """Current snapshot for a project."""
        return list(self._progress.get(project_id, []))

    def clear(self, project_id: str) -> None:
        """Forget recorded progress for a project (listeners stay subscribed)."""
        self._progress.pop(project_id, None)

    def listener_count(self, project_id: str) -> int:
        return len(self._listeners.get(project_id, ()))

    @staticmethod
    def _notify(listener: ProgressListener, update: ProgressUpdate) -> None:
        try:
            listener(update)
        except Exception as e:
            logger.warning(f"Progress listener failed for project {update.project_id}: {e}")


# Global instance shared by the API and the evaluation crew
progress_service = ProgressService()


def get_progress_service() -> ProgressService:
    """Get the global progress service."""
    return progress_service
