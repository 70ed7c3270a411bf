from typing import Callable, List, Tuple

from ticketing_core.platform.logging.loguru_io import Logger
from ticketing_core.platform.metrics.ticketing_metrics import metrics


class UndoJournal:
    """Compensating actions recorded by in-memory adapters, replayed newest first on rollback."""

    def __init__(self) -> None:
        self._entries: List[Tuple[str, Callable[[], None]]] = []

    def record(self, description: str, undo: Callable[[], None]) -> None:
        self._entries.append((description, undo))

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    def replay(self) -> None:
        while self._entries:
            description, undo = self._entries.pop()
            try:
                undo()
            except Exception as e:
                # Keep compensating the remaining entries; this one needs an operator
                metrics.record_compensation(result='failed')
                Logger.base.opt(exception=e).critical(
                    f'🚨 [COMPENSATION] Failed to undo "{description}": {type(e).__name__}: {e}'
                )
            else:
                metrics.record_compensation(result='succeeded')
                Logger.base.warning(f'↩️ [COMPENSATION] Undid "{description}"')
