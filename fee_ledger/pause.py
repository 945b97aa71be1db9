"""
Pause Switch

Global halt flag for value-moving operations.
"""

from enum import Enum

from .storage import StorageInterface
from .errors import SystemPaused


class PauseState(Enum):
    ACTIVE = "active"
    PAUSED = "paused"


class PauseSwitch:
    """ACTIVE --pause--> PAUSED --unpause--> ACTIVE"""

    def __init__(self, storage: StorageInterface):
        self.storage = storage
        self.table_name = "controls"

    def state(self) -> PauseState:
        data = self.storage.load(self.table_name, "pause")
        return PauseState(data["state"]) if data else PauseState.ACTIVE

    def is_paused(self) -> bool:
        return self.state() == PauseState.PAUSED

    def set_state(self, state: PauseState) -> None:
        # Re-entering the current state is accepted as a plain set
        self.storage.save(self.table_name, "pause", {"state": state.value})

    def require_active(self) -> None:
        if self.is_paused():
            raise SystemPaused("Value-moving operations are paused")
