"""
Ownership Gate

The single administrative authority. The owner identity lives in storage
alongside the rest of the ledger state and is checked explicitly at the
entry of every privileged operation.
"""

from typing import Optional

from .storage import StorageInterface
from .errors import NotInitialized, Unauthorized


class OwnershipGate:
    """Checks that a caller is the current owner"""

    def __init__(self, storage: StorageInterface):
        self.storage = storage
        self.table_name = "controls"

    def owner(self) -> Optional[str]:
        data = self.storage.load(self.table_name, "owner")
        return data["account"] if data else None

    def set_owner(self, account: str) -> None:
        """Record the owner; used once at initialization"""
        self.storage.save(self.table_name, "owner", {"account": account})

    def require_owner(self, caller: str) -> None:
        """
        Raises:
            NotInitialized: If no owner has been recorded yet
            Unauthorized: If caller is not the owner
        """
        owner = self.owner()
        if owner is None:
            raise NotInitialized("Ledger has not been initialized")
        if caller != owner:
            raise Unauthorized(f"Caller {caller} is not the owner")
