"""Exceptions raised by the scheduling core."""


class RotaplanError(Exception):
    """Base exception for rotaplan operations"""
    pass


class NotFoundError(RotaplanError):
    """Raised when a referenced record does not exist"""
    pass


class ShiftDefinitionNotFoundError(NotFoundError):
    """Raised when an explicit shift-time definition id cannot be resolved"""

    def __init__(self, definition_id: str):
        super().__init__(f"Shift time definition not found: {definition_id}")
        self.definition_id = definition_id


class RosterNotFoundError(NotFoundError):
    """Raised when a roster id cannot be resolved"""

    def __init__(self, roster_id: str):
        super().__init__(f"Roster not found: {roster_id}")
        self.roster_id = roster_id


class PartnershipNotFoundError(NotFoundError):
    """Raised when a roster references a partnership that does not exist"""

    def __init__(self, partnership_id: str):
        super().__init__(f"Partnership not found: {partnership_id}")
        self.partnership_id = partnership_id


class StoreError(RotaplanError):
    """Raised when a read or write against the data store fails"""
    pass


class EntryLockedError(RotaplanError):
    """Raised when a locked daily time entry would be changed"""

    def __init__(self, worker_id: str, entry_date):
        super().__init__(f"Time entry for {worker_id} on {entry_date} is locked")
        self.worker_id = worker_id
        self.entry_date = entry_date
