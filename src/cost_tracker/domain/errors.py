"""Error types raised by the cost tracker core."""


class CostTrackerError(Exception):
    """Base class for cost tracker errors."""


class ValidationError(CostTrackerError):
    """Raised when input is missing or invalid, before any mutation happens."""

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.field = field


class DuplicateComponentError(CostTrackerError):
    """Raised when a composite already holds a component for the same item."""

    def __init__(self, candidate_id: object) -> None:
        super().__init__(f"Component {candidate_id} is already staged")
        self.candidate_id = candidate_id


class CommitInProgressError(CostTrackerError):
    """Raised when a commit is requested while another one is in flight."""


class NotFoundError(CostTrackerError):
    """Raised when a referenced entity does not exist."""

    def __init__(self, kind: str, entity_id: object) -> None:
        super().__init__(f"{kind} {entity_id} not found")
        self.kind = kind
        self.entity_id = entity_id


class PersistenceError(CostTrackerError):
    """Raised when the external store rejects or fails a request."""
