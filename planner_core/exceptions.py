"""Custom exceptions for the planner core."""


class PlannerError(Exception):
    """Base exception for all planner errors."""

    pass


class ValidationError(PlannerError):
    """Raised when input is rejected before any scheduling attempt."""

    pass


class NotFoundError(PlannerError):
    """Raised when a directly referenced record does not exist."""

    def __init__(self, entity: str, entity_id: int) -> None:
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} not found: {entity_id}")


class ConfigurationError(PlannerError):
    """Raised when environment configuration cannot be parsed."""

    pass
