"""Exceptions raised by the race simulation core."""


class RaceSimError(Exception):
    """Base class for all simulation errors."""


class ConfigurationError(RaceSimError):
    """Initialization input is missing or invalid. No race state is created."""


class InvalidReferenceError(RaceSimError):
    """A driver id does not belong to the current race."""

    def __init__(self, driver_id: str):
        super().__init__(f"Unknown driver id: {driver_id!r}")
        self.driver_id = driver_id


class InvalidDecisionError(RaceSimError):
    """A decision submission does not match the pending decision."""


class StateViolationError(RaceSimError):
    """An operation is not valid in the engine's current state."""

    def __init__(self, operation: str, status: str):
        super().__init__(f"Cannot {operation} while race is {status}")
        self.operation = operation
        self.status = status
