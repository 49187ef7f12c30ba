"""Custom exceptions for the circuit solver."""


class SingularCircuitError(RuntimeError):
    """Raised by a strict solve when the circuit matrix is singular or non-finite."""


class CircuitValidationError(ValueError):
    """Raised when a circuit description violates the caller contract."""
