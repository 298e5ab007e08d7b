"""
Transfer simulation exceptions.
"""

from coffre.domain.exceptions.base import CoffreException


class InvalidAmountError(CoffreException):
    """Raised when a coin amount is malformed or not strictly positive."""

    def __init__(self, value: object, reason: str = "must be a positive decimal"):
        self.value = value
        super().__init__(f"Invalid amount {value!r}: {reason}", code="INVALID_AMOUNT")


class InvalidTransferRequestError(CoffreException):
    """Raised when transfer parameters fail validation."""

    def __init__(self, field: str, reason: str):
        self.field = field
        self.reason = reason
        super().__init__(
            f"Invalid transfer request ({field}): {reason}",
            code="INVALID_TRANSFER_REQUEST",
            details={"field": field},
        )


class SimulationError(CoffreException):
    """Raised for unexpected failures while executing a simulation."""

    def __init__(self, message: str):
        super().__init__(message, code="SIMULATION_ERROR")
