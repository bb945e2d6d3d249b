"""
Transaction validation for the Scrooge system.
"""
from scrooge.core.validation.validator import TransactionValidator, TransactionValidationError, \
    InputNotFoundError, InvalidSignatureError, DuplicateInputError, NegativeOutputError, \
    InsufficientFundsError, OutputAlreadyExistsError

__all__ = [
    "TransactionValidator",
    "TransactionValidationError",
    "InputNotFoundError",
    "InvalidSignatureError",
    "DuplicateInputError",
    "NegativeOutputError",
    "InsufficientFundsError",
    "OutputAlreadyExistsError"
]
