"""
Data models for the Scrooge system.
"""
from scrooge.core.models.utxo import UTXO, Output
from scrooge.core.models.transaction import Transaction, Input, TransactionError, \
    TransactionFinalizedError, TransactionNotFinalizedError
