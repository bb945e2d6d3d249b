"""
UTXO ledger state for the Scrooge system.
"""
from scrooge.core.ledger.ledger import LedgerState, LedgerStateError, UTXONotFoundError, \
    DuplicateUTXOError

__all__ = [
    "LedgerState",
    "LedgerStateError",
    "UTXONotFoundError",
    "DuplicateUTXOError"
]
