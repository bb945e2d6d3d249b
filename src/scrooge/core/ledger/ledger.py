"""
UTXO ledger state for the Scrooge system.

This module provides the LedgerState class, an in-memory mapping from UTXO
to Output that supports point queries, atomic application of a transaction
and cheap snapshotting for speculative execution.
"""

import logging
from typing import Dict, Iterable, Iterator, List, Optional, Tuple

from scrooge.core.models.utxo import UTXO, Output
from scrooge.core.models.transaction import Transaction

# Set up logging
logger = logging.getLogger(__name__)


class LedgerStateError(Exception):
    """Base exception for ledger invariant violations."""

    pass


class UTXONotFoundError(LedgerStateError):
    """Exception raised when a UTXO expected in the ledger is absent."""

    pass


class DuplicateUTXOError(LedgerStateError):
    """Exception raised when a UTXO is added twice."""

    pass


class LedgerState:
    """
    The set of unspent transaction outputs.

    Only one authoritative instance persists across epochs; every speculative
    branch works on a clone. Errors raised here signal a broken invariant in
    the caller and are not meant to be recovered from.
    """

    def __init__(self, entries: Optional[Dict[UTXO, Output]] = None):
        """Initialize the ledger.

        Args:
            entries: Optional initial UTXO to Output mapping (copied)
        """
        self._utxos: Dict[UTXO, Output] = dict(entries) if entries else {}

    def contains(self, utxo: UTXO) -> bool:
        return utxo in self._utxos

    def get(self, utxo: UTXO) -> Output:
        """Get the output recorded for a UTXO.

        Raises:
            UTXONotFoundError: If the UTXO is not in the ledger
        """
        try:
            return self._utxos[utxo]
        except KeyError:
            raise UTXONotFoundError(f"UTXO not found: {utxo.key()}") from None

    def add(self, utxo: UTXO, output: Output):
        """Add a new UTXO.

        Raises:
            DuplicateUTXOError: If the UTXO is already present
        """
        if utxo in self._utxos:
            raise DuplicateUTXOError(f"UTXO already present: {utxo.key()}")
        self._utxos[utxo] = output

    def remove(self, utxo: UTXO):
        """Remove a UTXO.

        Raises:
            UTXONotFoundError: If the UTXO is not in the ledger
        """
        try:
            del self._utxos[utxo]
        except KeyError:
            raise UTXONotFoundError(f"UTXO not found: {utxo.key()}") from None

    def apply(self, tx: Transaction):
        """Apply a transaction: remove every claimed UTXO, then add its outputs.

        The transaction must have been validated against this ledger first.

        Args:
            tx: Finalized transaction to apply
        """
        created = tx.created_utxos()
        for inp in tx.inputs:
            self.remove(inp.utxo())
        for utxo, output in created:
            self.add(utxo, output)
        logger.debug(f"Applied {tx.txid[:12]}: -{len(tx.inputs)} +{len(created)} UTXOs")

    def clone(self) -> "LedgerState":
        """Return an independent copy.

        UTXO and Output are immutable, so copying the mapping is a full value copy.
        """
        return LedgerState(self._utxos)

    def restricted_to(self, utxos: Iterable[UTXO]) -> "LedgerState":
        """Return a copy holding only the given UTXOs that are present."""
        return LedgerState(
            {utxo: self._utxos[utxo] for utxo in utxos if utxo in self._utxos}
        )

    def balance(self, recipient: str) -> int:
        """Get the total unspent value owned by an address."""
        return sum(out.value for out in self._utxos.values() if out.recipient == recipient)

    def utxos(self) -> List[Tuple[UTXO, Output]]:
        return list(self._utxos.items())

    def __contains__(self, utxo: UTXO) -> bool:
        return self.contains(utxo)

    def __iter__(self) -> Iterator[UTXO]:
        return iter(self._utxos)

    def __len__(self) -> int:
        return len(self._utxos)

    def __eq__(self, other) -> bool:
        if not isinstance(other, LedgerState):
            return NotImplemented
        return self._utxos == other._utxos

    def __repr__(self) -> str:
        return f"LedgerState(size={len(self._utxos)})"
