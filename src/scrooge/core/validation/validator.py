"""
Transaction validation rules for the Scrooge system.

This module provides the stateless TransactionValidator that decides whether a
transaction is acceptable against a given ledger snapshot.
"""

import logging
from typing import Callable, Optional

from scrooge.core.ledger import LedgerState
from scrooge.core.models.transaction import Transaction
from scrooge.wallet.signer import verify_signature as default_verify_signature

# Set up logging
logger = logging.getLogger(__name__)

SignatureVerifier = Callable[[str, bytes, str], bool]


class TransactionValidationError(Exception):
    """Base exception for transaction validation errors."""

    pass


class InputNotFoundError(TransactionValidationError):
    """Exception raised when a transaction input UTXO is not in the ledger."""

    pass


class InvalidSignatureError(TransactionValidationError):
    """Exception raised when an input signature is missing or invalid."""

    pass


class DuplicateInputError(TransactionValidationError):
    """Exception raised when a transaction claims the same UTXO twice."""

    pass


class NegativeOutputError(TransactionValidationError):
    """Exception raised when a transaction has a negative output value."""

    pass


class InsufficientFundsError(TransactionValidationError):
    """Exception raised when transaction inputs do not cover its outputs."""

    pass


class OutputAlreadyExistsError(TransactionValidationError):
    """Exception raised when a UTXO the transaction would create is already in the ledger."""

    pass


class TransactionValidator:
    """
    Stateless rule engine for transactions.

    A transaction is valid against a ledger if:
    (1) every UTXO it claims is in the ledger,
    (2) every input signature verifies against the claimed output's recipient,
    (3) no UTXO is claimed more than once,
    (4) every output value is non-negative,
    (5) the sum of its input values is at least the sum of its output values, and
    (6) none of the UTXOs it would create is already in the ledger.

    Rule 6 rejects a replayed transaction, which only a transaction without
    inputs can get past rule 1 with. Unfinalized transactions have no
    identity yet and skip it.
    """

    def __init__(self, verify_signature: Optional[SignatureVerifier] = None):
        """Initialize the validator.

        Args:
            verify_signature: Callable (recipient, message, signature) -> bool.
                Defaults to Ed25519 verification of base64 addresses.
        """
        self.verify_signature = verify_signature or default_verify_signature

    def check(self, tx: Transaction, pool: LedgerState):
        """Run every rule and raise on the first failure.

        Args:
            tx: Transaction to validate
            pool: Ledger snapshot to validate against

        Raises:
            TransactionValidationError: The specific rule that failed
        """
        self._check_claimed_outputs_in_pool(tx, pool)
        self._check_input_signatures(tx, pool)
        self.check_structure(tx)
        self._check_sufficient_funds(tx, pool)
        self._check_created_outputs_absent(tx, pool)

    def check_structure(self, tx: Transaction):
        """Run the rules that do not depend on a ledger (3 and 4).

        Raises:
            DuplicateInputError: If a UTXO is claimed more than once
            NegativeOutputError: If an output value is negative
        """
        if len(tx.claimed_utxos()) != len(tx.inputs):
            raise DuplicateInputError("Transaction claims the same UTXO more than once")

        for i, out in enumerate(tx.outputs):
            if out.value < 0:
                raise NegativeOutputError(f"Output {i} has negative value {out.value}")

    def is_valid(self, tx: Transaction, pool: LedgerState) -> bool:
        """Return True if the transaction is valid against ``pool``.

        Pure function of its arguments; never mutates the pool.
        """
        try:
            self.check(tx, pool)
        except TransactionValidationError as e:
            logger.debug(f"Transaction {_label(tx)} rejected: {e}")
            return False
        return True

    def input_sum(self, tx: Transaction, pool: LedgerState) -> int:
        return sum(pool.get(inp.utxo()).value for inp in tx.inputs)

    def output_sum(self, tx: Transaction) -> int:
        return sum(out.value for out in tx.outputs)

    def fee(self, tx: Transaction, pool: LedgerState) -> int:
        """Input sum minus output sum.

        Only defined when every claimed UTXO is in ``pool``; otherwise the
        ledger raises UTXONotFoundError.
        """
        return self.input_sum(tx, pool) - self.output_sum(tx)

    def _check_claimed_outputs_in_pool(self, tx: Transaction, pool: LedgerState):
        for inp in tx.inputs:
            if not pool.contains(inp.utxo()):
                raise InputNotFoundError(f"Input UTXO not found: {inp.utxo().key()}")

    def _check_input_signatures(self, tx: Transaction, pool: LedgerState):
        for i, inp in enumerate(tx.inputs):
            if inp.signature is None:
                raise InvalidSignatureError(f"Input {i} is not signed")

            prev_out = pool.get(inp.utxo())
            message = tx.raw_data_to_sign(i)
            if not self.verify_signature(prev_out.recipient, message, inp.signature):
                raise InvalidSignatureError(f"Invalid signature on input {i}")

    def _check_sufficient_funds(self, tx: Transaction, pool: LedgerState):
        total_input = self.input_sum(tx, pool)
        total_output = self.output_sum(tx)
        if total_input < total_output:
            raise InsufficientFundsError(
                f"Insufficient funds: {total_input} < {total_output}"
            )

    def _check_created_outputs_absent(self, tx: Transaction, pool: LedgerState):
        if not tx.is_finalized:
            return
        for utxo, _ in tx.created_utxos():
            if pool.contains(utxo):
                raise OutputAlreadyExistsError(f"Output already in ledger: {utxo.key()}")


def _label(tx: Transaction) -> str:
    return tx.txid[:12] if tx.is_finalized else "<unfinalized>"
