"""
Pytest configuration for Scrooge tests.

Sets up the Python path and provides shared wallets, ledgers and a builder for
signed, finalized transactions.
"""

import os
import sys

import pytest

# Add the src directory to the Python path to help with imports
src_root = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "src"))
if src_root not in sys.path:
    sys.path.insert(0, src_root)

from scrooge.core.ledger import LedgerState  # noqa: E402
from scrooge.core.models.transaction import Transaction  # noqa: E402
from scrooge.core.models.utxo import UTXO, Output  # noqa: E402
from scrooge.wallet import Wallet  # noqa: E402


def build_tx(spends, outputs, finalize=True):
    """Build a transaction.

    Args:
        spends: List of (UTXO, Wallet) pairs; the wallet signs that input
            (None leaves it unsigned)
        outputs: List of (address, value) pairs
        finalize: Whether to assign the identity

    Returns:
        Transaction: The signed transaction
    """
    tx = Transaction()
    for utxo, _ in spends:
        tx.add_input(utxo.txid, utxo.output_index)
    for address, value in outputs:
        tx.add_output(address, value)
    for i, (_, wallet) in enumerate(spends):
        if wallet is not None:
            wallet.sign_input(tx, i)
    if finalize:
        tx.finalize()
    return tx


def genesis_ledger(allocations):
    """Create a ledger from (address, value) allocations.

    Returns:
        Tuple[LedgerState, List[UTXO]]: The ledger and the UTXOs in allocation order
    """
    ledger = LedgerState()
    utxos = []
    for i, (address, value) in enumerate(allocations):
        utxo = UTXO(txid="genesis", output_index=i)
        ledger.add(utxo, Output(recipient=address, value=value))
        utxos.append(utxo)
    return ledger, utxos


@pytest.fixture
def wallets():
    """Create three test wallets named after the keys they hold."""
    return {"k1": Wallet.generate(), "k2": Wallet.generate(), "k3": Wallet.generate()}


@pytest.fixture
def single_utxo_ledger(wallets):
    """Ledger holding one UTXO worth 10 owned by k1."""
    ledger, utxos = genesis_ledger([(wallets["k1"].get_address(), 10)])
    return ledger, utxos[0]


@pytest.fixture
def make_tx():
    """Builder for signed transactions (see build_tx)."""
    return build_tx


@pytest.fixture
def make_ledger():
    """Builder for genesis ledgers (see genesis_ledger)."""
    return genesis_ledger
