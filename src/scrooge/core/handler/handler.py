"""
Epoch handler for the Scrooge system.

This module provides the LedgerHandler, which takes an unordered batch of
candidate transactions, selects a fee-maximizing mutually valid subset and
commits it to the authoritative ledger.
"""
import logging
from concurrent.futures import ThreadPoolExecutor
from functools import partial
from typing import List, Optional, Sequence, Tuple

from pydantic import BaseModel, ConfigDict, Field

from scrooge.core.config import config as default_config, ScroogeConfig
from scrooge.core.ledger import LedgerState
from scrooge.core.models.transaction import Transaction
from scrooge.core.selection import ConflictGraphPartitioner, FeeOptimizer, SearchResult
from scrooge.core.validation import TransactionValidator

# Set up logging
logger = logging.getLogger(__name__)


class EpochResult(BaseModel):
    committed: List[Transaction] = Field(
        default_factory=list, description="Committed transactions in commit order"
    )
    ledger: LedgerState = Field(..., description="The authoritative ledger after the epoch")
    total_fee: int = Field(0, description="Sum of the committed transactions' fees")
    exact: bool = Field(True, description="False if any group was only approximated")
    group_count: int = Field(0, ge=0, description="Number of independent groups")
    dropped: List[Transaction] = Field(
        default_factory=list, description="Chosen transactions that failed re-validation"
    )

    model_config = ConfigDict(arbitrary_types_allowed=True)

    def txids(self) -> List[str]:
        return [tx.txid for tx in self.committed]


class LedgerHandler:
    """
    Epoch handler for the Scrooge system.

    This class owns the authoritative ledger and processes one batch at a
    time:
    - Partitioning the batch into independent groups
    - Optimizing every group against speculative ledger clones
    - Re-validating the chosen transactions against the authoritative ledger
    - Committing them sequentially
    """

    def __init__(self, ledger: LedgerState, validator: Optional[TransactionValidator] = None,
                 optimizer: Optional[FeeOptimizer] = None,
                 settings: Optional[ScroogeConfig] = None):
        """Initialize the handler.

        Args:
            ledger: Authoritative ledger, mutated by handle_txs
            validator: Validator for re-validation (default: Ed25519 signatures)
            optimizer: Optimizer for each group (built from settings if omitted)
            settings: Configuration (default: the global config)
        """
        self.ledger = ledger
        self.settings = settings or default_config
        self.validator = validator or TransactionValidator()
        self.optimizer = optimizer or FeeOptimizer(
            validator=self.validator,
            node_budget=self.settings.search_node_budget,
            mode=self.settings.selection_mode,
        )
        self.partitioner = ConflictGraphPartitioner()
        logger.info(
            f"Ledger handler initialized with mode={self.optimizer.mode}, "
            f"node_budget={self.optimizer.node_budget}, max_workers={self.settings.max_workers}"
        )

    def is_valid_tx(self, tx: Transaction) -> bool:
        """Validate a transaction against the authoritative ledger."""
        return self.validator.is_valid(tx, self.ledger)

    def handle_txs(self, batch: Sequence[Transaction]) -> EpochResult:
        """Process one epoch.

        Args:
            batch: Unordered candidate transactions

        Returns:
            EpochResult: Committed transactions in commit order and the ledger

        Raises:
            LedgerStateError: If committing breaks a ledger invariant
        """
        transactions = self._prepare_batch(batch)
        groups = self.partitioner.partition(transactions)

        for group in groups:
            if len(group) > self.settings.group_size_warning:
                logger.warning(
                    f"Group of {len(group)} entangled transactions exceeds "
                    f"{self.settings.group_size_warning}; search may be truncated"
                )

        results = self._optimize_groups(groups)

        committed: List[Transaction] = []
        dropped: List[Transaction] = []
        total_fee = 0
        for result in results:
            for tx in result.transactions:
                if not self.validator.is_valid(tx, self.ledger):
                    logger.warning(f"Transaction {tx.txid[:12]} failed re-validation; dropped")
                    dropped.append(tx)
                    continue
                total_fee += self.validator.fee(tx, self.ledger)
                self.ledger.apply(tx)
                committed.append(tx)

        exact = all(result.exact for result in results)
        logger.info(
            f"Epoch processed: batch={len(batch)}, groups={len(groups)}, "
            f"committed={len(committed)}, fee={total_fee}, exact={exact}"
        )
        return EpochResult(
            committed=committed,
            ledger=self.ledger,
            total_fee=total_fee,
            exact=exact,
            group_count=len(groups),
            dropped=dropped,
        )

    def _prepare_batch(self, batch: Sequence[Transaction]) -> List[Transaction]:
        """Finalize every transaction and keep the first occurrence of each identity."""
        seen = set()
        transactions = []
        for tx in batch:
            txid = tx.finalize()
            if txid in seen:
                logger.info(f"Duplicate transaction {txid[:12]} in batch ignored")
                continue
            seen.add(txid)
            transactions.append(tx)
        return transactions

    def _optimize_groups(self, groups: List[List[Transaction]]) -> List[SearchResult]:
        # Groups touch disjoint UTXOs, so each may run against its own clones.
        # map() keeps group order, which keeps the commit order deterministic.
        if self.settings.max_workers > 1 and len(groups) > 1:
            optimize = partial(self.optimizer.optimize, ledger=self.ledger)
            with ThreadPoolExecutor(max_workers=self.settings.max_workers) as executor:
                return list(executor.map(optimize, groups))
        return [self.optimizer.optimize(group, self.ledger) for group in groups]


def handle_epoch(batch: Sequence[Transaction], ledger: LedgerState,
                 settings: Optional[ScroogeConfig] = None) -> Tuple[List[Transaction], LedgerState]:
    """Process one epoch against ``ledger``.

    Args:
        batch: Unordered candidate transactions
        ledger: Authoritative ledger, mutated in place
        settings: Optional configuration

    Returns:
        Tuple[List[Transaction], LedgerState]: Committed transactions in
        commit order and the updated ledger
    """
    result = LedgerHandler(ledger, settings=settings).handle_txs(batch)
    return result.committed, result.ledger
