"""
Fee-maximizing transaction selection for one independent group.

This module provides the FeeOptimizer, a branch-and-bound search over subsets
of mutually valid transactions, and a greedy heuristic selectable in its
place. Both run against speculative clones of the ledger and never mutate the
ledger they are given.
"""
import logging
from typing import Dict, FrozenSet, List, Optional, Sequence, Set, Tuple

from pydantic import BaseModel, Field

from scrooge.core.config import config
from scrooge.core.ledger import LedgerState
from scrooge.core.models.transaction import Transaction
from scrooge.core.models.utxo import UTXO
from scrooge.core.validation import TransactionValidator, TransactionValidationError

# Set up logging
logger = logging.getLogger(__name__)

OPTIMAL = "optimal"
GREEDY = "greedy"

# (available, chosen, accumulated fee, speculative ledger, consumed UTXOs)
_Node = Tuple[List[Transaction], List[Transaction], int, LedgerState, FrozenSet[UTXO]]


class SearchResult(BaseModel):
    transactions: List[Transaction] = Field(
        default_factory=list, description="Chosen transactions in a valid apply order"
    )
    total_fee: int = Field(0, description="Sum of the chosen transactions' fees")
    exact: bool = Field(
        True, description="False if the search was cut short or ran the greedy heuristic"
    )
    nodes_visited: int = Field(0, ge=0, description="Search nodes expanded")

    def txids(self) -> List[str]:
        return [tx.txid for tx in self.transactions]


class _SearchState:
    """Accumulator threaded through one search: the incumbent and the node budget."""

    def __init__(self, budget: int):
        self.budget = budget
        self.nodes = 0
        self.truncated = False
        self.best: Optional[List[Transaction]] = None
        self.best_fee = 0
        self.expanded: Set[FrozenSet[str]] = set()

    def offer(self, chosen: List[Transaction], fee: int):
        if self.best is None or fee > self.best_fee:
            self.best = list(chosen)
            self.best_fee = fee

    def beats_incumbent(self, bound: int) -> bool:
        return self.best is None or bound > self.best_fee


class FeeOptimizer:
    """
    Selects the subset of a group that maximizes total fee.

    The default mode is an exact branch-and-bound search limited by a node
    budget; past the budget the best solution found so far is returned and
    flagged as approximate. The greedy mode is a heuristic and is never exact
    for groups with more than one candidate.
    """

    def __init__(self, validator: Optional[TransactionValidator] = None,
                 node_budget: Optional[int] = None, mode: Optional[str] = None):
        """Initialize the optimizer.

        Args:
            validator: Validator used for every validity and fee decision
            node_budget: Maximum nodes expanded per group (default from config)
            mode: "optimal" or "greedy" (default from config)
        """
        self.validator = validator or TransactionValidator()
        self.node_budget = node_budget if node_budget is not None else config.search_node_budget
        self.mode = mode or config.selection_mode
        if self.node_budget <= 0:
            raise ValueError("Node budget must be greater than 0")
        if self.mode not in (OPTIMAL, GREEDY):
            raise ValueError(f"Unknown selection mode: {self.mode}")

    def optimize(self, group: Sequence[Transaction], ledger: LedgerState) -> SearchResult:
        """Find the fee-maximizing mutually valid subset of ``group``.

        Args:
            group: Candidate transactions, typically one independent group
            ledger: Authoritative ledger; only read, never mutated

        Returns:
            SearchResult: Chosen transactions in apply order with their fee
        """
        unique: Dict[str, Transaction] = {}
        for tx in group:
            unique.setdefault(tx.finalize(), tx)
        transactions = list(unique.values())

        touched = set()
        for tx in transactions:
            touched |= tx.claimed_utxos()
            touched.update(utxo for utxo, _ in tx.created_utxos())
        pool = ledger.restricted_to(touched)

        fees = self._heuristic_fees(transactions, pool)
        candidates = [tx for tx in transactions if tx.txid in fees]
        # Greedy-first ordering, ties keep batch order
        candidates = sorted(candidates, key=lambda tx: fees[tx.txid], reverse=True)

        if not candidates:
            return SearchResult()

        if self.mode == GREEDY:
            return self._greedy(candidates, pool)

        state = _SearchState(self.node_budget)
        self._search(candidates, pool, fees, state)

        result = SearchResult(
            transactions=state.best or [],
            total_fee=state.best_fee if state.best else 0,
            exact=not state.truncated,
            nodes_visited=state.nodes,
        )
        if state.truncated:
            logger.warning(
                f"Search budget of {self.node_budget} nodes exhausted on a group of "
                f"{len(candidates)} candidates; returning best found (fee={result.total_fee})"
            )
        else:
            logger.debug(
                f"Optimal selection of {len(result.transactions)}/{len(candidates)} "
                f"transactions, fee={result.total_fee}, nodes={state.nodes}"
            )
        return result

    def _heuristic_fees(self, transactions: List[Transaction], pool: LedgerState) -> Dict[str, int]:
        """Fee of every transaction against an overlay of ``pool`` plus all candidates' outputs.

        Transactions that can never be valid are left out: structurally
        invalid ones, ones already applied to the ledger, ones claiming a UTXO
        neither in the ledger nor produced by the group, and ones whose inputs
        cannot cover their outputs. The value of a UTXO does not depend on
        when it is created, so for every other transaction the overlay fee is
        its actual fee.
        """
        overlay = pool.clone()
        for tx in transactions:
            for utxo, output in tx.created_utxos():
                if not overlay.contains(utxo):
                    overlay.add(utxo, output)

        fees = {}
        for tx in transactions:
            try:
                self.validator.check_structure(tx)
            except TransactionValidationError as e:
                logger.debug(f"Dropping {tx.txid[:12]} before search: {e}")
                continue
            if any(pool.contains(utxo) for utxo, _ in tx.created_utxos()):
                logger.debug(f"Dropping {tx.txid[:12]} before search: already applied")
                continue
            if not all(overlay.contains(utxo) for utxo in tx.claimed_utxos()):
                logger.debug(f"Dropping {tx.txid[:12]} before search: unknown input")
                continue
            fee = self.validator.fee(tx, overlay)
            if fee < 0:
                logger.debug(f"Dropping {tx.txid[:12]} before search: negative fee {fee}")
                continue
            fees[tx.txid] = fee
        return fees

    def _search(self, candidates: List[Transaction], pool: LedgerState,
                fees: Dict[str, int], state: _SearchState):
        """Depth-first branch-and-bound over an explicit stack.

        A stack entry is a parent node plus the transaction to apply on top of
        it. Children are only materialized when popped, so each one is checked
        against the latest incumbent and the stack holds one ledger clone per
        level rather than one per sibling.
        """
        root: _Node = (candidates, [], 0, pool, frozenset())
        stack: List[Tuple[_Node, Optional[Transaction]]] = [(root, None)]

        while stack:
            (available, chosen, chosen_fee, node_pool, consumed), tx = stack.pop()

            # The ledger and the remaining candidates depend only on which
            # transactions were chosen, not on the order they were applied in.
            chosen_ids = frozenset(c.txid for c in chosen)
            if tx is not None:
                chosen_ids = chosen_ids | {tx.txid}
            if chosen_ids in state.expanded:
                continue

            if tx is not None:
                chosen_fee += self.validator.fee(tx, node_pool)
                chosen = chosen + [tx]
                node_pool = node_pool.clone()
                node_pool.apply(tx)
                consumed = consumed | tx.claimed_utxos()
                available = [
                    other for other in available
                    if other is not tx and not (other.claimed_utxos() & consumed)
                ]

            if state.nodes >= state.budget:
                state.truncated = True
                # chosen is mutually valid, so it is usable if nothing better was found
                state.offer(chosen, chosen_fee)
                return

            state.expanded.add(chosen_ids)
            state.nodes += 1

            valid = [c for c in available if self.validator.is_valid(c, node_pool)]
            if not valid:
                state.offer(chosen, chosen_fee)
                continue

            bound = chosen_fee + sum(fees[c.txid] for c in available)
            if not state.beats_incumbent(bound):
                continue

            node: _Node = (available, chosen, chosen_fee, node_pool, consumed)
            # Reversed so the highest-fee candidate is explored first
            for child in reversed(valid):
                stack.append((node, child))

    def _greedy(self, candidates: List[Transaction], pool: LedgerState) -> SearchResult:
        """Heuristic: commit every valid candidate in fee order, repeating until nothing changes."""
        pool = pool.clone()
        remaining = list(candidates)
        chosen: List[Transaction] = []
        total_fee = 0
        passes = 0

        progress = True
        while progress and remaining:
            progress = False
            passes += 1
            for tx in list(remaining):
                if not self.validator.is_valid(tx, pool):
                    continue
                total_fee += self.validator.fee(tx, pool)
                pool.apply(tx)
                chosen.append(tx)
                remaining.remove(tx)
                progress = True

        logger.debug(
            f"Greedy selection of {len(chosen)}/{len(candidates)} transactions, "
            f"fee={total_fee}, passes={passes}"
        )
        return SearchResult(
            transactions=chosen,
            total_fee=total_fee,
            exact=len(candidates) <= 1,
            nodes_visited=passes,
        )
