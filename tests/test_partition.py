"""
Tests for the conflict/dependency partitioner.
"""
import random
from itertools import combinations

import pytest

from scrooge.core.models.transaction import Transaction, TransactionNotFinalizedError
from scrooge.core.models.utxo import UTXO
from scrooge.core.selection import ConflictGraphPartitioner, DisjointSet, related


def unsigned_tx(inputs, outputs):
    tx = Transaction()
    for txid, index in inputs:
        tx.add_input(txid, index)
    for recipient, value in outputs:
        tx.add_output(recipient, value)
    tx.finalize()
    return tx


def random_batch(rng, size):
    """Batch of transactions spending genesis outputs and each other's outputs."""
    spendable = [("genesis", i) for i in range(6)]
    batch = []
    for n in range(size):
        inputs = rng.sample(spendable, rng.randint(1, 2))
        tx = unsigned_tx(inputs, [(f"addr{n}", rng.randint(0, 5)) for _ in range(rng.randint(1, 2))])
        spendable.extend((tx.txid, i) for i in range(len(tx.outputs)))
        batch.append(tx)
    rng.shuffle(batch)
    return batch


def test_disjoint_set():
    components = DisjointSet(6)
    assert components.union(0, 3)
    assert components.union(3, 5)
    assert not components.union(5, 0)
    assert components.union(1, 2)

    assert components.find(5) == components.find(0)
    assert components.find(1) != components.find(0)
    assert components.groups() == [[0, 3, 5], [1, 2], [4]]


def test_empty_batch():
    assert ConflictGraphPartitioner().partition([]) == []


def test_double_spend_shares_group():
    t1 = unsigned_tx([("genesis", 0)], [("a", 9)])
    t2 = unsigned_tx([("genesis", 0)], [("b", 2)])
    other = unsigned_tx([("genesis", 1)], [("c", 1)])

    groups = ConflictGraphPartitioner().partition([t1, other, t2])

    assert groups == [[t1, t2], [other]]


def test_chain_shares_group():
    t1 = unsigned_tx([("genesis", 0)], [("k2", 8)])
    t2 = unsigned_tx([(t1.txid, 0)], [("k3", 5)])
    t3 = unsigned_tx([(t2.txid, 0)], [("k1", 5)])
    other = unsigned_tx([("genesis", 1)], [("c", 1)])

    groups = ConflictGraphPartitioner().partition([t3, other, t1, t2])

    assert groups == [[t3, t1, t2], [other]]


def test_unfinalized_transaction_rejected():
    tx = Transaction().add_input("genesis", 0).add_output("a", 1)
    with pytest.raises(TransactionNotFinalizedError):
        ConflictGraphPartitioner().partition([tx])


@pytest.mark.parametrize("seed", range(8))
def test_partition_property(seed):
    """Groups are a true partition and no relation crosses group boundaries."""
    rng = random.Random(seed)
    batch = random_batch(rng, 12)

    groups = ConflictGraphPartitioner().partition(batch)

    members = [tx.txid for group in groups for tx in group]
    assert sorted(members) == sorted(tx.txid for tx in batch)
    assert len(members) == len(set(members))

    group_of = {tx.txid: n for n, group in enumerate(groups) for tx in group}
    for a, b in combinations(batch, 2):
        if group_of[a.txid] != group_of[b.txid]:
            assert not related(a, b)
            assert not (a.claimed_utxos() & b.claimed_utxos())


@pytest.mark.parametrize("seed", range(4))
def test_groups_are_connected(seed):
    """Every group is connected under the pairwise relation, so groups are minimal."""
    rng = random.Random(seed)
    groups = ConflictGraphPartitioner().partition(random_batch(rng, 10))

    for group in groups:
        reached = {group[0].txid}
        frontier = [group[0]]
        while frontier:
            current = frontier.pop()
            for tx in group:
                if tx.txid not in reached and related(current, tx):
                    reached.add(tx.txid)
                    frontier.append(tx)
        assert reached == {tx.txid for tx in group}


def test_related_is_symmetric():
    t1 = unsigned_tx([("genesis", 0)], [("k2", 8)])
    t2 = unsigned_tx([(t1.txid, 0)], [("k3", 5)])
    t3 = unsigned_tx([("genesis", 1)], [("k3", 5)])

    assert related(t1, t2) and related(t2, t1)
    assert not related(t1, t3) and not related(t3, t1)
    assert related(t1, unsigned_tx([("genesis", 0)], [("x", 1)]))
