import hashlib
import json
from typing import Any, FrozenSet, List, Optional, Tuple

from pydantic import BaseModel, Field, PrivateAttr

from scrooge.core.models.utxo import UTXO, Output


class TransactionError(Exception):
    """Base exception for transaction construction errors."""

    pass


class TransactionFinalizedError(TransactionError):
    """Exception raised when a finalized transaction is modified."""

    pass


class TransactionNotFinalizedError(TransactionError):
    """Exception raised when the identity of an unfinalized transaction is requested."""

    pass


class Input(BaseModel):
    prev_txid: str = Field(..., description="ID of the transaction whose output is claimed")
    output_index: int = Field(..., ge=0, description="Index of the claimed output")
    signature: Optional[str] = Field(
        None, description="Base64 signature over the signing payload of this input"
    )

    model_config = {"frozen": True}

    def utxo(self) -> UTXO:
        return UTXO(txid=self.prev_txid, output_index=self.output_index)


class Transaction(BaseModel):
    """An ordered list of inputs and outputs with a lazily computed identity.

    The identity is the SHA-256 of the canonical encoding and is assigned by
    finalize(). Once finalized the transaction can no longer be modified, so
    the identity never changes.
    """

    inputs: List[Input] = Field(default_factory=list, description="UTXOs being consumed")
    outputs: List[Output] = Field(default_factory=list, description="New outputs being created")

    _txid: Optional[str] = PrivateAttr(default=None)
    _claimed: Optional[FrozenSet[UTXO]] = PrivateAttr(default=None)

    def __setattr__(self, name: str, value: Any):
        if name in type(self).model_fields:
            self._ensure_mutable()
        super().__setattr__(name, value)

    def _ensure_mutable(self):
        if self._txid is not None:
            raise TransactionFinalizedError(
                f"Transaction {self._txid} is finalized and cannot be modified"
            )

    def add_input(self, prev_txid: str, output_index: int) -> "Transaction":
        self._ensure_mutable()
        self.inputs.append(Input(prev_txid=prev_txid, output_index=output_index))
        return self

    def remove_input(self, index: int) -> "Transaction":
        self._ensure_mutable()
        del self.inputs[index]
        return self

    def add_output(self, recipient: str, value: int) -> "Transaction":
        self._ensure_mutable()
        self.outputs.append(Output(recipient=recipient, value=value))
        return self

    def add_signature(self, signature: str, index: int) -> "Transaction":
        self._ensure_mutable()
        self.inputs[index] = self.inputs[index].model_copy(update={"signature": signature})
        return self

    def raw_data_to_sign(self, index: int) -> bytes:
        """Canonical bytes an input's owner signs.

        Covers the claimed UTXO of input ``index`` and every output, but no
        signature, so inputs may be signed in any order.
        """
        if index < 0 or index >= len(self.inputs):
            raise IndexError(f"Input index {index} out of range")
        inp = self.inputs[index]
        data = {
            "prev_txid": inp.prev_txid,
            "output_index": inp.output_index,
            "outputs": [out.to_dict() for out in self.outputs],
        }
        return json.dumps(data, sort_keys=True).encode()

    def raw_tx(self) -> bytes:
        data = {
            "inputs": [inp.model_dump() for inp in self.inputs],
            "outputs": [out.to_dict() for out in self.outputs],
        }
        return json.dumps(data, sort_keys=True).encode()

    def finalize(self) -> str:
        """Compute and freeze the transaction identity.

        Calling finalize() again returns the stored identity unchanged. The
        inputs and outputs become read-only and field assignment raises
        TransactionFinalizedError.
        """
        if self._txid is None:
            self._txid = hashlib.sha256(self.raw_tx()).hexdigest()
            # Freeze the hashed content
            object.__setattr__(self, "inputs", tuple(self.inputs))
            object.__setattr__(self, "outputs", tuple(self.outputs))
        return self._txid

    @property
    def is_finalized(self) -> bool:
        return self._txid is not None

    @property
    def txid(self) -> str:
        if self._txid is None:
            raise TransactionNotFinalizedError("Transaction has no identity until finalized")
        return self._txid

    def claimed_utxos(self) -> FrozenSet[UTXO]:
        """Distinct UTXOs referenced by the inputs."""
        if self._claimed is not None:
            return self._claimed
        claimed = frozenset(inp.utxo() for inp in self.inputs)
        if self._txid is not None:
            self._claimed = claimed
        return claimed

    def created_utxos(self) -> List[Tuple[UTXO, Output]]:
        """The (UTXO, Output) pairs this transaction adds once applied."""
        txid = self.txid
        return [
            (UTXO(txid=txid, output_index=i), out) for i, out in enumerate(self.outputs)
        ]

    def __repr__(self) -> str:
        ident = self._txid[:12] if self._txid else "unfinalized"
        return f"Transaction({ident}, inputs={len(self.inputs)}, outputs={len(self.outputs)})"
