from pydantic import BaseModel, Field


class UTXO(BaseModel):
    """Reference to a spendable output: the producing transaction and the output's position."""

    txid: str = Field(..., description="ID of the transaction that created the output")
    output_index: int = Field(
        ..., ge=0, description="output_index of the output in the transaction"
    )

    model_config = {"frozen": True}

    def key(self) -> str:
        return f"{self.txid}:{self.output_index}"

    def __str__(self) -> str:
        return self.key()


class Output(BaseModel):
    """Value assigned to a recipient.

    Values are integer minor units. Negative values are representable so that
    the validator, not the model, decides that such a transaction is invalid.
    """

    recipient: str = Field(..., description="Address that can spend this output")
    value: int = Field(..., description="Amount in minor units")

    model_config = {"frozen": True}

    def to_dict(self) -> dict:
        return {"recipient": self.recipient, "value": self.value}
