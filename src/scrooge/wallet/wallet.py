from nacl.signing import SigningKey
from nacl.encoding import Base64Encoder

from scrooge.core.models.transaction import Transaction
from scrooge.wallet.signer import Signer


class Wallet:
    def __init__(self, signing_key: SigningKey):
        self.signing_key = signing_key
        self.verify_key = signing_key.verify_key

    @classmethod
    def generate(cls) -> "Wallet":
        key = SigningKey.generate()
        return cls(key)

    @classmethod
    def from_seed(cls, seed: bytes) -> "Wallet":
        return cls(SigningKey(seed))

    def get_address(self) -> str:
        return self.verify_key.encode(encoder=Base64Encoder).decode("utf-8")

    def sign(self, message: bytes) -> str:
        """Sign a message using the wallet's private key.

        Args:
            message: The message to sign

        Returns:
            str: Base64-encoded signature
        """
        return Signer.sign(message=message, private_key=self.signing_key.encode())

    def sign_input(self, tx: Transaction, index: int) -> Transaction:
        """Sign input ``index`` of an unfinalized transaction in place.

        Args:
            tx: Transaction whose outputs are already fixed
            index: Position of the input owned by this wallet

        Returns:
            Transaction: The same transaction, for chaining
        """
        signature = self.sign(tx.raw_data_to_sign(index))
        return tx.add_signature(signature, index)
