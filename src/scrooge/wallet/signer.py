import base64
import binascii

from nacl.exceptions import BadSignatureError
from nacl.signing import SigningKey, VerifyKey


class Signer:
    @staticmethod
    def sign(message: bytes, private_key: bytes) -> str:
        # The private_key is the raw seed from Wallet.signing_key.encode()
        key = SigningKey(private_key)
        signed = key.sign(message)
        return base64.b64encode(signed.signature).decode("utf-8")

    @staticmethod
    def verify(message: bytes, signature: str, public_key: bytes) -> bool:
        # The public_key is the raw key from Wallet.verify_key.encode()
        try:
            key = VerifyKey(public_key)
            key.verify(message, base64.b64decode(signature, validate=True))
            return True
        except (BadSignatureError, ValueError, TypeError):
            # binascii.Error and nacl's ValueError both derive from ValueError
            return False


def verify_signature(recipient: str, message: bytes, signature: str) -> bool:
    """Check that ``signature`` over ``message`` was made by the owner of ``recipient``.

    Recipients are base64-encoded Ed25519 verify keys, as produced by
    Wallet.get_address(). A malformed address or signature verifies as False.
    """
    try:
        public_key = base64.b64decode(recipient, validate=True)
    except (binascii.Error, ValueError, TypeError):
        return False
    return Signer.verify(message=message, signature=signature, public_key=public_key)
