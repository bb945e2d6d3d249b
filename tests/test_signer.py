from scrooge.wallet.wallet import Wallet
from scrooge.wallet.signer import Signer, verify_signature


def test_sign_and_verify_roundtrip():
    wallet = Wallet.generate()
    message = b"test message"
    signature = Signer.sign(message, wallet.signing_key.encode())
    assert Signer.verify(message, signature, wallet.verify_key.encode()) is True


def test_verify_fails_on_tampered_message():
    wallet = Wallet.generate()
    message = b"original"
    tampered = b"original but different"
    signature = Signer.sign(message, wallet.signing_key.encode())
    assert Signer.verify(tampered, signature, wallet.verify_key.encode()) is False


def test_verify_fails_on_wrong_key():
    wallet_1 = Wallet.generate()
    wallet_2 = Wallet.generate()
    message = b"important message"
    signature = Signer.sign(message, wallet_1.signing_key.encode())
    assert Signer.verify(message, signature, wallet_2.verify_key.encode()) is False


def test_verify_fails_on_garbage_signature():
    wallet = Wallet.generate()
    assert Signer.verify(b"msg", "not base64!!", wallet.verify_key.encode()) is False
    assert Signer.verify(b"msg", "c2hvcnQ=", wallet.verify_key.encode()) is False


def test_verify_signature_by_address():
    wallet = Wallet.generate()
    signature = wallet.sign(b"payload")

    assert verify_signature(wallet.get_address(), b"payload", signature) is True
    assert verify_signature(Wallet.generate().get_address(), b"payload", signature) is False


def test_verify_signature_rejects_malformed_address():
    wallet = Wallet.generate()
    signature = wallet.sign(b"payload")

    assert verify_signature("not an address", b"payload", signature) is False
    assert verify_signature("c2hvcnQ=", b"payload", signature) is False
