from scrooge.wallet.signer import Signer, verify_signature
from scrooge.wallet.wallet import Wallet
