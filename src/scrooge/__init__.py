"""
Scrooge: UTXO ledger with fee-maximizing batch selection.
"""
import logging
from typing import Optional

from scrooge.core.config import ScroogeConfig, config, load_config_from_env
from scrooge.core.ledger import LedgerState
from scrooge.core.models.transaction import Transaction
from scrooge.core.models.utxo import UTXO, Output
from scrooge.core.handler import LedgerHandler, EpochResult, handle_epoch

__version__ = "0.1.0"


def configure_logging(level: Optional[str] = None):
    """Send scrooge log records to stderr at ``level`` (default: config.log_level)."""
    logging.basicConfig(
        level=level or config.log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
