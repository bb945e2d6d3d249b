"""
Epoch handler module for Scrooge.

This module provides the handler that selects and commits a batch of
transactions to the authoritative ledger.
"""
from scrooge.core.handler.handler import LedgerHandler, EpochResult, handle_epoch
