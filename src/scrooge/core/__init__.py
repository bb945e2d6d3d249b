"""
Core ledger, validation and selection components.
"""
