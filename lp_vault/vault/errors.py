"""Vault revert reasons.

Each failure mode has its own exception class, so callers can catch
the case they care about, while the message stays the Solidity style
revert string of the vault that raised it.
"""

from lp_vault.revert_reason import TransactionReverted


class InvalidAmount(TransactionReverted):
    """Zero or negative contribution."""


class InvalidParameter(TransactionReverted):
    """Percent outside 0-100 or negative duration."""


class InsufficientProjectToken(TransactionReverted):
    """Accelerator vault does not hold enough project tokens to pair the ETH."""


class InsufficientBaseAsset(TransactionReverted):
    """Hodler vault does not hold enough ETH to pair the tokens."""


class InsufficientAllowance(TransactionReverted):
    """Depositor has not approved the vault for enough tokens."""


class InsufficientBalance(TransactionReverted):
    """Depositor does not hold the tokens."""


class NothingToClaim(TransactionReverted):
    """Holder has no unclaimed positions."""


class StillLocked(TransactionReverted):
    """Oldest unclaimed position has not matured."""


class NotOwner(TransactionReverted):
    """Admin function called by someone else than the owner."""
