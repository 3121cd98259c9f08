"""Vault fee modes."""

import enum

from lp_vault.revert_reason import require
from lp_vault.vault.errors import InvalidParameter


class FeeDisposalMode(enum.Enum):
    """What the vault does with the purchase fee.

    - Swap then forward: the fee is sold on the pool and the proceeds are sent on.
      For the accelerator this is buying the project token, creating buy pressure.
    - Forward raw: the fee is sent on as is.
    """

    #: Send the fee as is to the fee destination.
    #:
    #: Accelerator: ETH to the hodler vault. Hodler vault: tokens to the fee receiver.
    forward_raw = "forward_raw"

    #: Swap the fee to the other pair token and send the output to the fee destination.
    swap_then_forward = "swap_then_forward"

    def is_swap(self) -> bool:
        """Does this mode touch the pool?"""
        return self == FeeDisposalMode.swap_then_forward


def validate_percent(value: int, name: str, exception_class=InvalidParameter):
    """Check a fee percent is an integer in [0, 100].

    :raise InvalidParameter:
        If the value is out of range
    """
    assert type(value) == int, f"{name}: expected int, got {type(value)}: {value}"
    require(0 <= value <= 100, f"{name} must be between 0 and 100, got {value}", exception_class)


def compute_fee(gross: int, percent: int) -> tuple[int, int]:
    """Split an amount to fee and net.

    The fee rounds down, so the depositor is never charged more than ``percent``.

    .. code-block:: python

        fee, net = compute_fee(10**18, 10)
        assert fee == 10**17

    :param gross:
        Raw amount

    :param percent:
        Fee percent, 0-100

    :return:
        Tuple (fee, net)
    """
    validate_percent(percent, "percent")
    fee = gross * percent // 100
    return fee, gross - fee
