"""Revert reasons.

Vault checks and failed vault transactions both surface as
:py:class:`eth_defi.revert_reason.TransactionReverted`.
"""

from eth_defi.revert_reason import TransactionReverted
from eth_tester.exceptions import TransactionFailed
from web3.exceptions import ContractLogicError


#: What eth-tester and web3 raise when a call or a gas estimation reverts
REVERT_EXCEPTIONS = (ContractLogicError, TransactionFailed)


def get_revert_message(e: Exception) -> str:
    """Human readable revert reason of a web3 or eth-tester exception.

    E.g. ``execution reverted: UniswapV2Router: EXPIRED``.
    """
    if e.args and isinstance(e.args[0], str):
        return e.args[0]
    return f"<could not extract the revert reason from {e.__class__.__name__}>"


def require(condition: bool, reason: str, exception_class: type[TransactionReverted] = TransactionReverted):
    """Revert with a reason if the condition does not hold.

    Example:

    .. code-block:: python

        require(amount > 0, "HodlerVault: UBA required to mint LP", InvalidAmount)

    :param condition:
        Must be truthy for the call to continue

    :param reason:
        Revert reason message

    :param exception_class:
        Subclass of :py:class:`TransactionReverted` to raise

    :raise TransactionReverted:
        If the condition is falsy
    """
    if not condition:
        raise exception_class(reason)
