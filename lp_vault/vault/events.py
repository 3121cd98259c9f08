"""Vault events.

Recorded on the vault that emitted them, see :py:meth:`lp_vault.vault.base.LockedLPVault.get_events`.
"""

from dataclasses import dataclass

from eth_typing import HexAddress


@dataclass(frozen=True, slots=True)
class LPPurchased:
    """Accelerator minted a position for a holder."""

    holder: HexAddress

    #: LP amount minted
    amount: int

    #: Position creation time
    timestamp: int


@dataclass(frozen=True, slots=True)
class EthFeeSwapped:
    """Accelerator bought project tokens with the ETH fee."""

    #: ETH swapped
    swapped_amount: int

    #: WETH
    token0: HexAddress

    #: Project token
    token1: HexAddress

    receiver: HexAddress


@dataclass(frozen=True, slots=True)
class EthFeeTransferred:
    """Accelerator sent the ETH fee as is."""

    transferred_amount: int

    destination: HexAddress


@dataclass(frozen=True, slots=True)
class LPReleased:
    """Accelerator released a matured position."""

    holder: HexAddress

    #: Gross LP amount of the position
    amount: int

    #: LP retained by the vault
    exit_fee: int

    claimed: bool


@dataclass(frozen=True, slots=True)
class LPQueued:
    """Hodler vault minted a position for a holder."""

    hodler: HexAddress

    #: Project tokens paired, after the purchase fee
    uba_tokens: int


@dataclass(frozen=True, slots=True)
class LPClaimed:
    """Hodler vault released a matured position."""

    hodler: HexAddress

    amount: int


@dataclass(frozen=True, slots=True)
class TokenFeeSwapped:
    """Hodler vault sold the token fee for ETH."""

    #: Project tokens swapped
    swapped_amount: int

    #: Project token
    token0: HexAddress

    #: WETH
    token1: HexAddress

    receiver: HexAddress


@dataclass(frozen=True, slots=True)
class TokenFeeTransferred:
    """Hodler vault sent the token fee as is."""

    transferred_amount: int

    destination: HexAddress


@dataclass(frozen=True, slots=True)
class OwnershipTransferred:
    previous_owner: HexAddress
    new_owner: HexAddress


#: Any event a vault records
VaultEvent = LPPurchased | EthFeeSwapped | EthFeeTransferred | LPReleased | LPQueued | LPClaimed | TokenFeeSwapped | TokenFeeTransferred | OwnershipTransferred
