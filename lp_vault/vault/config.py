"""Vault configuration.

- :py:class:`VaultConfig` is the full configuration a vault reads on every call
- :py:class:`VaultParameters` are the human tunable knobs set with ``set_parameters()``
"""

import os
from dataclasses import dataclass, replace

from eth_typing import HexAddress

from lp_vault.revert_reason import require
from lp_vault.uniswap_v2.oracle import PriceOracle
from lp_vault.utils import SECONDS_PER_DAY, ZERO_ADDRESS
from lp_vault.vault.errors import InvalidParameter
from lp_vault.vault.fee import FeeDisposalMode, validate_percent


@dataclass(slots=True)
class VaultConfig:
    """Configuration of one vault instance.

    Owned by the vault. :py:meth:`lp_vault.vault.base.LockedLPVault.config`
    hands out copies only.
    """

    #: Lock period in seconds
    stake_duration: int = 0

    #: Exit fee percent, 0-100
    donation_share: int = 0

    #: Purchase fee percent, 0-100
    purchase_fee: int = 0

    #: The vaulted ERC-20 token
    project_token: HexAddress = ZERO_ADDRESS

    #: Project token / WETH pair
    liquidity_pair: HexAddress = ZERO_ADDRESS

    #: Uniswap v2 router
    router: HexAddress = ZERO_ADDRESS

    #: WETH, as the router reports it
    base_asset_token: HexAddress = ZERO_ADDRESS

    #: Where purchase fees go.
    #:
    #: Accelerator: the hodler vault. Hodler vault: fee receiver.
    fee_destination: HexAddress = ZERO_ADDRESS

    fee_disposal_mode: FeeDisposalMode = FeeDisposalMode.swap_then_forward

    #: Price oracle, accelerator vault only
    price_oracle: PriceOracle | None = None

    def copy(self) -> "VaultConfig":
        """Shallow copy, the oracle is shared."""
        return replace(self)

    def is_seeded(self) -> bool:
        return self.project_token != ZERO_ADDRESS and self.liquidity_pair != ZERO_ADDRESS


@dataclass(frozen=True, slots=True)
class VaultParameters:
    """Lock duration and fees.

    Validated on construction.
    """

    #: Lock period in days
    stake_duration_days: int

    #: Exit fee percent
    donation_share: int

    #: Purchase fee percent
    purchase_fee: int

    def __post_init__(self):
        assert type(self.stake_duration_days) == int, f"Got {type(self.stake_duration_days)}"
        require(self.stake_duration_days >= 0, f"Stake duration cannot be negative: {self.stake_duration_days}", InvalidParameter)
        validate_percent(self.donation_share, "donation_share")
        validate_percent(self.purchase_fee, "purchase_fee")

    @property
    def stake_duration(self) -> int:
        """Lock period in seconds."""
        return self.stake_duration_days * SECONDS_PER_DAY

    @classmethod
    def from_env(cls, prefix: str, default: "VaultParameters | None" = None) -> "VaultParameters":
        """Read parameters from environment variables.

        Environment variables:

        - ``<PREFIX>STAKE_DURATION``: lock period in days
        - ``<PREFIX>DONATION_SHARE``: exit fee percent
        - ``<PREFIX>PURCHASE_FEE``: purchase fee percent

        .. code-block:: shell

            export ACCELERATOR_STAKE_DURATION=4
            export ACCELERATOR_PURCHASE_FEE=10

        :param prefix:
            E.g. ``ACCELERATOR_``

        :param default:
            Values for variables not set

        :raise InvalidParameter:
            Values out of range
        """

        if default is None:
            default = cls(0, 0, 0)

        def get_int(key: str, default_value: int) -> int:
            value = os.environ.get(f"{prefix}{key}", "").strip()
            return int(value) if value else default_value

        return cls(
            stake_duration_days=get_int("STAKE_DURATION", default.stake_duration_days),
            donation_share=get_int("DONATION_SHARE", default.donation_share),
            purchase_fee=get_int("PURCHASE_FEE", default.purchase_fee),
        )


#: Accelerator vault parameters when deployed: 4 days lock, no exit fee, 10% purchase fee
DEFAULT_ACCELERATOR_PARAMETERS = VaultParameters(stake_duration_days=4, donation_share=0, purchase_fee=10)

#: Hodler vault parameters when deployed: 15 days lock, 10% purchase fee
DEFAULT_HODLER_PARAMETERS = VaultParameters(stake_duration_days=15, donation_share=0, purchase_fee=10)
