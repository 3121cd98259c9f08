"""Accelerator vault.

Users send ETH. The vault pairs it with project tokens it holds,
mints Uniswap v2 LP and locks the LP for the stake duration.

- The purchase fee is either used to buy project tokens ("buy pressure"),
  or sent as ETH to the hodler vault

- When the position is released, ``donation_share`` percent of the LP
  stays in the vault as the exit fee
"""

import logging

from eth_defi.uniswap_v2.deployment import FOREVER_DEADLINE
from eth_typing import HexAddress
from web3 import Web3

from lp_vault.revert_reason import require
from lp_vault.uniswap_v2.oracle import PriceOracle
from lp_vault.utils import SECONDS_PER_DAY, to_checksum
from lp_vault.vault.base import LockedLPVault
from lp_vault.vault.errors import InsufficientProjectToken, InvalidAmount, InvalidParameter
from lp_vault.vault.events import EthFeeSwapped, EthFeeTransferred, LPPurchased, LPReleased
from lp_vault.vault.fee import FeeDisposalMode, compute_fee, validate_percent
from lp_vault.vault.ledger import Position

logger = logging.getLogger(__name__)


class AcceleratorVault(LockedLPVault):
    """ETH in, time-locked LP out.

    Example:

    .. code-block:: python

        vault = AcceleratorVault(web3, HotWallet(Account.create()), deployer)
        vault.seed(4, uba.address, pair_address, router.address, hodler_vault.address, 0, 10, oracle, sender=deployer)
        uba.functions.transfer(vault.address, 20_000 * 10**18).transact({"from": deployer})

        vault.purchase_lp(sender=user_1, value=10**18)
        # 4 days later
        vault.claim_lp(sender=user_1)
    """

    vault_name = "AcceleratorVault"

    def seed(
        self,
        stake_duration_days: int,
        project_token: HexAddress | str,
        liquidity_pair: HexAddress | str,
        router: HexAddress | str,
        eth_hodler: HexAddress | str,
        donation_share: int,
        purchase_fee: int,
        price_oracle: PriceOracle,
        *,
        sender: HexAddress | str,
    ):
        """Configure the vault.

        Can be called again to reconfigure; positions are kept.

        :param eth_hodler:
            Where the ETH fee goes in direct transfer mode,
            and the bought project tokens in buy pressure mode
        """
        assert isinstance(price_oracle, PriceOracle), f"Got {type(price_oracle)}"
        sender = to_checksum(sender)
        with self.transaction():
            self._only_owner(sender)
            require(stake_duration_days >= 0, f"Stake duration cannot be negative: {stake_duration_days}", InvalidParameter)
            validate_percent(donation_share, "donation_share")
            validate_percent(purchase_fee, "purchase_fee")
            config = self._config
            config.stake_duration = stake_duration_days * SECONDS_PER_DAY
            config.project_token = to_checksum(project_token)
            config.liquidity_pair = to_checksum(liquidity_pair)
            config.router = to_checksum(router)
            config.base_asset_token = self._fetch_weth(config.router)
            config.fee_destination = to_checksum(eth_hodler)
            config.donation_share = donation_share
            config.purchase_fee = purchase_fee
            config.price_oracle = price_oracle
        logger.info("Seeded %s: %s", self, self._config)

    #
    # Admin
    #

    def set_oracle_address(self, oracle: PriceOracle, *, sender: HexAddress | str):
        assert isinstance(oracle, PriceOracle), f"Got {type(oracle)}"
        sender = to_checksum(sender)
        with self.transaction():
            self._only_owner(sender)
            self._config.price_oracle = oracle
        logger.info("%s oracle set to %s", self.vault_name, oracle)

    def set_eth_hodler_address(self, eth_hodler: HexAddress | str, *, sender: HexAddress | str):
        sender = to_checksum(sender)
        with self.transaction():
            self._only_owner(sender)
            self._config.fee_destination = to_checksum(eth_hodler)
        logger.info("%s ETH hodler set to %s", self.vault_name, eth_hodler)

    def set_eth_fee_to_hodler(self, *, sender: HexAddress | str):
        """Send purchase fees as ETH to the hodler vault."""
        self.set_fee_disposal_mode(FeeDisposalMode.forward_raw, sender=sender)

    def set_buy_pressure(self, *, sender: HexAddress | str):
        """Buy project tokens with purchase fees."""
        self.set_fee_disposal_mode(FeeDisposalMode.swap_then_forward, sender=sender)

    @property
    def eth_fee_transfer_enabled(self) -> bool:
        return self._config.fee_disposal_mode == FeeDisposalMode.forward_raw

    #
    # Deposit pipeline
    #

    def _dispose_eth_fee(self, fee: int):
        config = self._config
        if config.fee_disposal_mode.is_swap():
            self._transact(
                self._get_router().functions.swapExactETHForTokens(
                    0,
                    [config.base_asset_token, config.project_token],
                    config.fee_destination,
                    FOREVER_DEADLINE,
                ),
                value=fee,
            )
            self.emit(EthFeeSwapped(fee, config.base_asset_token, config.project_token, config.fee_destination))
        else:
            self._send_value(config.fee_destination, fee)
            self.emit(EthFeeTransferred(fee, config.fee_destination))

    def purchase_lp(self, *, sender: HexAddress | str, value: int) -> int:
        """Turn ETH to a time-locked LP position.

        :param sender:
            Depositor. Must be an account the node can send ETH from.

        :param value:
            ETH attached, in wei

        :return:
            LP tokens locked for the caller

        :raise InvalidAmount:
            No ETH attached

        :raise InsufficientProjectToken:
            The vault does not hold enough project tokens to pair the ETH
        """
        sender = to_checksum(sender)
        assert type(value) == int, f"Got {type(value)}: {value}"
        require(value > 0, "AcceleratorVault: ETH required to mint UBA LP", InvalidAmount)

        with self.transaction():
            self._receive_value(sender, value)

            config = self._config
            fee, net = compute_fee(value, config.purchase_fee)
            if fee > 0:
                self._dispose_eth_fee(fee)

            token_amount = config.price_oracle.consult(config.base_asset_token, net)
            token = self._get_project_token()
            require(
                token.functions.balanceOf(self.address).call() >= token_amount,
                "AcceleratorVault: insufficient UBA tokens in AcceleratorVault",
                InsufficientProjectToken,
            )

            router = self._get_router()
            self._transact(token.functions.approve(router.address, token_amount))
            lp_before = self._get_lp_balance()
            receipt = self._transact(
                router.functions.addLiquidityETH(
                    token.address,
                    token_amount,
                    0,
                    0,
                    self.address,
                    FOREVER_DEADLINE,
                ),
                value=net,
            )
            liquidity = self._get_lp_balance() - lp_before
            timestamp = self._get_block_timestamp(receipt)

            self.ledger.append(Position(sender, liquidity, timestamp))
            self.emit(LPPurchased(sender, liquidity, timestamp))

        logger.info(
            "%s: %s bought %d LP for %s ETH, fee %s ETH",
            self.vault_name,
            sender,
            liquidity,
            Web3.from_wei(value, "ether"),
            Web3.from_wei(fee, "ether"),
        )
        return liquidity

    #
    # Claim pipeline
    #

    def _get_exit_fee(self, amount: int) -> int:
        fee, _ = compute_fee(amount, self._config.donation_share)
        return fee

    def _emit_released(self, holder: HexAddress, amount: int, exit_fee: int):
        self.emit(LPReleased(holder, amount, exit_fee, True))
