"""Hodler vault.

Users send project tokens. The vault pairs them with ETH it holds,
mints Uniswap v2 LP and locks the LP for the stake duration.
The vault is funded with ETH by plain transfers, e.g. the accelerator
vault purchase fees. The same ETH pays the gas of the vault transactions.
"""

import logging

from eth_defi.uniswap_v2.deployment import FOREVER_DEADLINE
from eth_typing import HexAddress

from lp_vault.revert_reason import require
from lp_vault.utils import SECONDS_PER_DAY, to_checksum
from lp_vault.vault.base import LockedLPVault
from lp_vault.vault.errors import InsufficientAllowance, InsufficientBalance, InsufficientBaseAsset, InvalidAmount, InvalidParameter
from lp_vault.vault.events import LPClaimed, LPQueued, TokenFeeSwapped, TokenFeeTransferred
from lp_vault.vault.fee import compute_fee, validate_percent
from lp_vault.vault.ledger import Position

logger = logging.getLogger(__name__)


class HodlerVault(LockedLPVault):
    """Project tokens in, time-locked LP out."""

    vault_name = "HodlerVault"

    def seed(
        self,
        stake_duration_days: int,
        project_token: HexAddress | str,
        liquidity_pair: HexAddress | str,
        router: HexAddress | str,
        fee_receiver: HexAddress | str,
        purchase_fee: int,
        *,
        sender: HexAddress | str,
    ):
        """Configure the vault.

        WETH is read from the router. ``donation_share`` is not touched.
        Can be called again to reconfigure; positions are kept.
        """
        sender = to_checksum(sender)
        with self.transaction():
            self._only_owner(sender)
            require(stake_duration_days >= 0, f"Stake duration cannot be negative: {stake_duration_days}", InvalidParameter)
            validate_percent(purchase_fee, "purchase_fee")
            config = self._config
            config.stake_duration = stake_duration_days * SECONDS_PER_DAY
            config.project_token = to_checksum(project_token)
            config.liquidity_pair = to_checksum(liquidity_pair)
            config.router = to_checksum(router)
            config.base_asset_token = self._fetch_weth(config.router)
            config.fee_destination = to_checksum(fee_receiver)
            config.purchase_fee = purchase_fee
        logger.info("Seeded %s: %s", self, self._config)

    def set_fee_receiver(self, fee_receiver: HexAddress | str, *, sender: HexAddress | str):
        sender = to_checksum(sender)
        with self.transaction():
            self._only_owner(sender)
            self._config.fee_destination = to_checksum(fee_receiver)
        logger.info("%s fee receiver set to %s", self.vault_name, fee_receiver)

    def max_tokens_to_invest(self) -> int:
        """How many project tokens the vault ETH balance can pair at the current pool price.

        :return:
            Raw token amount, 0 if the vault has no ETH or the pool no liquidity
        """
        eth_balance = self.web3.eth.get_balance(self.address)
        if eth_balance == 0:
            return 0
        reserve_token, reserve_weth = self._get_pool_reserves()
        if reserve_token == 0 or reserve_weth == 0:
            return 0
        return eth_balance * reserve_token // reserve_weth

    def _dispose_token_fee(self, fee: int):
        config = self._config
        token = self._get_project_token()
        if config.fee_disposal_mode.is_swap():
            router = self._get_router()
            self._transact(token.functions.approve(router.address, fee))
            self._transact(
                router.functions.swapExactTokensForETH(
                    fee,
                    0,
                    [config.project_token, config.base_asset_token],
                    config.fee_destination,
                    FOREVER_DEADLINE,
                )
            )
            self.emit(TokenFeeSwapped(fee, config.project_token, config.base_asset_token, config.fee_destination))
        else:
            self._transact(token.functions.transfer(config.fee_destination, fee))
            self.emit(TokenFeeTransferred(fee, config.fee_destination))

    def purchase_lp(self, amount: int, *, sender: HexAddress | str) -> int:
        """Turn project tokens to a time-locked LP position.

        The caller must have approved the vault account for ``amount``.
        Liquidity is added before the purchase fee is sold,
        so the fee swap does not move the price the deposit is paired at.

        :param amount:
            Raw project token amount, purchase fee included

        :return:
            LP tokens locked for the caller

        :raise InvalidAmount:
            Zero tokens

        :raise InsufficientAllowance:
            Vault not approved for ``amount``

        :raise InsufficientBalance:
            Caller does not have ``amount`` tokens

        :raise InsufficientBaseAsset:
            The vault does not hold enough ETH to pair the tokens
        """
        sender = to_checksum(sender)
        assert type(amount) == int, f"Got {type(amount)}: {amount}"
        with self.transaction():
            require(amount > 0, "HodlerVault: UBA required to mint LP", InvalidAmount)
            token = self._get_project_token()
            require(
                token.functions.allowance(sender, self.address).call() >= amount,
                "HodlerVault: Not enough UBA tokens allowance",
                InsufficientAllowance,
            )
            require(token.functions.balanceOf(sender).call() >= amount, "HodlerVault: Not enough UBA tokens", InsufficientBalance)

            fee, net = compute_fee(amount, self._config.purchase_fee)
            reserve_token, reserve_weth = self._get_pool_reserves()
            require(reserve_token > 0 and reserve_weth > 0, "UniswapV2Library: INSUFFICIENT_LIQUIDITY")
            eth_required = net * reserve_weth // reserve_token
            require(
                self.web3.eth.get_balance(self.address) >= eth_required,
                "HodlerVault: insufficient ETH on HodlerVault",
                InsufficientBaseAsset,
            )

            self._transact(token.functions.transferFrom(sender, self.address, amount))

            router = self._get_router()
            self._transact(token.functions.approve(router.address, net))
            lp_before = self._get_lp_balance()
            receipt = self._transact(
                router.functions.addLiquidityETH(
                    token.address,
                    net,
                    0,
                    0,
                    self.address,
                    FOREVER_DEADLINE,
                ),
                value=eth_required,
            )
            liquidity = self._get_lp_balance() - lp_before

            if fee > 0:
                self._dispose_token_fee(fee)

            self.ledger.append(Position(sender, liquidity, self._get_block_timestamp(receipt)))
            self.emit(LPQueued(sender, net))

        logger.info("%s: %s queued %d LP for %d raw tokens, fee %d", self.vault_name, sender, liquidity, amount, fee)
        return liquidity

    def _emit_released(self, holder: HexAddress, amount: int, exit_fee: int):
        self.emit(LPClaimed(holder, amount - exit_fee))
