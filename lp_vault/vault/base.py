"""Shared base of the time-locked LP vaults.

A vault is a hot wallet account that holds the vault assets and
signs the router and token calls, plus the in-process bookkeeping:
configuration, position ledger and force unlock latch.

Every state changing vault call runs inside :py:meth:`LockedLPVault.transaction`.
The chain is snapshotted and the bookkeeping copied when the call starts.
If anything fails, both are rolled back before the exception reaches the caller.
"""

import logging
from abc import ABC, abstractmethod
from contextlib import contextmanager
from copy import deepcopy
from typing import Iterator

from eth_defi.abi import get_deployed_contract
from eth_defi.hotwallet import HotWallet
from eth_defi.provider.anvil import make_anvil_custom_rpc_request
from eth_defi.revert_reason import fetch_transaction_revert_reason
from eth_defi.token import get_erc20_contract
from eth_defi.tx import get_tx_broadcast_data
from eth_defi.uniswap_v2.liquidity import get_liquidity
from eth_typing import HexAddress
from hexbytes import HexBytes
from web3 import Web3
from web3.contract import Contract
from web3.contract.contract import ContractFunction
from web3.types import TxReceipt

from lp_vault.revert_reason import REVERT_EXCEPTIONS, TransactionReverted, get_revert_message, require
from lp_vault.utils import ZERO_ADDRESS, to_checksum
from lp_vault.vault.config import VaultConfig, VaultParameters
from lp_vault.vault.errors import NothingToClaim, NotOwner, StillLocked
from lp_vault.vault.events import OwnershipTransferred, VaultEvent
from lp_vault.vault.fee import FeeDisposalMode
from lp_vault.vault.ledger import Position, PositionLedger

logger = logging.getLogger(__name__)


class LockedLPVault(ABC):
    """Time-locked LP position vault.

    - The deployer becomes the owner

    - Configuration is re-read on every call, so admin changes
      apply to existing positions at their claim time

    - Each :py:meth:`claim_lp` releases exactly one position, oldest first

    - The vault account pays the gas of its own transactions from its ETH balance
    """

    #: Prefix of revert reasons
    vault_name = "LockedLPVault"

    def __init__(self, web3: Web3, hot_wallet: HotWallet, owner: HexAddress | str):
        self.web3 = web3
        self.hot_wallet = hot_wallet
        self.owner = to_checksum(owner)
        self._config = VaultConfig()
        self.ledger = PositionLedger()
        self.force_unlock = False

        #: Events of the successful calls, oldest first
        self.events: list[VaultEvent] = []

        hot_wallet.sync_nonce(web3)

    def __repr__(self):
        return f"<{self.vault_name} at {self.address}, {len(self.ledger)} positions>"

    @property
    def address(self) -> HexAddress:
        """The vault account holding ETH, project tokens and LP."""
        return self.hot_wallet.address

    #
    # Transaction machinery
    #

    @contextmanager
    def transaction(self) -> Iterator[None]:
        """All-or-nothing block of vault work.

        On any exception the chain is reverted to the snapshot taken on entry
        and the vault bookkeeping is restored, then the exception is re-raised.
        """
        snapshot_id = make_anvil_custom_rpc_request(self.web3, "evm_snapshot")
        state = (self._config.copy(), deepcopy(self.ledger), self.owner, self.force_unlock, list(self.events))
        nonce = self.hot_wallet.current_nonce
        try:
            yield
        except Exception as e:
            make_anvil_custom_rpc_request(self.web3, "evm_revert", [snapshot_id])
            self._config, self.ledger, self.owner, self.force_unlock, self.events = state
            self.hot_wallet.current_nonce = nonce
            logger.info("%s call reverted: %s", self.vault_name, e)
            raise

    def emit(self, event: VaultEvent):
        self.events.append(event)

    def get_events(self, event_type: type[VaultEvent]) -> list[VaultEvent]:
        """Recorded events of one type, oldest first."""
        return [e for e in self.events if isinstance(e, event_type)]

    def _broadcast(self, tx: dict) -> TxReceipt:
        if "maxFeePerGas" in tx and "gasPrice" in tx:
            # We can have only one
            del tx["gasPrice"]

        signed_tx = self.hot_wallet.sign_transaction_with_new_nonce(tx)
        try:
            tx_hash = self.web3.eth.send_raw_transaction(get_tx_broadcast_data(signed_tx))
        except REVERT_EXCEPTIONS as e:
            raise TransactionReverted(get_revert_message(e)) from e

        receipt = self.web3.eth.wait_for_transaction_receipt(tx_hash)
        if receipt["status"] != 1:
            raise TransactionReverted(fetch_transaction_revert_reason(self.web3, HexBytes(tx_hash)))
        return receipt

    def _transact(self, func: ContractFunction, value: int = 0) -> TxReceipt:
        """Sign a bound contract call with the vault account and broadcast it.

        :raise TransactionReverted:
            The call reverts
        """
        try:
            tx = func.build_transaction(
                {
                    "from": self.address,
                    "chainId": self.web3.eth.chain_id,
                    "value": value,
                }
            )
        except REVERT_EXCEPTIONS as e:
            raise TransactionReverted(get_revert_message(e)) from e
        self.hot_wallet.fill_in_gas_price(self.web3, tx)
        return self._broadcast(tx)

    def _send_value(self, recipient: HexAddress, value: int) -> TxReceipt:
        """Send ETH from the vault account.

        :raise TransactionReverted:
            The recipient rejects ETH
        """
        tx = {
            "from": self.address,
            "to": recipient,
            "value": value,
            "chainId": self.web3.eth.chain_id,
        }
        try:
            tx["gas"] = self.web3.eth.estimate_gas(tx)
        except REVERT_EXCEPTIONS as e:
            raise TransactionReverted(f"Address: unable to send value, recipient may have reverted ({get_revert_message(e)})") from e
        self.hot_wallet.fill_in_gas_price(self.web3, tx)
        return self._broadcast(tx)

    def _receive_value(self, sender: HexAddress, value: int):
        """Move the ETH attached to a deposit from the depositor to the vault account."""
        tx_hash = self.web3.eth.send_transaction({"from": sender, "to": self.address, "value": value})
        receipt = self.web3.eth.wait_for_transaction_receipt(tx_hash)
        assert receipt["status"] == 1, f"ETH transfer from {sender} failed: {receipt}"

    def _get_block_timestamp(self, receipt: TxReceipt) -> int:
        return self.web3.eth.get_block(receipt["blockNumber"])["timestamp"]

    def _get_pending_timestamp(self) -> int:
        """Timestamp the next transaction is mined with."""
        return self.web3.eth.get_block("pending")["timestamp"]

    #
    # Collaborators, resolved from the current configuration
    #

    def _get_project_token(self) -> Contract:
        return get_erc20_contract(self.web3, self._config.project_token)

    def _get_pair(self) -> Contract:
        return get_deployed_contract(self.web3, "sushi/UniswapV2Pair.json", self._config.liquidity_pair)

    def _get_router(self) -> Contract:
        return get_deployed_contract(self.web3, "sushi/UniswapV2Router02.json", self._config.router)

    def _fetch_weth(self, router: HexAddress) -> HexAddress:
        """WETH address as the router reports it."""
        return get_deployed_contract(self.web3, "sushi/UniswapV2Router02.json", router).functions.WETH().call()

    def _get_pool_reserves(self) -> tuple[int, int]:
        """Pool reserves.

        :return:
            Tuple (project token reserve, WETH reserve)
        """
        liquidity = get_liquidity(self.web3, self._config.liquidity_pair)
        if liquidity.token0 == self._config.project_token:
            return liquidity.token0_reserve, liquidity.token1_reserve
        return liquidity.token1_reserve, liquidity.token0_reserve

    def _get_lp_balance(self) -> int:
        return self._get_pair().functions.balanceOf(self.address).call()

    #
    # Access control
    #

    def _only_owner(self, sender: HexAddress):
        require(sender == self.owner, "Ownable: caller is not the owner", NotOwner)

    def transfer_ownership(self, new_owner: HexAddress | str, *, sender: HexAddress | str):
        sender = to_checksum(sender)
        new_owner = to_checksum(new_owner)
        with self.transaction():
            self._only_owner(sender)
            require(new_owner != ZERO_ADDRESS, "Ownable: new owner is the zero address")
            self.emit(OwnershipTransferred(self.owner, new_owner))
            self.owner = new_owner
        logger.info("%s ownership transferred from %s to %s", self.vault_name, sender, new_owner)

    #
    # Admin
    #

    def set_parameters(self, stake_duration_days: int, donation_share: int, purchase_fee: int, *, sender: HexAddress | str):
        """Set lock duration and fees.

        :param stake_duration_days:
            Lock duration in days, stored in seconds

        :raise InvalidParameter:
            Negative duration or percent out of range
        """
        sender = to_checksum(sender)
        with self.transaction():
            self._only_owner(sender)
            parameters = VaultParameters(stake_duration_days, donation_share, purchase_fee)
            self._config.stake_duration = parameters.stake_duration
            self._config.donation_share = parameters.donation_share
            self._config.purchase_fee = parameters.purchase_fee
        logger.info("%s parameters set to %s", self.vault_name, parameters)

    def set_fee_disposal_mode(self, mode: FeeDisposalMode, *, sender: HexAddress | str):
        """Choose what to do with purchase fees of the following deposits."""
        assert isinstance(mode, FeeDisposalMode), f"Got {type(mode)}"
        sender = to_checksum(sender)
        with self.transaction():
            self._only_owner(sender)
            self._config.fee_disposal_mode = mode
        logger.info("%s fee disposal mode set to %s", self.vault_name, mode.value)

    def enable_lp_force_unlock(self, *, sender: HexAddress | str):
        """Release all positions regardless of their age.

        There is no way to lock them again.
        """
        sender = to_checksum(sender)
        with self.transaction():
            self._only_owner(sender)
            self.force_unlock = True
        logger.warning("%s force unlock enabled, all LP positions are claimable", self.vault_name)

    #
    # Queries
    #

    def config(self) -> VaultConfig:
        """Copy of the current configuration."""
        return self._config.copy()

    def get_stake_duration(self) -> int:
        """Effective lock duration in seconds, 0 when force unlocked."""
        return 0 if self.force_unlock else self._config.stake_duration

    def locked_lp_length(self, holder: HexAddress | str) -> int:
        """Number of positions of a holder, claimed ones included."""
        return self.ledger.get_length(to_checksum(holder))

    def get_locked_lp(self, holder: HexAddress | str, index: int) -> Position:
        """Copy of a position.

        :raise IndexError:
            No such position
        """
        return self.ledger.get(to_checksum(holder), index)

    #
    # Claim pipeline
    #

    def _get_exit_fee(self, amount: int) -> int:
        return 0

    @abstractmethod
    def _emit_released(self, holder: HexAddress, amount: int, exit_fee: int):
        """Record the event of a released position.

        :param amount:
            Gross LP amount of the position

        :param exit_fee:
            LP kept by the vault
        """

    def claim_lp(self, *, sender: HexAddress | str) -> int:
        """Release the oldest unclaimed position of the caller.

        :return:
            LP tokens sent to the caller, after the exit fee

        :raise NothingToClaim:
            All positions of the caller are claimed

        :raise StillLocked:
            The oldest unclaimed position has not matured and there is no force unlock
        """
        sender = to_checksum(sender)
        with self.transaction():
            found = self.ledger.find_first_unclaimed(sender)
            require(found is not None, f"{self.vault_name}: nothing to claim.", NothingToClaim)
            index, position = found
            require(
                self.force_unlock or position.is_mature(self._get_pending_timestamp(), self._config.stake_duration),
                f"{self.vault_name}: LP still locked.",
                StillLocked,
            )
            self.ledger.mark_claimed(sender, index)
            exit_fee = self._get_exit_fee(position.amount)
            payout = position.amount - exit_fee
            self._transact(self._get_pair().functions.transfer(sender, payout))
            self._emit_released(sender, position.amount, exit_fee)

        logger.info("%s released position #%d of %s: %d LP, exit fee %d", self.vault_name, index, sender, payout, exit_fee)
        return payout
