"""Accelerator vault: ETH in, time-locked LP out."""

import pytest
from eth_defi.abi import get_deployed_contract
from eth_defi.revert_reason import TransactionReverted
from eth_defi.uniswap_v2.deployment import UniswapV2Deployment
from eth_tester import EthereumTester
from web3 import Web3
from web3.contract import Contract

from lp_vault.utils import SECONDS_PER_DAY
from lp_vault.vault.accelerator import AcceleratorVault
from lp_vault.vault.config import DEFAULT_HODLER_PARAMETERS, VaultParameters
from lp_vault.vault.deployment import deploy_accelerator_vault, deploy_hodler_vault
from lp_vault.vault.errors import InsufficientProjectToken, InvalidAmount, NothingToClaim, StillLocked
from lp_vault.vault.events import EthFeeSwapped, EthFeeTransferred, LPPurchased, LPReleased
from lp_vault.vault.fee import FeeDisposalMode
from lp_vault.vault.hodler import HodlerVault


@pytest.fixture()
def hodler_vault(web3: Web3, deployer: str, uniswap_v2: UniswapV2Deployment, uba_token: Contract, fee_receiver: str, create_pool) -> HodlerVault:
    """UBA/WETH pool with 10,000 UBA / 5 ETH, and a hodler vault receiving the fees."""
    create_pool(10_000 * 10**18, 5 * 10**18)
    return deploy_hodler_vault(web3, deployer, uniswap_v2, uba_token, fee_receiver, parameters=DEFAULT_HODLER_PARAMETERS)


@pytest.fixture()
def accelerator(web3: Web3, deployer: str, uniswap_v2: UniswapV2Deployment, uba_token: Contract, hodler_vault: HodlerVault) -> AcceleratorVault:
    """Accelerator with 4 days lock, 10% purchase fee, holding 20,000 UBA and 1 ETH for gas."""
    vault = deploy_accelerator_vault(
        web3,
        deployer,
        uniswap_v2,
        uba_token,
        hodler_vault.address,
        parameters=VaultParameters(stake_duration_days=4, donation_share=0, purchase_fee=10),
        eth_amount=10**18,
    )
    uba_token.functions.transfer(vault.address, 20_000 * 10**18).transact({"from": deployer})
    return vault


@pytest.fixture()
def pair(web3: Web3, accelerator: AcceleratorVault) -> Contract:
    return get_deployed_contract(web3, "sushi/UniswapV2Pair.json", accelerator.config().liquidity_pair)


def test_purchase_lp_buy_pressure(
    web3: Web3,
    user_1: str,
    accelerator: AcceleratorVault,
    hodler_vault: HodlerVault,
    uba_token: Contract,
    uniswap_v2: UniswapV2Deployment,
    pair: Contract,
):
    """1 ETH with 10% fee buys project tokens with the fee and locks one position."""
    assert not accelerator.eth_fee_transfer_enabled
    balance_before = web3.eth.get_balance(user_1)

    liquidity = accelerator.purchase_lp(sender=user_1, value=10**18)
    assert liquidity > 0

    assert accelerator.get_events(EthFeeSwapped) == [EthFeeSwapped(10**17, uniswap_v2.weth.address, uba_token.address, hodler_vault.address)]

    assert accelerator.locked_lp_length(user_1) == 1
    position = accelerator.get_locked_lp(user_1, 0)
    assert position.holder == user_1
    assert position.amount == liquidity
    assert position.timestamp == web3.eth.get_block("latest")["timestamp"]
    assert not position.claimed
    assert accelerator.get_events(LPPurchased) == [LPPurchased(user_1, liquidity, position.timestamp)]

    # LP sits in the vault, bought tokens went to the hodler vault
    assert pair.functions.balanceOf(accelerator.address).call() == liquidity
    assert uba_token.functions.balanceOf(hodler_vault.address).call() > 0
    assert uba_token.functions.balanceOf(accelerator.address).call() < 20_000 * 10**18
    assert web3.eth.get_balance(user_1) <= balance_before - 10**18


def test_purchase_lp_eth_fee_to_hodler(web3: Web3, deployer: str, user_1: str, accelerator: AcceleratorVault, hodler_vault: HodlerVault):
    """Direct transfer mode sends the ETH fee to the hodler vault."""
    accelerator.set_eth_fee_to_hodler(sender=deployer)
    assert accelerator.eth_fee_transfer_enabled

    accelerator.purchase_lp(sender=user_1, value=10**18)

    assert accelerator.get_events(EthFeeTransferred) == [EthFeeTransferred(10**17, hodler_vault.address)]
    assert accelerator.get_events(EthFeeSwapped) == []
    assert web3.eth.get_balance(hodler_vault.address) == 10**17


def test_purchase_lp_no_fee(deployer: str, user_1: str, accelerator: AcceleratorVault):
    """Zero fee emits no fee event."""
    accelerator.set_parameters(4, 0, 0, sender=deployer)
    accelerator.purchase_lp(sender=user_1, value=10**18)
    assert accelerator.get_events(EthFeeSwapped) == []
    assert accelerator.get_events(EthFeeTransferred) == []
    assert len(accelerator.get_events(LPPurchased)) == 1


def test_fee_mode_switch_affects_later_deposits(deployer: str, user_1: str, accelerator: AcceleratorVault):
    """Deposit before the switch swaps its fee, deposit after it forwards, existing positions stay."""
    first = accelerator.purchase_lp(sender=user_1, value=10**18)
    assert len(accelerator.get_events(EthFeeSwapped)) == 1
    assert accelerator.get_events(EthFeeTransferred) == []

    accelerator.set_fee_disposal_mode(FeeDisposalMode.forward_raw, sender=deployer)
    accelerator.purchase_lp(sender=user_1, value=10**18)
    assert len(accelerator.get_events(EthFeeTransferred)) == 1
    assert len(accelerator.get_events(EthFeeSwapped)) == 1

    assert accelerator.locked_lp_length(user_1) == 2
    assert accelerator.get_locked_lp(user_1, 0).amount == first

    accelerator.set_buy_pressure(sender=deployer)
    assert accelerator.config().fee_disposal_mode == FeeDisposalMode.swap_then_forward


def test_purchase_lp_zero_value(user_1: str, accelerator: AcceleratorVault):
    """ETH is required."""
    with pytest.raises(InvalidAmount, match="AcceleratorVault: ETH required to mint UBA LP"):
        accelerator.purchase_lp(sender=user_1, value=0)


def test_purchase_lp_insufficient_tokens(web3: Web3, user_1: str, accelerator: AcceleratorVault, hodler_vault: HodlerVault, uba_token: Contract):
    """Vault cannot pair more ETH than its tokens cover, fee swap and ETH transfer are rolled back."""
    block_number = web3.eth.block_number
    user_balance = web3.eth.get_balance(user_1)
    vault_balance = web3.eth.get_balance(accelerator.address)

    # 20,000 UBA pairs roughly 10 ETH
    with pytest.raises(InsufficientProjectToken, match="AcceleratorVault: insufficient UBA tokens in AcceleratorVault"):
        accelerator.purchase_lp(sender=user_1, value=50 * 10**18)

    assert web3.eth.block_number == block_number
    assert web3.eth.get_balance(user_1) == user_balance
    assert web3.eth.get_balance(accelerator.address) == vault_balance
    assert uba_token.functions.balanceOf(hodler_vault.address).call() == 0
    assert accelerator.locked_lp_length(user_1) == 0
    assert accelerator.events == []


def test_purchase_lp_fee_send_fails(web3: Web3, deployer: str, user_1: str, accelerator: AcceleratorVault, uba_token: Contract):
    """Fee destination rejecting ETH reverts the whole deposit."""
    accelerator.set_eth_hodler_address(uba_token.address, sender=deployer)
    accelerator.set_eth_fee_to_hodler(sender=deployer)
    user_balance = web3.eth.get_balance(user_1)

    with pytest.raises(TransactionReverted, match="recipient may have reverted"):
        accelerator.purchase_lp(sender=user_1, value=10**18)

    assert accelerator.locked_lp_length(user_1) == 0
    assert web3.eth.get_balance(user_1) == user_balance
    assert accelerator.eth_fee_transfer_enabled


def test_claim_lp_locked(eth_tester: EthereumTester, user_1: str, accelerator: AcceleratorVault, pair: Contract):
    """Position unlocks exactly at the end of the stake duration."""
    liquidity = accelerator.purchase_lp(sender=user_1, value=10**18)
    unlock_at = accelerator.get_locked_lp(user_1, 0).get_unlock_timestamp(4 * SECONDS_PER_DAY)

    with pytest.raises(StillLocked, match="AcceleratorVault: LP still locked."):
        accelerator.claim_lp(sender=user_1)

    eth_tester.time_travel(unlock_at - 1)
    with pytest.raises(StillLocked):
        accelerator.claim_lp(sender=user_1)

    eth_tester.time_travel(unlock_at)
    claimed = accelerator.claim_lp(sender=user_1)

    assert claimed == liquidity
    assert pair.functions.balanceOf(user_1).call() == liquidity
    assert accelerator.get_events(LPReleased) == [LPReleased(user_1, liquidity, 0, True)]
    assert accelerator.get_locked_lp(user_1, 0).claimed

    with pytest.raises(NothingToClaim, match="AcceleratorVault: nothing to claim."):
        accelerator.claim_lp(sender=user_1)


def test_claim_lp_exit_fee_oldest_first(deployer: str, user_1: str, accelerator: AcceleratorVault, pair: Contract, time_travel):
    """Two matured claims pay out both positions minus the donation share, oldest first."""
    accelerator.set_parameters(4, 10, 10, sender=deployer)
    a1 = accelerator.purchase_lp(sender=user_1, value=10**18)
    time_travel(3600)
    a2 = accelerator.purchase_lp(sender=user_1, value=2 * 10**18)
    assert a1 != a2

    time_travel(5 * SECONDS_PER_DAY)

    accelerator.claim_lp(sender=user_1)
    released = accelerator.get_events(LPReleased)[-1]
    assert released.amount == a1
    assert released.exit_fee == a1 * 10 // 100

    accelerator.claim_lp(sender=user_1)
    assert accelerator.get_events(LPReleased)[-1].amount == a2

    f1 = a1 * 10 // 100
    f2 = a2 * 10 // 100
    assert pair.functions.balanceOf(user_1).call() == (a1 - f1) + (a2 - f2)
    # Exit fees stay in the vault
    assert pair.functions.balanceOf(accelerator.address).call() == f1 + f2


def test_claim_lp_nothing(user_2: str, accelerator: AcceleratorVault):
    """Holder without positions."""
    with pytest.raises(NothingToClaim):
        accelerator.claim_lp(sender=user_2)


def test_reduce_duration_matures_positions(deployer: str, user_1: str, accelerator: AcceleratorVault):
    """Lock duration is evaluated at claim time."""
    liquidity = accelerator.purchase_lp(sender=user_1, value=10**18)
    accelerator.set_parameters(0, 0, 10, sender=deployer)
    assert accelerator.claim_lp(sender=user_1) == liquidity


def test_force_unlock(deployer: str, user_1: str, user_2: str, accelerator: AcceleratorVault):
    """Force unlock releases positions immediately."""
    accelerator.purchase_lp(sender=user_1, value=10**18)
    accelerator.purchase_lp(sender=user_2, value=10**18)
    assert accelerator.get_stake_duration() == 4 * SECONDS_PER_DAY

    accelerator.enable_lp_force_unlock(sender=deployer)
    assert accelerator.force_unlock
    assert accelerator.get_stake_duration() == 0
    assert accelerator.claim_lp(sender=user_1) > 0
    assert accelerator.claim_lp(sender=user_2) > 0
