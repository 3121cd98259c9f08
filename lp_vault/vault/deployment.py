"""Deploy and seed vaults against a Uniswap v2 deployment."""

import logging

from eth_account import Account
from eth_defi.hotwallet import HotWallet
from eth_defi.uniswap_v2.deployment import UniswapV2Deployment
from eth_typing import HexAddress
from web3 import Web3
from web3.contract import Contract

from lp_vault.uniswap_v2.oracle import PriceOracle
from lp_vault.utils import ZERO_ADDRESS, to_checksum
from lp_vault.vault.accelerator import AcceleratorVault
from lp_vault.vault.config import DEFAULT_ACCELERATOR_PARAMETERS, DEFAULT_HODLER_PARAMETERS, VaultParameters
from lp_vault.vault.hodler import HodlerVault

logger = logging.getLogger(__name__)


def _get_pair_address(uniswap_v2: UniswapV2Deployment, token: Contract) -> HexAddress:
    pair_address = uniswap_v2.factory.functions.getPair(token.address, uniswap_v2.weth.address).call()
    assert pair_address != ZERO_ADDRESS, f"No {token.address}/WETH pair on {uniswap_v2.factory.address}"
    return pair_address


def _create_vault_wallet(web3: Web3, deployer: HexAddress, eth_amount: int) -> HotWallet:
    """Fresh vault account, optionally funded by the deployer."""
    hot_wallet = HotWallet(Account.create())
    if eth_amount > 0:
        tx_hash = web3.eth.send_transaction({"from": deployer, "to": hot_wallet.address, "value": eth_amount})
        web3.eth.wait_for_transaction_receipt(tx_hash)
    return hot_wallet


def deploy_price_oracle(
    web3: Web3,
    uniswap_v2: UniswapV2Deployment,
    token: Contract,
) -> PriceOracle:
    """Create an oracle for the token/WETH pair.

    The pair must exist.
    """
    return PriceOracle(web3, _get_pair_address(uniswap_v2, token), token.address, uniswap_v2.weth.address)


def deploy_hodler_vault(
    web3: Web3,
    deployer: HexAddress | str,
    uniswap_v2: UniswapV2Deployment,
    token: Contract,
    fee_receiver: HexAddress | str,
    parameters: VaultParameters | None = None,
    eth_amount: int = 0,
) -> HodlerVault:
    """Deploy a hodler vault for the token/WETH pair.

    Example:

    .. code-block:: python

        hodler_vault = deploy_hodler_vault(web3, deployer, uniswap_v2, uba, fee_receiver, eth_amount=11 * 10**18)

    :param fee_receiver:
        Receives purchase fees

    :param parameters:
        Lock duration and purchase fee. Donation share is not used by the hodler vault.
        Read from ``HODLER_`` prefixed environment variables if not given,
        see :py:meth:`VaultParameters.from_env`.

    :param eth_amount:
        ETH the deployer sends to the vault account,
        to pair deposits and pay gas
    """
    deployer = to_checksum(deployer)
    if parameters is None:
        parameters = VaultParameters.from_env("HODLER_", DEFAULT_HODLER_PARAMETERS)
    pair_address = _get_pair_address(uniswap_v2, token)
    vault = HodlerVault(web3, _create_vault_wallet(web3, deployer, eth_amount), deployer)
    vault.seed(
        parameters.stake_duration_days,
        token.address,
        pair_address,
        uniswap_v2.router.address,
        fee_receiver,
        parameters.purchase_fee,
        sender=deployer,
    )
    logger.info("Deployed %s", vault)
    return vault


def deploy_accelerator_vault(
    web3: Web3,
    deployer: HexAddress | str,
    uniswap_v2: UniswapV2Deployment,
    token: Contract,
    eth_hodler: HexAddress | str,
    oracle: PriceOracle | None = None,
    parameters: VaultParameters | None = None,
    eth_amount: int = 0,
) -> AcceleratorVault:
    """Deploy an accelerator vault for the token/WETH pair.

    Example:

    .. code-block:: python

        hodler_vault = deploy_hodler_vault(web3, deployer, uniswap_v2, uba, fee_receiver)
        accelerator = deploy_accelerator_vault(web3, deployer, uniswap_v2, uba, hodler_vault.address, eth_amount=10**18)
        uba.functions.transfer(accelerator.address, 20_000 * 10**18).transact({"from": deployer})

    :param eth_hodler:
        Receives purchase fees, usually the hodler vault

    :param oracle:
        Price oracle. A new one is created if not given.

    :param parameters:
        Lock duration and fees.
        Read from ``ACCELERATOR_`` prefixed environment variables if not given,
        see :py:meth:`VaultParameters.from_env`.

    :param eth_amount:
        ETH the deployer sends to the vault account for gas.
        Deposited ETH is spent in full on fees and liquidity.
    """
    deployer = to_checksum(deployer)
    if parameters is None:
        parameters = VaultParameters.from_env("ACCELERATOR_", DEFAULT_ACCELERATOR_PARAMETERS)
    pair_address = _get_pair_address(uniswap_v2, token)
    if oracle is None:
        oracle = deploy_price_oracle(web3, uniswap_v2, token)
    vault = AcceleratorVault(web3, _create_vault_wallet(web3, deployer, eth_amount), deployer)
    vault.seed(
        parameters.stake_duration_days,
        token.address,
        pair_address,
        uniswap_v2.router.address,
        eth_hodler,
        parameters.donation_share,
        parameters.purchase_fee,
        oracle,
        sender=deployer,
    )
    logger.info("Deployed %s", vault)
    return vault
