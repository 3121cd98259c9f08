"""Shared test fixtures: eth-tester chain, Uniswap v2 and the UBA project token."""

import pytest
from eth_account import Account
from eth_defi.token import create_token
from eth_defi.uniswap_v2.deployment import UniswapV2Deployment, deploy_trading_pair, deploy_uniswap_v2_like
from web3 import EthereumTesterProvider, Web3
from web3.contract import Contract


@pytest.fixture
def tester_provider():
    # https://web3py.readthedocs.io/en/stable/examples.html#contract-unit-tests-in-python
    return EthereumTesterProvider()


@pytest.fixture
def eth_tester(tester_provider):
    # https://web3py.readthedocs.io/en/stable/examples.html#contract-unit-tests-in-python
    return tester_provider.ethereum_tester


@pytest.fixture
def web3(tester_provider):
    """Set up a local unit testing blockchain."""
    # https://web3py.readthedocs.io/en/stable/examples.html#contract-unit-tests-in-python
    return Web3(tester_provider)


@pytest.fixture()
def deployer(web3) -> str:
    """Deploy account.

    Do some account allocation for tests.
    """
    return web3.eth.accounts[0]


@pytest.fixture()
def user_1(web3) -> str:
    """User account.

    Do some account allocation for tests.
    """
    return web3.eth.accounts[1]


@pytest.fixture()
def user_2(web3) -> str:
    """User account.

    Do some account allocation for tests.
    """
    return web3.eth.accounts[2]


@pytest.fixture()
def fee_receiver() -> str:
    """Account receiving vault fees, starts with zero ETH and never sends transactions."""
    return Account.create().address


@pytest.fixture()
def uniswap_v2(web3, deployer) -> UniswapV2Deployment:
    """Deploy mock Uniswap v2."""
    return deploy_uniswap_v2_like(web3, deployer)


@pytest.fixture()
def uba_token(web3, deployer) -> Contract:
    """Project token, 1M supply to the deployer."""
    return create_token(web3, deployer, "Unbox Art", "UBA", 1_000_000 * 10**18)


@pytest.fixture()
def create_pool(web3, deployer, uniswap_v2, uba_token):
    """Create the UBA/WETH pool with the given liquidity."""

    def _create_pool(token_amount: int, eth_amount: int) -> str:
        return deploy_trading_pair(
            web3,
            deployer,
            uniswap_v2,
            uba_token,
            uniswap_v2.weth,
            token_amount,
            eth_amount,
        )

    return _create_pool


@pytest.fixture()
def time_travel(web3, eth_tester):
    """Move the timestamp of the next block forward."""

    def _time_travel(seconds: int):
        timestamp = web3.eth.get_block("pending")["timestamp"]
        eth_tester.time_travel(timestamp + seconds)

    return _time_travel
