"""Price oracle for a single Uniswap v2 pool.

The accelerator vault asks the oracle how many project tokens match
an amount of ETH in value, to pair its contribution without price impact.
The rate is read from the current pair reserves on every call.
"""

import logging

from eth_defi.uniswap_v2.liquidity import get_liquidity
from eth_typing import HexAddress
from web3 import Web3

from lp_vault.revert_reason import require
from lp_vault.utils import to_checksum

logger = logging.getLogger(__name__)


def quote(amount_a: int, reserve_a: int, reserve_b: int) -> int:
    """Given some amount of an asset and pair reserves, returns an equivalent amount of the other asset.

    No fee, no price impact. Same as ``UniswapV2Library.quote()``.
    """
    require(amount_a > 0, "UniswapV2Library: INSUFFICIENT_AMOUNT")
    require(reserve_a > 0 and reserve_b > 0, "UniswapV2Library: INSUFFICIENT_LIQUIDITY")
    return amount_a * reserve_b // reserve_a


class PriceOracle:
    """Quote one side of a pair in the terms of the other.

    Example:

    .. code-block:: python

        oracle = PriceOracle(web3, pair_address, uba.address, uniswap_v2.weth.address)
        # Tokens needed to match 1 ETH in value
        tokens = oracle.consult(uniswap_v2.weth.address, 10**18)
    """

    def __init__(
        self,
        web3: Web3,
        pair: HexAddress | str,
        token: HexAddress | str,
        weth: HexAddress | str,
    ):
        self.web3 = web3
        self.pair = to_checksum(pair)
        self.token = to_checksum(token)
        self.weth = to_checksum(weth)

    def __repr__(self):
        return f"<PriceOracle for pair {self.pair}>"

    def get_reserves(self, token_in: HexAddress) -> tuple[int, int]:
        """Pair reserves.

        :return:
            Tuple (reserve of ``token_in``, reserve of the other token)
        """
        liquidity = get_liquidity(self.web3, self.pair)
        if liquidity.token0 == token_in:
            return liquidity.token0_reserve, liquidity.token1_reserve
        return liquidity.token1_reserve, liquidity.token0_reserve

    def consult(self, token_in: HexAddress | str, amount_in: int) -> int:
        """Amount of the other pair token worth ``amount_in`` at the current reserves.

        :param token_in:
            Either the project token or WETH

        :param amount_in:
            Raw amount of ``token_in``

        :raise TransactionReverted:
            Unknown token, zero amount or the pool has no liquidity
        """
        token_in = to_checksum(token_in)
        require(token_in in (self.token, self.weth), "PriceOracle: INVALID_TOKEN")
        reserve_in, reserve_out = self.get_reserves(token_in)
        amount_out = quote(amount_in, reserve_in, reserve_out)
        logger.debug("Oracle %s consulted %d of %s, got %d", self.pair, amount_in, token_in, amount_out)
        return amount_out
