"""Bunch of random utilities."""

from eth_typing import HexAddress
from web3 import Web3


#: Ethereum 0x0000000000000000000000000000000000000000 address
ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"

#: How many seconds there are in a day, as Solidity ``1 days``
SECONDS_PER_DAY = 86_400


def to_checksum(address: HexAddress | str) -> HexAddress:
    """Normalise an address to its checksummed form.

    :raise AssertionError:
        If the input does not look like an address at all
    """
    assert isinstance(address, str), f"Expected address string, got {type(address)}: {address}"
    assert address.startswith("0x"), f"Bad address: {address}"
    return Web3.to_checksum_address(address)
