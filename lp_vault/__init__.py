"""lp_vault package root.

Time-locked liquidity provider vaults on top of a Uniswap v2 like exchange.

- :py:mod:`lp_vault.vault.accelerator` for the ETH-in accelerator vault

- :py:mod:`lp_vault.vault.hodler` for the token-in hodler vault

"""

import sys


#: Minimum required Python version to run this package
MIN_PYTHON_VERSION = (3, 10)


def _check_python_version():
    """Try early abort if the Python version is too old."""

    # Use Python tuple comparison for version numbers
    # https://stackoverflow.com/a/1093331/315168
    if sys.version_info < MIN_PYTHON_VERSION:
        raise RuntimeError(f"lp-vault needs Python {MIN_PYTHON_VERSION[0]}.{MIN_PYTHON_VERSION[1]} or later")


_check_python_version()
