"""Uniswap v2 helpers the vaults read prices with."""
