"""Time-locked LP vaults.

- :py:class:`lp_vault.vault.accelerator.AcceleratorVault` takes ETH, pairs it with project tokens the vault holds

- :py:class:`lp_vault.vault.hodler.HodlerVault` takes project tokens, pairs them with ETH the vault holds

Both record the minted LP as :py:class:`lp_vault.vault.ledger.Position` entries
that are released after the stake duration.
"""
