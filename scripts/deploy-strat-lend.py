"""Deploy the Scream WBTC leveraged lending vault and strategy.

Deploys ``BeefyVaultV6`` and ``StrategyScream`` with
:py:data:`vault_deploy.config.STRATEGY_SCREAM_WBTC`.

Environment variables
---------------------

``PRIVATE_KEY``
    Deployer private key. Needs gas on the target network.

``NETWORK``
    Network name, defaults to ``fantom``.

``JSON_RPC_<NETWORK>``
    Optional RPC URL override for the network, e.g. ``JSON_RPC_FANTOM``.

``CONTRACTS_FOLDER``
    Foundry project with the vault and strategy sources.
    Defaults to ``contracts`` in the current directory.

``LOG_LEVEL``
    Defaults to ``info``.

Usage
-----

.. code-block:: shell

    PRIVATE_KEY=0x... \\
    NETWORK=fantom \\
    CONTRACTS_FOLDER=~/code/beefy-contracts \\
    python scripts/deploy-strat-lend.py

.. warning ::

    The strategy address is predicted before the vault is deployed.
    Do not use the deployer account for anything else while the script runs.
"""

import logging
import os
import sys
from pathlib import Path

from eth_account import Account

from vault_deploy.config import STRATEGY_SCREAM_WBTC
from vault_deploy.deploy import deploy_vault_and_strategy
from vault_deploy.network import create_web3, get_network_rpc
from vault_deploy.utils import setup_console_logging

logger = logging.getLogger(__name__)


def main():
    setup_console_logging()

    network = os.environ.get("NETWORK", "fantom")
    private_key = os.environ.get("PRIVATE_KEY")
    assert private_key, "Set PRIVATE_KEY environment variable"
    project_folder = Path(os.environ.get("CONTRACTS_FOLDER", "contracts")).expanduser()

    deployer = Account.from_key(private_key)
    web3 = create_web3(get_network_rpc(network))

    result = deploy_vault_and_strategy(
        web3,
        deployer,
        STRATEGY_SCREAM_WBTC,
        network=network,
        project_folder=project_folder,
    )

    print(f"Vault deployed to: {result.vault_address}")
    print(f"Strategy deployed to: {result.strategy_address}")


if __name__ == "__main__":
    try:
        main()
    except Exception as e:
        logger.exception("Deployment failed: %s", e)
        sys.exit(1)
    sys.exit(0)
