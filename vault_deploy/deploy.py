"""Deploy a vault and its strategy.

The vault and the strategy reference each other in their constructors.
We predict where the strategy will be created, deploy the vault pointing
there, then deploy the strategy pointing to the now real vault.

.. warning ::

    There is no recovery. If the vault goes through and the strategy fails,
    or the deployer sends another transaction in between, the vault is left
    pointing to an address that will never hold its strategy. The vault needs
    to be deployed again from scratch.
"""

import logging
from dataclasses import dataclass
from functools import partial
from pathlib import Path
from typing import Callable

from eth_account.signers.local import LocalAccount
from eth_typing import ChecksumAddress
from web3 import Web3

from vault_deploy.config import VAULT_CONTRACT_NAME, DeploymentConfig
from vault_deploy.forge import ContractFactory, compile_contracts_with_forge
from vault_deploy.network import get_network_rpc
from vault_deploy.predict import PREDICTION_RPC, PredictedAddresses, predict_addresses

logger = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class DeploymentResult:
    """Addresses of a finished vault + strategy deployment."""

    vault_address: ChecksumAddress

    strategy_address: ChecksumAddress

    #: Strategy address the vault was constructed with
    predicted_strategy_address: ChecksumAddress

    @property
    def prediction_matched(self) -> bool:
        """Did the vault get constructed with the right strategy address."""
        return self.strategy_address == self.predicted_strategy_address


def deploy_vault_and_strategy(
    web3: Web3,
    deployer: LocalAccount,
    config: DeploymentConfig,
    network: str,
    project_folder: Path | None = None,
    vault_contract_name: str = VAULT_CONTRACT_NAME,
    prediction_rpc: str = PREDICTION_RPC,
    compile_contracts: Callable[[Path], None] | None = compile_contracts_with_forge,
    get_contract_factory: Callable[[str], ContractFactory] | None = None,
    predictor: Callable[..., PredictedAddresses] = predict_addresses,
    rpc_resolver: Callable[[str], str] = get_network_rpc,
) -> DeploymentResult:
    """Deploy a vault and its strategy in two transactions.

    Steps are strictly sequential and any failure propagates as is.

    :param deployer:
        Account paying for and signing both creation transactions

    :param config:
        Must have every field set, checked before anything else happens

    :param network:
        Network name, resolved with ``rpc_resolver``

    :param project_folder:
        Foundry project holding the vault and strategy sources

    :param prediction_rpc:
        RPC the address predictor reads the deployer nonce from.
        Defaults to a fixed Fantom endpoint, not the resolved ``network`` endpoint.

    :param compile_contracts:
        Build step, ``None`` to use already compiled artifacts

    :param get_contract_factory:
        Contract name to :py:class:`ContractFactory`.
        Defaults to loading Forge artifacts from ``project_folder``.

    :param predictor:
        ``predictor(creator, rpc) -> PredictedAddresses``

    :param rpc_resolver:
        ``rpc_resolver(network) -> url``

    :raise vault_deploy.config.ConfigurationError:
        Some configuration field is absent. Nothing was compiled or sent.

    :raise vault_deploy.forge.FatalBuildError:
        Contracts did not compile

    :raise vault_deploy.network.UnknownNetworkError:
        ``network`` has no RPC endpoint
    """

    config.validate()

    if compile_contracts is not None:
        assert project_folder is not None, "project_folder needed for compiling"
        compile_contracts(project_folder)

    if get_contract_factory is None:
        assert project_folder is not None, "project_folder needed for loading artifacts"
        get_contract_factory = partial(ContractFactory.from_forge_project, web3, deployer, project_folder)

    vault_factory = get_contract_factory(vault_contract_name)
    strategy_factory = get_contract_factory(config.strategy_name)

    # Resolved only to fail early on unknown networks, prediction uses prediction_rpc
    rpc_resolver(network)
    logger.info("Deploying: %s on %s, deployer %s", config.moo_name, network, deployer.address)

    predicted = predictor(deployer.address, rpc=prediction_rpc)

    vault = vault_factory.deploy(*config.get_vault_constructor_args(predicted.strategy))
    logger.info("Vault %s deployed at %s", config.moo_name, vault.address)

    strategy = strategy_factory.deploy(*config.get_strategy_constructor_args(vault.address))
    logger.info("Strategy %s deployed at %s", config.strategy_name, strategy.address)

    result = DeploymentResult(
        vault_address=vault.address,
        strategy_address=strategy.address,
        predicted_strategy_address=predicted.strategy,
    )

    if not result.prediction_matched:
        logger.error(
            "Strategy deployed at %s but vault %s was constructed with %s. The vault is unusable and must be redeployed.",
            result.strategy_address,
            result.vault_address,
            result.predicted_strategy_address,
        )

    return result
