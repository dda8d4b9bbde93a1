"""Forge smart contract toolchain integration.

- Compile the vault and strategy project with ``forge build``

- Load compiled ABI and bytecode from the Foundry ``out`` folder

- Deploy contracts from these artifacts with a local private key

Assumes standard Foundry project layout with ``foundry.toml``, ``src`` and ``out``.
See `Foundry book <https://book.getfoundry.sh/>`__.
"""

import json
import logging
from pathlib import Path
from shutil import which
from subprocess import DEVNULL, PIPE

import psutil
from eth_account.signers.local import LocalAccount
from web3 import Web3
from web3.contract import Contract

from vault_deploy.transaction import TransactionFailed, assert_transaction_success
from vault_deploy.utils import wait_other_writers

logger = logging.getLogger(__name__)


#: Crash unless forge completes in 4 minutes
DEFAULT_TIMEOUT = 4 * 60


class ForgeFailed(Exception):
    """Forge command failed."""


class FatalBuildError(ForgeFailed):
    """Contract sources did not compile."""


def compile_contracts_with_forge(project_folder: Path, timeout=DEFAULT_TIMEOUT):
    """Compile a Foundry project.

    Parallel runs against the same project wait for each other,
    as forge does not like concurrent writers in its ``out`` folder.

    :param project_folder:
        Foundry project with `foundry.toml` in the root.

    :raise FatalBuildError:
        forge exited with non-zero code
    """
    assert isinstance(project_folder, Path), f"Got non-Path project folder: {type(project_folder)} {project_folder}"
    project_folder = project_folder.resolve()
    assert (project_folder / "foundry.toml").exists(), f"foundry.toml missing: {project_folder}"

    forge = which("forge")
    if forge is None:
        raise FatalBuildError("No forge command in path, needed for compiling the contracts")

    cmd_line = [forge, "build", "--root", str(project_folder)]
    logger.info("Compiling contracts: %s", " ".join(cmd_line))

    with wait_other_writers(project_folder / "out"):
        proc = psutil.Popen(cmd_line, stdin=DEVNULL, stdout=PIPE, stderr=PIPE, cwd=project_folder)
        try:
            result = proc.wait(timeout)
        except psutil.TimeoutExpired as e:
            proc.kill()
            raise FatalBuildError(f"forge build did not complete in {timeout} seconds") from e

        try:
            output = proc.stdout.read().decode("utf-8") + proc.stderr.read().decode("utf-8")
        finally:
            proc.stdout.close()
            proc.stderr.close()

    if result != 0:
        raise FatalBuildError(f"forge return code {result} when running: {' '.join(cmd_line)}\nOutput is:\n{output}")

    logger.debug("forge build result:\n%s", output)


def load_forge_artifact(project_folder: Path, contract_name: str) -> dict:
    """Read the compiled artifact of a contract.

    Forge writes ``out/<SourceFile>.sol/<ContractName>.json``.
    The source file name does not need to match the contract name.

    :return:
        Dict with ``abi`` list and ``bytecode`` hex string

    :raise FatalBuildError:
        The contract has not been compiled, or was compiled more than once
        from different source files
    """
    out_dir = project_folder / "out"
    candidates = sorted(out_dir.glob(f"*/{contract_name}.json"))

    if len(candidates) == 0:
        raise FatalBuildError(f"No compiled artifact for {contract_name} in {out_dir}")

    if len(candidates) > 1:
        raise FatalBuildError(f"Ambiguous artifacts for {contract_name}: {', '.join(str(c) for c in candidates)}")

    with open(candidates[0], "rt", encoding="utf-8") as f:
        data = json.load(f)

    bytecode = data["bytecode"]
    # Forge nests the bytecode, hardhat style artifacts do not
    if isinstance(bytecode, dict):
        bytecode = bytecode["object"]

    if not bytecode.startswith("0x"):
        bytecode = "0x" + bytecode

    assert len(bytecode) > 2, f"{contract_name} has no bytecode, is it an interface or abstract contract?"

    return {"abi": data["abi"], "bytecode": bytecode}


class ContractFactory:
    """Deploy instances of one compiled contract.

    Example:

    .. code-block:: python

        factory = ContractFactory.from_forge_project(web3, deployer, Path("contracts"), "BeefyVaultV6")
        vault = factory.deploy(strategy_address, "Moo Scream WBTC", "mooScreamWBTC", 21600)
        logger.info("Vault at %s", vault.address)
    """

    def __init__(self, web3: Web3, deployer: LocalAccount, name: str, abi: list, bytecode: str):
        self.web3 = web3
        self.deployer = deployer
        self.name = name
        self.abi = abi
        self.bytecode = bytecode

    def __repr__(self):
        return f"<ContractFactory {self.name} deployer:{self.deployer.address}>"

    @classmethod
    def from_forge_project(cls, web3: Web3, deployer: LocalAccount, project_folder: Path, contract_name: str) -> "ContractFactory":
        artifact = load_forge_artifact(project_folder, contract_name)
        return cls(web3, deployer, contract_name, artifact["abi"], artifact["bytecode"])

    def deploy(self, *constructor_args) -> Contract:
        """Send the creation transaction and wait until it is mined.

        Uses the deployer's pending nonce at the time of the call.

        :return:
            Contract bound at the created address

        :raise TransactionFailed:
            Creation reverted
        """
        web3 = self.web3
        factory = web3.eth.contract(abi=self.abi, bytecode=self.bytecode)
        nonce = web3.eth.get_transaction_count(self.deployer.address, "pending")
        tx = factory.constructor(*constructor_args).build_transaction(
            {
                "from": self.deployer.address,
                "nonce": nonce,
                "chainId": web3.eth.chain_id,
            }
        )
        signed = self.deployer.sign_transaction(tx)
        tx_hash = web3.eth.send_raw_transaction(signed.raw_transaction)
        logger.info("Deploying %s, deployer %s nonce %d, tx %s", self.name, self.deployer.address, nonce, tx_hash.hex())

        receipt = assert_transaction_success(web3, tx_hash)
        address = receipt.get("contractAddress")
        if not address:
            raise TransactionFailed(f"{self.name} creation tx {tx_hash.hex()} has no contract address")

        return web3.eth.contract(address=address, abi=self.abi)
