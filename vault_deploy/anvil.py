"""Anvil mainnet fork for integration tests.

Example:

.. code-block:: python

    launch = fork_network_anvil(os.environ["JSON_RPC_FANTOM"])
    try:
        web3 = create_web3(launch.json_rpc_url)
        ...
    finally:
        launch.close()
"""

import logging
import time
from dataclasses import dataclass
from shutil import which
from subprocess import DEVNULL, PIPE

import psutil
from eth_typing import HexAddress

from vault_deploy.network import create_web3
from vault_deploy.utils import find_free_port, is_localhost_port_listening, shutdown_hard

logger = logging.getLogger(__name__)


class AnvilLaunchFailed(Exception):
    """anvil did not start."""


@dataclass
class AnvilLaunch:
    """A running anvil process."""

    port: int

    json_rpc_url: str

    process: psutil.Popen

    cmd: list[str]

    def close(self, log_level: int | None = None) -> tuple[bytes, bytes]:
        """Kill anvil.

        :param log_level:
            Dump anvil output to logging with this level

        :return:
            stdout, stderr
        """
        stdout, stderr = shutdown_hard(self.process, log_level=log_level, check_port=self.port)
        logger.info("Anvil on port %d shut down", self.port)
        return stdout, stderr


def fork_network_anvil(
    fork_url: str,
    port: int | None = None,
    unlocked_addresses: list[HexAddress | str] | None = None,
    fork_block_number: int | None = None,
    launch_wait_seconds: float = 30.0,
) -> AnvilLaunch:
    """Start anvil forking a live network.

    The default anvil test accounts have 10,000 native currency each.

    :param fork_url:
        Live network JSON-RPC URL

    :param port:
        Localhost port. Picked at random if not given.

    :param unlocked_addresses:
        Accounts to impersonate, so tests can ``transact({"from": ...})`` as them

    :param fork_block_number:
        Pin the fork to a block for reproducible tests

    :raise AnvilLaunchFailed:
        anvil not installed, or did not start listening in time
    """
    anvil = which("anvil")
    if anvil is None:
        raise AnvilLaunchFailed("anvil not in PATH, install Foundry")

    if port is None:
        port = find_free_port()

    cmd = [anvil, "--port", str(port), "--fork-url", fork_url]
    if fork_block_number is not None:
        cmd += ["--fork-block-number", str(fork_block_number)]

    # Do not log the fork URL, it may contain an API key
    logger.info("Launching anvil on port %d", port)
    # Anvil logs every request, stdout would fill the pipe
    process = psutil.Popen(cmd, stdin=DEVNULL, stdout=DEVNULL, stderr=PIPE)

    deadline = time.time() + launch_wait_seconds
    while not is_localhost_port_listening(port):
        if process.poll() is not None or time.time() > deadline:
            _, stderr = shutdown_hard(process)
            raise AnvilLaunchFailed(f"anvil did not start on port {port}\nstderr: {stderr.decode('utf-8', errors='replace')}")
        time.sleep(0.1)

    launch = AnvilLaunch(port=port, json_rpc_url=f"http://localhost:{port}", process=process, cmd=cmd)

    if unlocked_addresses:
        web3 = create_web3(launch.json_rpc_url)
        for address in unlocked_addresses:
            web3.provider.make_request("anvil_impersonateAccount", [address])

    return launch
