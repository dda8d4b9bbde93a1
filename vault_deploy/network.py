"""Network name to JSON-RPC endpoint resolution.

Network names follow the deployment tooling convention (``bsc``, ``fantom``, ...),
not chain ids.

Any entry can be overridden with a ``JSON_RPC_<NETWORK>`` environment variable,
e.g. ``JSON_RPC_FANTOM=https://...`` for a private node.
"""

import logging
import os
from types import MappingProxyType

from web3 import HTTPProvider, Web3

logger = logging.getLogger(__name__)

#: Default public RPC endpoint for each known network
NETWORK_RPC = MappingProxyType(
    {
        "bsc": "https://bsc-dataseed.binance.org",
        "heco": "https://http-mainnet.hecochain.com",
        "avax": "https://api.avax.network/ext/bc/C/rpc",
        "polygon": "https://polygon-rpc.com",
        "fantom": "https://rpc.ftm.tools",
        "one": "https://api.s0.t.hmny.io",
        "arbitrum": "https://arb1.arbitrum.io/rpc",
        "celo": "https://forno.celo.org",
        "moonriver": "https://rpc.moonriver.moonbeam.network",
        "cronos": "https://evm-cronos.crypto.org",
        "aurora": "https://mainnet.aurora.dev",
        "fuse": "https://rpc.fuse.io",
        "metis": "https://andromeda.metis.io/?owner=1088",
        "localhost": "http://127.0.0.1:8545",
    }
)

#: HTTP read timeout for RPC calls, seconds
DEFAULT_HTTP_TIMEOUT = 60.0


class UnknownNetworkError(Exception):
    """Network name is not in any lookup table."""


def get_network_rpc(network: str) -> str:
    """Resolve the JSON-RPC URL of a network.

    :param network:
        Network name, e.g. ``fantom``

    :return:
        RPC URL from ``JSON_RPC_<NETWORK>`` environment variable,
        or the default public endpoint

    :raise UnknownNetworkError:
        Empty name, or no environment override and no table entry
    """
    if not network:
        raise UnknownNetworkError(f"Network name missing: {network!r}")

    env_var = f"JSON_RPC_{network.upper()}"
    override = os.environ.get(env_var)
    if override:
        logger.info("Using %s for network %s", env_var, network)
        return override

    try:
        return NETWORK_RPC[network]
    except KeyError as e:
        raise UnknownNetworkError(f"Unknown network: {network!r}. Known networks are: {', '.join(NETWORK_RPC)}") from e


def create_web3(json_rpc_url: str, timeout: float = DEFAULT_HTTP_TIMEOUT) -> Web3:
    """Create a Web3 instance talking to a single HTTP endpoint."""
    assert json_rpc_url.startswith("http"), f"Only HTTP RPC supported: {json_rpc_url}"
    return Web3(HTTPProvider(json_rpc_url, request_kwargs={"timeout": timeout}))
