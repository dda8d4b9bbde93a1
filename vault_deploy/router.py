"""DEX router and wrapped native token lookups.

Two static tables with deliberately different policies:

- Unknown routers fall back to the Uniswap v2 ETH-style interface, since
  most forks keep the ``swapExactETHForTokens`` name

- Unknown networks have no sensible wrapped native token and raise
"""

from dataclasses import dataclass
from types import MappingProxyType

from eth_typing import HexAddress
from web3 import Web3
from web3.contract import Contract

from vault_deploy.abi import get_deployed_contract
from vault_deploy.network import UnknownNetworkError


@dataclass(slots=True, frozen=True)
class RouterData:
    """Router ABI and the name of its native-in swap function."""

    #: Interface name, also the ABI file stem under ``vault_deploy/abi``
    interface: str

    #: ``swapExact<NATIVE>ForTokens`` variant this router exposes
    swap_signature: str

    @property
    def abi_file(self) -> str:
        return f"{self.interface}.json"


#: Uniswap v2 style routers with ETH in their function names
DEFAULT_ROUTER_DATA = RouterData("IUniswapRouterETH", "swapExactETHForTokens")

#: Routers that renamed the native swap. Keys are compared as exact strings.
UNIROUTER_DATA = MappingProxyType(
    {
        # Pangolin, Avalanche
        "0xA52aBE4676dbfd04Df42eF7755F01A3c41f28D27": RouterData("IUniswapRouterAVAX", "swapExactAVAXForTokens"),
        # Polygon router exposing MATIC-named swaps
        "0xf38a7A7Ac2D745E2204c13F824c00139DF831FFf": RouterData("IUniswapRouterMATIC", "swapExactMATICForTokens"),
    }
)

#: Network name to wrapped native token (WBNB, WAVAX, WMATIC, WHT, WFTM)
WRAPPED_NATIVE_TOKEN = MappingProxyType(
    {
        "bsc": "0xbb4CdB9CBd36B01bD1cBaEBF2De08d9173bc095c",
        "avax": "0xB31f66AA3C1e785363F0875A1B74E27b85FD66c7",
        "polygon": "0x0d500B1d8E8eF31E21C99d1Db9A6444d3ADf1270",
        "heco": "0x5545153CCFcA01fbd7Dd11C0b23ba694D9509A6F",
        "fantom": "0x21be370D5312f44cB42ce377BC9b8a0cEF1A4C83",
    }
)


def get_unirouter_data(address: str) -> RouterData:
    """Get the interface and swap function name for a router.

    Never fails: anything not listed in :py:data:`UNIROUTER_DATA`,
    including lowercased addresses and garbage, gets :py:data:`DEFAULT_ROUTER_DATA`.
    """
    return UNIROUTER_DATA.get(address, DEFAULT_ROUTER_DATA)


def get_wrapped_native_address(network: str) -> str:
    """Get the wrapped native token of a network.

    :param network:
        Network name like ``bsc`` or ``fantom``

    :raise UnknownNetworkError:
        Network not in :py:data:`WRAPPED_NATIVE_TOKEN`
    """
    try:
        return WRAPPED_NATIVE_TOKEN[network]
    except KeyError as e:
        raise UnknownNetworkError(f"Unknown network: {network!r}") from e


def get_unirouter_contract(web3: Web3, address: HexAddress | str) -> tuple[Contract, str]:
    """Bind a router with the ABI it needs.

    :return:
        Tuple (router contract, swap function name)
    """
    data = get_unirouter_data(address)
    return get_deployed_contract(web3, data.abi_file, address), data.swap_signature
