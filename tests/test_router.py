"""Router and wrapped native token tables."""

import pytest

from vault_deploy.network import UnknownNetworkError
from vault_deploy.router import (
    DEFAULT_ROUTER_DATA,
    RouterData,
    get_unirouter_data,
    get_wrapped_native_address,
)


def test_avax_router():
    data = get_unirouter_data("0xA52aBE4676dbfd04Df42eF7755F01A3c41f28D27")
    assert data == RouterData("IUniswapRouterAVAX", "swapExactAVAXForTokens")
    assert data.abi_file == "IUniswapRouterAVAX.json"


def test_matic_router():
    data = get_unirouter_data("0xf38a7A7Ac2D745E2204c13F824c00139DF831FFf")
    assert data == RouterData("IUniswapRouterMATIC", "swapExactMATICForTokens")


@pytest.mark.parametrize(
    "address",
    [
        "0xF491e7B69E4244ad4002BC14e878a34207E38c29",
        # Same router as above but not in the exact form listed
        "0xa52abe4676dbfd04df42ef7755f01a3c41f28d27",
        "",
        "not an address",
        "0x1234",
    ],
)
def test_other_routers_default_to_eth(address):
    """Anything unlisted gets the ETH style interface, never an error."""
    data = get_unirouter_data(address)
    assert data is DEFAULT_ROUTER_DATA
    assert data.interface == "IUniswapRouterETH"
    assert data.swap_signature == "swapExactETHForTokens"


@pytest.mark.parametrize(
    "network, address",
    [
        ("bsc", "0xbb4CdB9CBd36B01bD1cBaEBF2De08d9173bc095c"),
        ("avax", "0xB31f66AA3C1e785363F0875A1B74E27b85FD66c7"),
        ("polygon", "0x0d500B1d8E8eF31E21C99d1Db9A6444d3ADf1270"),
        ("heco", "0x5545153CCFcA01fbd7Dd11C0b23ba694D9509A6F"),
        ("fantom", "0x21be370D5312f44cB42ce377BC9b8a0cEF1A4C83"),
    ],
)
def test_wrapped_native(network, address):
    assert get_wrapped_native_address(network) == address


@pytest.mark.parametrize("network", ["", "ethereum", "BSC", "fantom "])
def test_wrapped_native_unknown_network(network):
    """Unlike routers, unknown networks are an error."""
    with pytest.raises(UnknownNetworkError):
        get_wrapped_native_address(network)
