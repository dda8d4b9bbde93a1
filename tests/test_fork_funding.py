"""Fund want tokens on a Fantom mainnet fork.

Requires ``JSON_RPC_FANTOM`` and Foundry ``anvil`` installed.
"""

import os
import shutil

import pytest
from web3 import Web3

from vault_deploy.abi import get_deployed_contract
from vault_deploy.anvil import AnvilLaunch, fork_network_anvil
from vault_deploy.config import SPOOKYSWAP_ROUTER, WBTC
from vault_deploy.network import create_web3
from vault_deploy.router import get_unirouter_contract, get_wrapped_native_address
from vault_deploy.testing import LiquidityPoolToken, SimpleToken, fund_want

JSON_RPC_FANTOM = os.environ.get("JSON_RPC_FANTOM")

pytestmark = pytest.mark.skipif(
    JSON_RPC_FANTOM is None or shutil.which("anvil") is None,
    reason="Set JSON_RPC_FANTOM env and install anvil",
)

#: SpookySwap WFTM-USDC pair
SPOOKY_WFTM_USDC_LP = "0x2b4C76d0dc16BE1C31D4C1DC53bF9B45987Fc75c"


@pytest.fixture()
def anvil_fantom_fork() -> AnvilLaunch:
    launch = fork_network_anvil(JSON_RPC_FANTOM)
    try:
        yield launch
    finally:
        launch.close()


@pytest.fixture()
def web3(anvil_fantom_fork) -> Web3:
    web3 = create_web3(anvil_fantom_fork.json_rpc_url)
    assert web3.eth.chain_id == 250
    return web3


@pytest.fixture()
def user(web3) -> str:
    return web3.eth.accounts[0]


@pytest.fixture()
def wftm() -> str:
    return get_wrapped_native_address("fantom")


def test_fund_wrapped_native(web3, user, wftm):
    """WFTM as want is wrapped directly."""
    unirouter, swap_signature = get_unirouter_contract(web3, SPOOKYSWAP_ROUTER)
    want = get_deployed_contract(web3, "IERC20.json", wftm)

    result = fund_want(web3, 10 * 10**18, want, wftm, unirouter, swap_signature, user)

    assert result.succeeded
    assert want.functions.balanceOf(user).call() == 10 * 10**18


def test_fund_single_token(web3, user, wftm):
    unirouter, swap_signature = get_unirouter_contract(web3, SPOOKYSWAP_ROUTER)
    assert swap_signature == "swapExactETHForTokens"
    want = get_deployed_contract(web3, "IERC20.json", WBTC)

    result = fund_want(web3, 100 * 10**18, want, wftm, unirouter, swap_signature, user)

    assert result.want_type == SimpleToken()
    assert result.succeeded
    assert want.functions.balanceOf(user).call() > 0


def test_fund_lp_token(web3, user, wftm):
    """Half wrapped to WFTM, half swapped to USDC, then added as liquidity."""
    unirouter, swap_signature = get_unirouter_contract(web3, SPOOKYSWAP_ROUTER)
    want = get_deployed_contract(web3, "IERC20.json", SPOOKY_WFTM_USDC_LP)

    result = fund_want(web3, 100 * 10**18, want, wftm, unirouter, swap_signature, user)

    assert isinstance(result.want_type, LiquidityPoolToken)
    assert result.succeeded
    assert want.functions.balanceOf(user).call() > 0
