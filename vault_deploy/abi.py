"""Contract ABI loading.

- Interface ABIs for tokens, routers, vaults and strategies ship
  with the package in ``vault_deploy/abi``

- Bind them to on-chain addresses with :py:func:`get_deployed_contract`
"""

import json
from functools import lru_cache
from pathlib import Path

from eth_typing import HexAddress
from web3 import Web3
from web3.contract import Contract

#: Where interface ABI files live
ABI_FOLDER = Path(__file__).parent / "abi"


@lru_cache(maxsize=32)
def get_abi_by_filename(fname: str) -> dict:
    """Read an ABI JSON file shipped with the package.

    :param fname:
        File name relative to :py:data:`ABI_FOLDER`, e.g. ``"IERC20.json"``.

    :return:
        Decoded JSON with at least the ``abi`` key
    """
    path = ABI_FOLDER / fname
    assert path.exists(), f"No ABI file: {path}"
    with open(path, "rt", encoding="utf-8") as f:
        return json.load(f)


def get_deployed_contract(web3: Web3, fname: str, address: HexAddress | str) -> Contract:
    """Bind an interface ABI to a deployed contract.

    Example:

    .. code-block:: python

        want = get_deployed_contract(web3, "IERC20.json", "0x21be370D5312f44cB42ce377BC9b8a0cEF1A4C83")
        balance = want.functions.balanceOf(recipient).call()

    :param fname:
        ABI file name, see :py:func:`get_abi_by_filename`

    :param address:
        Contract address in any case, checksummed here
    """
    abi_data = get_abi_by_filename(fname)
    return web3.eth.contract(address=Web3.to_checksum_address(address), abi=abi_data["abi"])
