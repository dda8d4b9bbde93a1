"""Contract address prediction.

A vault needs its strategy address in the constructor and the strategy
needs the vault address in its constructor. We break the cycle by
computing the ``CREATE`` addresses of the deployer's next transactions
before sending any of them.

.. warning ::

    Prediction is only valid as long as the deployer sends no other
    transactions between the prediction and the deployments. Nothing
    guards against this: a stale prediction leaves a vault pointing to
    an address where its strategy will never be.
"""

import logging
from dataclasses import dataclass

import rlp
from eth_typing import ChecksumAddress, HexAddress
from eth_utils import keccak, to_canonical_address, to_checksum_address
from web3 import Web3

from vault_deploy.network import create_web3

logger = logging.getLogger(__name__)

#: RPC endpoint the deploy script seeds the predictor with.
#:
#: This is a fixed Fantom endpoint regardless of the network being
#: deployed to.
PREDICTION_RPC = "https://rpc.ftm.tools"


@dataclass(slots=True, frozen=True)
class PredictedAddresses:
    """Where the deployer's next two contract creations will land."""

    #: First creation, current nonce
    vault: ChecksumAddress

    #: Second creation, current nonce + 1
    strategy: ChecksumAddress


def compute_create_address(creator: HexAddress | str, nonce: int) -> ChecksumAddress:
    """Compute the address of a contract created with ``CREATE``.

    ``keccak256(rlp([sender, nonce]))[12:]``

    :param creator:
        Account sending the creation transaction

    :param nonce:
        Nonce of the creation transaction
    """
    assert type(nonce) == int and nonce >= 0, f"Bad nonce: {nonce}"
    encoded = rlp.encode([to_canonical_address(creator), nonce])
    return to_checksum_address(keccak(encoded)[12:])


def predict_addresses(
    creator: HexAddress | str,
    rpc: str | None = None,
    web3: Web3 | None = None,
) -> PredictedAddresses:
    """Predict vault and strategy addresses for a deployer.

    :param creator:
        Deployer account

    :param rpc:
        JSON-RPC URL used to read the deployer nonce

    :param web3:
        Use an existing connection instead of ``rpc``
    """
    if web3 is None:
        assert rpc, "Give rpc or web3"
        web3 = create_web3(rpc)

    nonce = web3.eth.get_transaction_count(to_checksum_address(creator))
    predicted = PredictedAddresses(
        vault=compute_create_address(creator, nonce),
        strategy=compute_create_address(creator, nonce + 1),
    )
    logger.info(
        "Deployer %s at nonce %d, predicted vault %s, strategy %s",
        creator,
        nonce,
        predicted.vault,
        predicted.strategy,
    )
    return predicted
