"""Transaction confirmation helpers."""

import logging

from hexbytes import HexBytes
from web3 import Web3

logger = logging.getLogger(__name__)

#: How long we wait for a transaction to be mined, seconds
DEFAULT_RECEIPT_TIMEOUT = 180


class TransactionFailed(Exception):
    """Transaction was mined but reverted, or its receipt was not what we expected."""


def assert_transaction_success(
    web3: Web3,
    tx_hash: HexBytes | bytes | str,
    timeout: float = DEFAULT_RECEIPT_TIMEOUT,
) -> dict:
    """Wait for a transaction and check it did not revert.

    :param tx_hash:
        Hash returned by ``transact()`` or ``send_raw_transaction()``

    :return:
        Transaction receipt

    :raise TransactionFailed:
        Receipt status was not 1
    """
    receipt = web3.eth.wait_for_transaction_receipt(tx_hash, timeout=timeout)
    if receipt["status"] != 1:
        raise TransactionFailed(f"Transaction {HexBytes(tx_hash).hex()} reverted, receipt: {receipt}")
    return receipt
