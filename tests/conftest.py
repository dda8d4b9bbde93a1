"""Offline stand-ins for web3 contracts.

The funding helpers only use ``contract.address``,
``contract.functions.<name>(*args).call()`` and ``.transact(tx)``,
so a small fake covers them without a node.
"""

from typing import Any

import pytest
from hexbytes import HexBytes
from web3.exceptions import ContractLogicError


class FakeFunctionCall:
    def __init__(self, contract: "FakeContract", name: str, args: tuple):
        self.contract = contract
        self.name = name
        self.args = args

    def call(self):
        self.contract.calls.append((self.name, self.args))
        if self.name not in self.contract.views:
            raise ContractLogicError("execution reverted")
        view = self.contract.views[self.name]
        if callable(view):
            return view(*self.args)
        return view

    def transact(self, tx: dict | None = None):
        self.contract.transactions.append((self.name, self.args, tx))
        if self.name in self.contract.reverts:
            raise ContractLogicError(f"execution reverted: {self.name}")
        return HexBytes(b"\x01" * 32)


class FakeFunctions:
    def __init__(self, contract: "FakeContract"):
        self._contract = contract

    def __getattr__(self, name: str):
        return lambda *args: FakeFunctionCall(self._contract, name, args)


class FakeContract:
    """Contract with canned view results.

    :param views:
        Function name to a value, or a callable taking the call args.
        Functions not listed revert when called.

    :param reverts:
        Function names whose transactions revert
    """

    def __init__(
        self,
        address: str,
        views: dict[str, Any] | None = None,
        reverts: set[str] | None = None,
    ):
        self.address = address
        self.views = views or {}
        self.reverts = reverts or set()
        self.calls: list[tuple] = []
        self.transactions: list[tuple] = []
        self.functions = FakeFunctions(self)

    def __repr__(self):
        return f"<FakeContract {self.address}>"

    def transacted(self, name: str) -> list[tuple]:
        return [t for t in self.transactions if t[0] == name]


class FakeEth:
    def __init__(self):
        self.nonces: dict[str, int] = {}

    def wait_for_transaction_receipt(self, tx_hash, timeout=None):
        return {"status": 1, "transactionHash": tx_hash}

    def get_transaction_count(self, address, block_identifier="latest"):
        return self.nonces.get(address, 0)


class FakeWeb3:
    def __init__(self):
        self.eth = FakeEth()


class FakeChain:
    """Address book of fake contracts, looked up regardless of ABI."""

    def __init__(self):
        self.web3 = FakeWeb3()
        self.contracts: dict[str, FakeContract] = {}

    def add(self, contract: FakeContract) -> FakeContract:
        self.contracts[contract.address] = contract
        return contract

    def get_deployed_contract(self, web3, fname: str, address: str) -> FakeContract:
        if address not in self.contracts:
            # Empty account, every call reverts
            self.contracts[address] = FakeContract(address)
        return self.contracts[address]


@pytest.fixture()
def fake_chain(monkeypatch) -> FakeChain:
    """Route funding helper contract lookups to fakes."""
    chain = FakeChain()
    monkeypatch.setattr("vault_deploy.testing.get_deployed_contract", chain.get_deployed_contract)
    return chain
