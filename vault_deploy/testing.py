"""Funding helpers for vault and strategy tests.

Get a test account some of a vault's want token by swapping the chain
native currency through a DEX router. Liquidity pool want tokens are
built by swapping half of the amount to each side of the pair and
adding liquidity.

These helpers are best effort. Swap and liquidity failures are logged
and swallowed, so a test suite keeps going and finds out from balances.
Check :py:attr:`FundingResult.succeeded` or the recipient balance if you care.

Example:

.. code-block:: python

    from vault_deploy.router import get_unirouter_contract, get_wrapped_native_address
    from vault_deploy.testing import fund_want, get_vault_want

    unirouter, swap_signature = get_unirouter_contract(web3, SPOOKYSWAP_ROUTER)
    want = get_vault_want(web3, vault)
    fund_want(
        web3,
        amount=10 * 10**18,
        want=want,
        native_token_address=get_wrapped_native_address("fantom"),
        unirouter=unirouter,
        swap_signature=swap_signature,
        recipient=user,
    )
"""

import logging
from dataclasses import dataclass, field

from eth_typing import HexAddress
from web3 import Web3
from web3.contract import Contract

from vault_deploy.abi import get_deployed_contract
from vault_deploy.transaction import assert_transaction_success

logger = logging.getLogger(__name__)

#: Swap and liquidity deadline far in the future (year 2128).
#:
#: Effectively disables deadline checks. Only fine for tests.
DEADLINE = 5000000000


class WantTokenNotFound(Exception):
    """Could not figure out which token a vault accepts."""


@dataclass(slots=True, frozen=True)
class SimpleToken:
    """Want is a plain ERC-20 we can swap to directly."""


@dataclass(slots=True, frozen=True)
class LiquidityPoolToken:
    """Want is a Uniswap v2 style pair token."""

    token0: Contract

    token1: Contract


@dataclass(slots=True)
class FundingResult:
    """What :py:func:`fund_want` managed to do.

    Always returned, never raised.
    """

    want_type: SimpleToken | LiquidityPoolToken

    #: Token addresses we failed to swap to
    failed_swaps: list[str] = field(default_factory=list)

    #: Error that aborted the funding, if any
    error: Exception | None = None

    @property
    def succeeded(self) -> bool:
        return not self.failed_swaps and self.error is None


def classify_want(web3: Web3, want: Contract) -> SimpleToken | LiquidityPoolToken:
    """Check whether want is a liquidity pool token.

    Probes ``token0()`` and ``token1()``. A failed probe is the normal way
    to find out a token is not a pair, so it is not an error.
    """
    try:
        pair = get_deployed_contract(web3, "IUniswapV2Pair.json", want.address)
        token0_address = pair.functions.token0().call()
        token1_address = pair.functions.token1().call()
    except Exception as e:
        logger.debug("%s is not a pair token: %s", want.address, e)
        return SimpleToken()

    return LiquidityPoolToken(
        token0=get_deployed_contract(web3, "IERC20.json", token0_address),
        token1=get_deployed_contract(web3, "IERC20.json", token1_address),
    )


def fund_want(
    web3: Web3,
    amount: int,
    want: Contract,
    native_token_address: HexAddress | str,
    unirouter: Contract,
    swap_signature: str,
    recipient: HexAddress | str,
) -> FundingResult:
    """Swap native currency to want token.

    - Plain tokens: one swap with the full ``amount``

    - Pair tokens: swap ``amount // 2`` to both sides, approve the router for the
      whole received balances and add liquidity with 1 wei minimums. An odd
      wei of ``amount`` is not used.

    Does not raise on swap or liquidity failures, see module docs.

    :param amount:
        Native currency in wei

    :param want:
        Token to fund the recipient with

    :param native_token_address:
        Wrapped native token, the first hop of every swap path

    :param unirouter:
        Router contract from :py:func:`vault_deploy.router.get_unirouter_contract`

    :param swap_signature:
        Name of the router native-in swap function, e.g. ``swapExactETHForTokens``

    :param recipient:
        Unlocked account paying the native currency and receiving the tokens.
        Every transaction is sent from it.
    """
    want_type = classify_want(web3, want)
    result = FundingResult(want_type=want_type)

    if isinstance(want_type, LiquidityPoolToken):
        token0 = want_type.token0
        token1 = want_type.token1
        try:
            for token in (token0, token1):
                ok = swap_native_for_token(
                    web3,
                    unirouter=unirouter,
                    amount=amount // 2,
                    native_token_address=native_token_address,
                    token=token,
                    recipient=recipient,
                    swap_signature=swap_signature,
                )
                if not ok:
                    result.failed_swaps.append(token.address)

            token0_balance = token0.functions.balanceOf(recipient).call()
            token1_balance = token1.functions.balanceOf(recipient).call()

            assert_transaction_success(web3, token0.functions.approve(unirouter.address, token0_balance).transact({"from": recipient}))
            assert_transaction_success(web3, token1.functions.approve(unirouter.address, token1_balance).transact({"from": recipient}))

            tx_hash = unirouter.functions.addLiquidity(
                token0.address,
                token1.address,
                token0_balance,
                token1_balance,
                1,
                1,
                recipient,
                DEADLINE,
            ).transact({"from": recipient})
            assert_transaction_success(web3, tx_hash)
        except Exception as e:
            logger.warning("Could not add LP liquidity for %s: %s", want.address, e)
            result.error = e
    else:
        try:
            ok = swap_native_for_token(
                web3,
                unirouter=unirouter,
                amount=amount,
                native_token_address=native_token_address,
                token=want,
                recipient=recipient,
                swap_signature=swap_signature,
            )
            if not ok:
                result.failed_swaps.append(want.address)
        except Exception as e:
            logger.warning("Could not swap for want %s: %s", want.address, e)
            result.error = e

    return result


def swap_native_for_token(
    web3: Web3,
    unirouter: Contract,
    amount: int,
    native_token_address: HexAddress | str,
    token: Contract,
    recipient: HexAddress | str,
    swap_signature: str,
) -> bool:
    """Swap native currency to a token, or wrap it if the token is the wrapped native.

    Router swap failures are logged and reported with the return value.
    Wrapping failures raise.

    Transactions are sent from ``recipient``, which must be an unlocked account.

    :return:
        ``False`` if the router swap failed
    """
    if token.address == native_token_address:
        wrap_native(web3, amount, native_token_address, recipient)
        return True

    try:
        swap = getattr(unirouter.functions, swap_signature)
        tx_hash = swap(0, [native_token_address, token.address], recipient, DEADLINE).transact({"from": recipient, "value": amount})
        assert_transaction_success(web3, tx_hash)
    except Exception as e:
        logger.warning("Could not swap for %s: %s", token.address, e)
        return False

    return True


def wrap_native(web3: Web3, amount: int, wrapped_native_address: HexAddress | str, owner: HexAddress | str):
    """Deposit native currency to the wrapped native token contract.

    The wrapped tokens are credited to ``owner``, the depositing account.
    """
    wrapped_native = get_deployed_contract(web3, "IWrappedNative.json", wrapped_native_address)
    tx_hash = wrapped_native.functions.deposit().transact({"from": owner, "value": amount})
    assert_transaction_success(web3, tx_hash)


def log_token_balance(token: Contract, wallet: HexAddress | str) -> int:
    """Log a token balance, assuming 18 decimals.

    :return:
        Raw balance
    """
    balance = token.functions.balanceOf(wallet).call()
    logger.info("Balance: %s", Web3.from_wei(balance, "ether"))
    return balance


def get_vault_want(web3: Web3, vault: Contract, native_token_address: HexAddress | str | None = None) -> Contract:
    """Find the token a vault accepts.

    Tries ``token()``, then ``want()``, then uses ``native_token_address``.

    :raise WantTokenNotFound:
        Neither accessor works and no native token fallback was given
    """
    vault = get_deployed_contract(web3, "IVault.json", vault.address)
    try:
        want_address = vault.functions.token().call()
    except Exception:
        try:
            want_address = vault.functions.want().call()
        except Exception as e:
            if native_token_address is None:
                raise WantTokenNotFound(f"Vault {vault.address} has no token() or want(), and no native token fallback given") from e
            want_address = native_token_address

    return get_deployed_contract(web3, "IERC20.json", want_address)


def unpause_if_paused(web3: Web3, strategy: Contract, keeper: HexAddress | str) -> bool:
    """Unpause a strategy with the keeper account.

    :return:
        ``True`` if we sent an unpause transaction
    """
    strategy = get_deployed_contract(web3, "IStrategy.json", strategy.address)
    if not strategy.functions.paused().call():
        return False

    tx_hash = strategy.functions.unpause().transact({"from": keeper})
    assert_transaction_success(web3, tx_hash)
    logger.info("Strategy %s unpaused by %s", strategy.address, keeper)
    return True
