"""Vault and strategy deployment configuration.

- :py:class:`DeploymentConfig` describes one vault + strategy pair

- :py:data:`STRATEGY_SCREAM_WBTC` is the Scream WBTC leveraged lending
  deployment on Fantom, the configuration ``scripts/deploy-strat-lend.py`` uses
"""

import dataclasses
from dataclasses import dataclass

from eth_typing import HexAddress
from web3 import Web3


#: Vault contract every strategy gets paired with
VAULT_CONTRACT_NAME = "BeefyVaultV6"

#: Fantom tokens used in the Scream routes
SCREAM = Web3.to_checksum_address("0xe0654c8e6fd4d733349ac7e09f6f23da256bf475")
WFTM = Web3.to_checksum_address("0x21be370d5312f44cb42ce377bc9b8a0cef1a4c83")
WBTC = Web3.to_checksum_address("0x321162cd933e2be498cd2267a90534a804051b11")

#: Scream scWBTC market the strategy supplies to and borrows from
SCREAM_WBTC_ITOKEN = Web3.to_checksum_address("0x4565dc3ef685e4775cdf920129111ddf43b9d882")

#: SpookySwap router on Fantom
SPOOKYSWAP_ROUTER = Web3.to_checksum_address("0xf491e7b69e4244ad4002bc14e878a34207e38c29")

#: Beefy keeper and fee recipient on Fantom
BEEFY_KEEPER = Web3.to_checksum_address("0x10aee6b5594942433e7fc2783598c979b030ef3d")
BEEFY_FEE_RECIPIENT = Web3.to_checksum_address("0x32c82ee8fca98ce5114d2060c5715aec714152fb")

#: Strategist receiving the strategist fee
STRATEGIST = Web3.to_checksum_address("0x010da5ff62b6e45f89fa7b2d8ced5a8b5754ec1b")


class ConfigurationError(Exception):
    """Deployment configuration is incomplete."""


@dataclass(slots=True)
class DeploymentConfig:
    """One vault and leveraged lending strategy pair.

    Every field is optional so that a half-filled configuration can be
    expressed, but :py:meth:`validate` refuses to let it through to
    deployment. ``None`` means absent: empty routes, zero and empty
    strings are considered set.
    """

    #: Strategy contract name in the Foundry project, e.g. ``StrategyScream``
    strategy_name: str | None = None

    #: Vault share token name and symbol
    moo_name: str | None = None
    moo_symbol: str | None = None

    #: Strategy upgrade timelock in seconds
    delay: int | None = None

    #: Target and maximum borrow rate, as a percentage of collateral
    borrow_rate: int | None = None
    borrow_rate_max: int | None = None

    #: How many supply/borrow loops the strategy does
    borrow_depth: int | None = None

    #: Minimum amount worth leveraging, in want token units
    min_leverage: int | None = None

    #: Swap paths from the reward token
    output_to_native_route: list[HexAddress] | None = None
    output_to_want_route: list[HexAddress] | None = None

    #: Money market tokens the strategy enters
    markets: list[HexAddress] | None = None

    unirouter: HexAddress | None = None
    keeper: HexAddress | None = None
    strategist: HexAddress | None = None
    beefy_fee_recipient: HexAddress | None = None

    def find_missing_fields(self) -> list[str]:
        """Names of the fields that have not been set."""
        return [f.name for f in dataclasses.fields(self) if getattr(self, f.name) is None]

    def validate(self):
        """Check every field is present.

        :raise ConfigurationError:
            One or more fields are ``None``
        """
        missing = self.find_missing_fields()
        if missing:
            raise ConfigurationError(f"One of config values undefined: {', '.join(missing)}")

    def get_vault_constructor_args(self, predicted_strategy: HexAddress) -> tuple:
        """Vault constructor is ``(strategy, name, symbol, approvalDelay)``."""
        return (
            predicted_strategy,
            self.moo_name,
            self.moo_symbol,
            self.delay,
        )

    def get_strategy_constructor_args(self, vault: HexAddress) -> tuple:
        return (
            self.borrow_rate,
            self.borrow_rate_max,
            self.borrow_depth,
            self.min_leverage,
            self.output_to_native_route,
            self.output_to_want_route,
            self.markets,
            vault,
            self.unirouter,
            self.keeper,
            self.strategist,
            self.beefy_fee_recipient,
        )


#: Scream WBTC leveraged lending on Fantom
STRATEGY_SCREAM_WBTC = DeploymentConfig(
    strategy_name="StrategyScream",
    moo_name="Moo Scream WBTC",
    moo_symbol="mooScreamWBTC",
    delay=21600,
    borrow_rate=72,
    borrow_rate_max=75,
    borrow_depth=4,
    min_leverage=1,
    output_to_native_route=[SCREAM, WFTM],
    output_to_want_route=[SCREAM, WFTM, WBTC],
    markets=[SCREAM_WBTC_ITOKEN],
    unirouter=SPOOKYSWAP_ROUTER,
    keeper=BEEFY_KEEPER,
    strategist=STRATEGIST,
    beefy_fee_recipient=BEEFY_FEE_RECIPIENT,
)
