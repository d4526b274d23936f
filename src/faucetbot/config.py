"""Application configuration using pydantic-settings.

Settings come from (highest priority first) init kwargs, environment
variables, a .env file and config.toml. Nested values can be set from the
environment with "__" as delimiter, e.g. COINS__BTC__AMOUNT=0.0005.

Example config.toml:

    telegram_bot_token = "..."
    cooldown_hours = 24
    evm_mnemonic = "..."

    [providers]
    ethereum = "wss://sepolia.example.org"
    arbitrum = "https://arbitrum-sepolia.example.org"

    [lightning_nodes.btc]
    url = "https://localhost:8080"
    macaroon_path = "/home/lnd/.lnd/data/chain/bitcoin/testnet/admin.macaroon"

    [coins.BTC]
    amount = "0.0005"
    network = "lightning"
    decimals = 8
    node = "btc"

    [coins.USDC]
    amount = "10"
    network = "ethereum"
    asset_kind = "token"
    contract = "0x1c7D4B196Cb0C7B01d743Fbc6116a902379C7238"
    decimals = 6
"""

from decimal import Decimal
from functools import lru_cache
from typing import Optional

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    TomlConfigSettingsSource,
)

from faucetbot.faucet.errors import ConfigurationError
from faucetbot.faucet.explorer import explorer_template
from faucetbot.faucet.models import AssetKind, CoinConfig, Network


class LightningNodeSettings(BaseModel):
    """Connection details for one LND node."""

    url: str = Field(description="REST base URL, e.g. https://localhost:8080")
    macaroon_path: str = Field(description="Path to admin.macaroon")
    tls_cert_path: Optional[str] = Field(
        default=None, description="Node tls.cert; unset accepts the self-signed cert"
    )


class CoinSettings(BaseModel):
    """Per-coin faucet settings."""

    amount: Decimal = Field(gt=0, description="Amount sent per request")
    network: Network
    asset_kind: AssetKind = AssetKind.NATIVE
    decimals: int = Field(ge=0, le=77)
    contract: Optional[str] = None
    node: Optional[str] = Field(default=None, description="Lightning node name")
    explorer_url: Optional[str] = Field(
        default=None, description="Explorer template containing {txid}"
    )

    @field_validator("amount", mode="before")
    @classmethod
    def _float_via_str(cls, value):
        # TOML floats: 0.0005 must not become 0.000500000000000000010408...
        if isinstance(value, float):
            return str(value)
        return value


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        toml_file="config.toml",
        extra="ignore",
    )

    # ======================
    # Telegram
    # ======================
    telegram_bot_token: str = Field(default="", description="Telegram bot token from BotFather")

    # ======================
    # Faucet
    # ======================
    cooldown_hours: float = Field(default=24, ge=0, description="Hours between two requests")
    backend_timeout_seconds: float = Field(
        default=60.0, gt=0, description="Timeout for a single backend call"
    )
    lightning_label: str = Field(default="", description="Label for Lightning transactions")
    debug: bool = Field(default=False, description="Enable debug logging")

    # ======================
    # Credentials
    # ======================
    evm_private_key: Optional[str] = Field(default=None, description="Faucet EVM private key")
    evm_mnemonic: Optional[str] = Field(
        default=None, description="Faucet BIP-39 mnemonic (used if no private key)"
    )

    # ======================
    # Endpoints
    # ======================
    providers: dict[str, str] = Field(
        default_factory=dict, description="EVM JSON-RPC endpoint per network name"
    )
    lightning_nodes: dict[str, LightningNodeSettings] = Field(default_factory=dict)

    # ======================
    # Coins
    # ======================
    coins: dict[str, CoinSettings] = Field(default_factory=dict)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            TomlConfigSettingsSource(settings_cls),
        )

    @field_validator("coins")
    @classmethod
    def _upper_coin_codes(cls, coins: dict[str, CoinSettings]) -> dict[str, CoinSettings]:
        return {"".join(code.split()).upper(): coin for code, coin in coins.items()}

    @property
    def has_evm_coins(self) -> bool:
        return any(coin.network.is_evm for coin in self.coins.values())

    def coin_configs(self) -> dict[str, CoinConfig]:
        """Validate coin settings and build immutable CoinConfigs.

        Raises:
            ConfigurationError: On any inconsistency
        """
        configs: dict[str, CoinConfig] = {}

        for code, coin in self.coins.items():
            if coin.network == Network.LIGHTNING:
                if not coin.node or coin.node not in self.lightning_nodes:
                    raise ConfigurationError(
                        f"{code}: Lightning coins need a 'node' from lightning_nodes"
                    )
                endpoint = coin.node
                asset_kind = AssetKind.NATIVE
            else:
                endpoint = coin.network.value
                if endpoint not in self.providers:
                    raise ConfigurationError(f"{code}: no provider configured for '{endpoint}'")
                asset_kind = coin.asset_kind
                if asset_kind == AssetKind.TOKEN and not coin.contract:
                    raise ConfigurationError(f"{code}: token coins require 'contract'")

            if coin.explorer_url is None and explorer_template(coin.network, code) is None:
                raise ConfigurationError(
                    f"{code}: no explorer known for {coin.network.value}, set 'explorer_url'"
                )

            configs[code] = CoinConfig(
                name=code,
                network=coin.network,
                asset_kind=asset_kind,
                amount=coin.amount,
                decimals=coin.decimals,
                endpoint=endpoint,
                contract=coin.contract,
                explorer_url=coin.explorer_url,
            )

        return configs

    def get_safe_dict(self) -> dict:
        """Return settings dict with secrets redacted."""
        return {
            "telegram_bot_token": "***" if self.telegram_bot_token else "(not set)",
            "cooldown_hours": self.cooldown_hours,
            "backend_timeout_seconds": self.backend_timeout_seconds,
            "evm_key": "***" if (self.evm_private_key or self.evm_mnemonic) else "(not set)",
            "providers": dict(self.providers),
            "lightning_nodes": {name: node.url for name, node in self.lightning_nodes.items()},
            "coins": {
                code: f"{coin.amount} on {coin.network.value}" for code, coin in self.coins.items()
            },
        }


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
