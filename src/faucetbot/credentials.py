"""Startup credential loading.

Reads LND macaroons from disk and derives the faucet's EVM signing account.
Any failure here is fatal: the bot must not start half-configured.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from eth_account import Account
from eth_account.signers.local import LocalAccount

from faucetbot.faucet.errors import CredentialError

logger = logging.getLogger(__name__)


@dataclass
class FaucetCredentials:
    """Opaque credential handles passed to the backends."""

    macaroons: dict[str, str] = field(default_factory=dict)  # node name -> hex
    evm_account: Optional[LocalAccount] = None


def read_macaroon(path: str) -> str:
    """Read a binary macaroon file and hex-encode it."""
    try:
        return Path(path).expanduser().read_bytes().hex()
    except OSError as e:
        raise CredentialError(f"Macaroon file not found: {path} ({e})") from e


def derive_evm_private_key(mnemonic: str, index: int = 0) -> bytes:
    """Derive the EVM private key at m/44'/60'/0'/0/index."""
    from bip_utils import Bip39SeedGenerator, Bip44, Bip44Changes, Bip44Coins

    seed = Bip39SeedGenerator(mnemonic).Generate()
    bip44 = Bip44.FromSeed(seed, Bip44Coins.ETHEREUM)
    account = bip44.Purpose().Coin().Account(0).Change(Bip44Changes.CHAIN_EXT)
    return account.AddressIndex(index).PrivateKey().Raw().ToBytes()


def load_evm_account(
    private_key: Optional[str] = None,
    mnemonic: Optional[str] = None,
) -> LocalAccount:
    """Build the faucet signing account from a private key or mnemonic."""
    try:
        if private_key:
            key = private_key.strip()
            if not key.startswith("0x"):
                key = "0x" + key
            return Account.from_key(key)
        if mnemonic:
            return Account.from_key(derive_evm_private_key(mnemonic.strip()))
    except Exception as e:
        raise CredentialError(f"Invalid EVM signing key: {type(e).__name__}") from e

    raise CredentialError("EVM coins configured but neither evm_private_key nor evm_mnemonic set")


def load_credentials(settings) -> FaucetCredentials:
    """Load every credential the configured coins need.

    Raises:
        CredentialError: If a macaroon file or signing key is missing/invalid
    """
    credentials = FaucetCredentials()

    for name, node in settings.lightning_nodes.items():
        credentials.macaroons[name] = read_macaroon(node.macaroon_path)
        logger.info(f"Loaded macaroon for Lightning node '{name}'")

    if settings.has_evm_coins:
        credentials.evm_account = load_evm_account(
            settings.evm_private_key, settings.evm_mnemonic
        )
        logger.info(f"EVM faucet address: {credentials.evm_account.address}")

    return credentials
