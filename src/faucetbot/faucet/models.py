"""Core data types for the faucet."""

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Hashable, Optional

from faucetbot.faucet.errors import ErrorKind


class Network(str, Enum):
    """Settlement network a coin lives on."""

    LIGHTNING = "lightning"
    ETHEREUM = "ethereum"
    ARBITRUM = "arbitrum"

    @property
    def is_evm(self) -> bool:
        return self in (Network.ETHEREUM, Network.ARBITRUM)


class AssetKind(str, Enum):
    """Whether a coin is the chain's native asset or a token contract."""

    NATIVE = "native"
    TOKEN = "token"


@dataclass(frozen=True)
class CoinConfig:
    """Immutable per-coin faucet configuration.

    `endpoint` names the Lightning node (for Lightning coins) or the
    provider network (for EVM coins) the coin is settled through.
    """

    name: str
    network: Network
    asset_kind: AssetKind
    amount: Decimal
    decimals: int
    endpoint: str
    contract: Optional[str] = None
    explorer_url: Optional[str] = None


@dataclass(frozen=True)
class DisbursementRequest:
    """A single faucet request, already parsed by the chat adapter."""

    user_id: Hashable
    coin_code: str
    destination_address: str


class DisbursementStatus(str, Enum):
    """Terminal outcome of a request."""

    SENT = "sent"
    FAILED = "failed"
    COOLDOWN = "cooldown"
    UNSUPPORTED = "unsupported"


@dataclass
class DisbursementResult:
    """Result of handling a DisbursementRequest."""

    status: DisbursementStatus
    coin: str
    amount: Optional[Decimal] = None
    txid: Optional[str] = None
    explorer_url: Optional[str] = None
    error_kind: Optional[ErrorKind] = None
    detail: str = ""
    wait_seconds: Optional[float] = None

    @property
    def success(self) -> bool:
        return self.status == DisbursementStatus.SENT
