"""Settlement backends that move coins out of the faucet.

Each backend implements submit(destination, amount) -> txid and raises
FaucetError with a classified ErrorKind on failure.
"""

from faucetbot.backends.base import SettlementBackend
from faucetbot.backends.evm import Erc20Backend, NativeEvmBackend
from faucetbot.backends.factory import build_backends, select_backend
from faucetbot.backends.lightning import LightningBackend

__all__ = [
    "Erc20Backend",
    "LightningBackend",
    "NativeEvmBackend",
    "SettlementBackend",
    "build_backends",
    "select_backend",
]
