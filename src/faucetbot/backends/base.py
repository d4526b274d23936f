"""Base interface for settlement backends.

Disbursement flow inside a backend:
1. Parse and check the destination
2. Convert the decimal amount to base units
3. Build, sign and submit the transaction
4. Return the transaction id, or raise FaucetError
"""

from abc import ABC, abstractmethod
from decimal import Decimal


class SettlementBackend(ABC):
    """Capability shared by every backend: send coins, return a txid."""

    name: str = "backend"

    @abstractmethod
    async def submit(self, destination: str, amount: Decimal) -> str:
        """Send `amount` to `destination`.

        Args:
            destination: Destination address as typed by the user
            amount: Amount in whole coins

        Returns:
            Transaction id

        Raises:
            FaucetError: Classified failure
        """
        pass
