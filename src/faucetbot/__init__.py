"""Faucetbot - chat-triggered testnet coin faucet."""

__version__ = "0.1.0"
