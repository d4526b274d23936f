"""Telegram bot front-end for the faucet."""
