"""Faucet request handler: replies to "COIN-ADDRESS" messages."""

import logging
from typing import Optional

from aiogram import F, Router, html
from aiogram.enums import ParseMode
from aiogram.types import Message

from faucetbot.faucet.dispatcher import DisbursementDispatcher, normalize_coin_code

logger = logging.getLogger(__name__)

router = Router()


def parse_faucet_message(text: str) -> Optional[tuple[str, str]]:
    """Split "COIN-ADDRESS" into (coin, address).

    Spaces are ignored and the coin is upper-cased. Returns None unless the
    text contains exactly one "-".
    """
    parts = text.split("-")
    if len(parts) != 2:
        return None

    coin = normalize_coin_code(parts[0])
    address = parts[1].replace(" ", "").strip()
    if not coin or not address:
        return None

    return coin, address


@router.message(F.text, ~F.text.startswith("/"))
async def handle_faucet_request(message: Message, faucet: DisbursementDispatcher) -> None:
    """Handle a coin request."""
    user = message.from_user
    if user is None or user.is_bot:
        return

    parsed = parse_faucet_message(message.text)
    if parsed is None:
        return

    coin, address = parsed
    response = await faucet.handle(user.id, coin, address)

    try:
        await message.answer(
            f"{user.mention_html()} {html.quote(response)}",
            parse_mode=ParseMode.HTML,
        )
    except Exception as e:
        logger.error(f"Error sending message to {user.id}: {e}")
