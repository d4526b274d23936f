"""Start and basic command handlers."""

from aiogram import Router
from aiogram.filters import Command, CommandStart
from aiogram.types import Message

from faucetbot.faucet.dispatcher import DisbursementDispatcher, format_amount, format_wait

router = Router()


@router.message(CommandStart())
@router.message(Command("help"))
async def cmd_start(message: Message, faucet: DisbursementDispatcher) -> None:
    """Explain how to request coins."""
    text = f"""Testnet faucet

Send a message like:
  BTC-tb1qexampleaddress
  ETH-0x0000000000000000000000000000000000000000

You can request each coin once every {format_wait(faucet.cooldown_seconds)}.
Use /coins to list what is available."""

    await message.answer(text)


@router.message(Command("coins"))
async def cmd_coins(message: Message, faucet: DisbursementDispatcher) -> None:
    """List configured coins and amounts."""
    if not faucet.coins:
        await message.answer("No coins configured.")
        return

    lines = ["Available coins:"]
    for code, coin in sorted(faucet.coins.items()):
        lines.append(f"  {code}: {format_amount(coin.amount)} ({coin.network.value})")

    await message.answer("\n".join(lines))
