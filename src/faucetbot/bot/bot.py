"""Bot initialization and runner."""

import asyncio
import logging
from typing import Optional

from aiogram import Bot, Dispatcher

from faucetbot.backends import build_backends
from faucetbot.bot.handlers import setup_routers
from faucetbot.config import Settings, get_settings
from faucetbot.credentials import load_credentials
from faucetbot.faucet.dispatcher import DisbursementDispatcher

logger = logging.getLogger(__name__)


def create_dispatcher(settings: Settings) -> DisbursementDispatcher:
    """Load credentials and build the faucet dispatcher.

    Raises:
        ConfigurationError, CredentialError: Startup is aborted
    """
    coins = settings.coin_configs()
    credentials = load_credentials(settings)
    backends = build_backends(settings, credentials)

    return DisbursementDispatcher(
        coins=coins,
        backends=backends,
        cooldown_hours=settings.cooldown_hours,
        backend_timeout=settings.backend_timeout_seconds,
    )


async def on_startup(bot: Bot) -> None:
    """Log the bot identity once connected."""
    me = await bot.get_me()
    logger.info(f"{me.username} is connected!")


def create_bot(
    settings: Settings,
    faucet: Optional[DisbursementDispatcher] = None,
) -> tuple[Bot, Dispatcher]:
    """Create bot and dispatcher instances."""
    if not settings.telegram_bot_token:
        raise ValueError("TELEGRAM_BOT_TOKEN is not set")

    if faucet is None:
        faucet = create_dispatcher(settings)

    # No default parse_mode - each handler decides
    bot = Bot(token=settings.telegram_bot_token)

    # The faucet dispatcher is injected into handlers as `faucet`
    dp = Dispatcher(faucet=faucet)
    dp.include_router(setup_routers())
    dp.startup.register(on_startup)

    return bot, dp


async def run_bot() -> None:
    """Run the bot in polling mode."""
    settings = get_settings()

    # Configure logging - reduce noise from libraries
    logging.basicConfig(
        level=logging.DEBUG if settings.debug else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    logging.getLogger("aiogram").setLevel(logging.INFO)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("web3").setLevel(logging.WARNING)

    logger.info("Starting faucet bot...")
    logger.info(f"Settings: {settings.get_safe_dict()}")

    bot, dp = create_bot(settings)

    try:
        # Each update is handled as its own task
        await bot.delete_webhook(drop_pending_updates=True)
        logger.info("Starting polling...")
        await dp.start_polling(bot, handle_as_tasks=True)
    finally:
        await bot.session.close()


def main() -> None:
    """Entry point for bot-only mode."""
    asyncio.run(run_bot())


if __name__ == "__main__":
    main()
