"""Bot handlers module."""

from aiogram import Router

from faucetbot.bot.handlers import faucet, start


def setup_routers() -> Router:
    """Create and configure all routers."""
    main_router = Router()

    # Commands first; the faucet router matches any remaining text
    main_router.include_router(start.router)
    main_router.include_router(faucet.router)

    return main_router
