"""Run the faucet bot: python -m faucetbot.bot

Values from .env are exported to the environment before settings load, so
nested keys such as COINS__BTC__AMOUNT work from either place.
"""

from dotenv import load_dotenv

from faucetbot.bot.bot import main

if __name__ == "__main__":
    load_dotenv()
    main()
