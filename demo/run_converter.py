import asyncio
import logging
import sys
from pathlib import Path

from dotenv import load_dotenv

# Demo script for the ExchangeRatesTool.
# Requires EXCHANGE_API_KEY (apilayer) in the environment or in .env.

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

load_dotenv(dotenv_path=ROOT_DIR / ".env")

from config.logging import get_logger
from tools.exchange.tool import ExchangeRatesTool


async def main() -> None:
    get_logger("ExchangeRatesClient", level=logging.WARNING)
    tool = ExchangeRatesTool()
    outcome = await tool.run(amount=1500, base="USD", target="JPY")
    if outcome["error"]:
        print(f"Conversion failed: {outcome['error']}")
        return
    print(f"{outcome['amount']:.2f} {outcome['base']} = {outcome['converted']:.2f} {outcome['target']}")


if __name__ == "__main__":
    asyncio.run(main())
