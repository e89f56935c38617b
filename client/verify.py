"""
client/verify.py

Purpose:
    Connectivity check against a running RetroScore backend. Fetches one
    random match as a guest and prints it; nothing is submitted.

Dependencies:
    - retroscore.providers.retroscore_api
    - retroscore.middleware.logging
"""

import asyncio
import os
import sys
from pprint import pprint

sys.path.append(os.path.dirname(os.path.abspath(__file__)))

from retroscore.config import settings
from retroscore.errors import RetroScoreError
from retroscore.middleware.logging import setup_logging
from retroscore.providers.retroscore_api import RetroScoreApi


async def main() -> int:
    setup_logging(settings.LOG_LEVEL)
    print("\nRETROSCORE BACKEND CHECK")
    print(f"API: {settings.API_BASE_URL}")
    print("=" * 50)

    async with RetroScoreApi() as api:
        try:
            match = await api.fetch_random_match()
        except RetroScoreError as e:
            print(f"\nSYSTEM RED: {type(e).__name__}: {e}")
            return 1

    print("\n--- MATCH ---")
    pprint(match.model_dump(by_alias=True, mode="json"), indent=2)
    print("-" * 50)
    print(f"\nSYSTEM GREEN: {match.home_team.name} vs {match.away_team.name}, {match.display_date}")
    return 0


if __name__ == "__main__":
    raise SystemExit(asyncio.run(main()))
