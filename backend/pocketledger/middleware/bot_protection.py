"""
Bot-protection middleware.

The protection provider is never loaded in this deployment: every mode
resolves to a pass-through ASGI middleware. The factory only reports, through
the logger, why protection is inactive.
"""

from __future__ import annotations

from functools import partial
from typing import Callable

from starlette.types import ASGIApp, Receive, Scope, Send

from pocketledger.core.config import Settings
from pocketledger.core.logging import get_logger

logger = get_logger("pocketledger.middleware.bot_protection")


class BotProtectionMiddleware:
    """Pass-through ASGI middleware carrying the configured protection mode."""

    def __init__(self, app: ASGIApp, mode: str = "OFF") -> None:
        self.app = app
        self.mode = mode

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        await self.app(scope, receive, send)


def create_bot_protection_middleware(settings: Settings) -> Callable[[ASGIApp], BotProtectionMiddleware]:
    """Build the middleware factory to hand to ``app.add_middleware``.

    Without a key, or with SHIELD_MODE=OFF, protection is disabled. With a key
    and LIVE or DRY_RUN the provider still is not loaded, so requests pass
    through unchanged in every configuration.
    """
    mode = settings.shield_mode

    if not settings.shield_key or mode == "OFF":
        if not settings.shield_key:
            logger.info("Bot protection key not provided - bot protection middleware disabled.")
        else:
            logger.info("Bot protection disabled via SHIELD_MODE=OFF")
        return partial(BotProtectionMiddleware, mode="OFF")

    logger.warning(
        f"Bot protection requested in {mode} mode but no provider is available in this "
        "deployment; requests will pass through. Consider setting SHIELD_MODE=OFF."
    )
    return partial(BotProtectionMiddleware, mode=mode)
