# ShopMaster - Retail Point-of-Sale & Inventory manager for small shops
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Boundary with an external insights provider.

ShopMaster does not ship any AI integration. A front-end may plug one in by
passing an object implementing :class:`InsightsProvider`. The provider only
ever receives immutable data (the dashboard metrics, the products and the
sales); it never gets access to the shop state or its mutation handlers.
"""

import logging
from typing import Protocol

from .engine import DashboardStats
from .models import Product, Sale
from .state import ShopState

LOGGER = logging.getLogger(__name__)

FALLBACK_MESSAGE = "Insights are not available right now."


class InsightsProvider(Protocol):
    """Anything able to turn shop data into a short freeform text."""

    def generate(
        self,
        stats: DashboardStats,
        products: tuple[Product, ...],
        sales: tuple[Sale, ...],
    ) -> str: ...


def request_insights(state: ShopState, provider: InsightsProvider) -> str:
    """
    Ask ``provider`` for insights on the current state.

    Provider failures are logged and replaced by ``FALLBACK_MESSAGE``.
    """
    try:
        text = provider.generate(state.stats, state.products, state.sales)
    except Exception as exc:  # noqa: BLE001
        LOGGER.error("Insights provider failed: %s", exc)
        return FALLBACK_MESSAGE

    if not isinstance(text, str) or not text.strip():
        return FALLBACK_MESSAGE
    return text
