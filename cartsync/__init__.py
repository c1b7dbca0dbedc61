"""
cartsync — optimistic cart and order state for a multi-tenant B2B storefront.

    from cartsync import tenant as T     # Active tenant and currency
    from cartsync import pricing as P    # Price display and totals
    from cartsync import cache as C      # Optimistic collections
    from cartsync import mutation as M   # Optimistic mutations with rollback
    from cartsync import alerts as A     # Alert filtering and summary
"""

from cartsync import tenant
from cartsync import pricing
from cartsync import wallet
from cartsync import cache
from cartsync import api
from cartsync import mutation
from cartsync import alerts
from cartsync import storefront
from cartsync._types import Collection
from cartsync.config import Settings, load_settings
from cartsync.logs import configure_logging
from cartsync.storefront import Storefront

__version__ = "0.1.0"

__all__ = (
    "tenant",
    "pricing",
    "wallet",
    "cache",
    "api",
    "mutation",
    "alerts",
    "storefront",
    "Collection",
    "Settings",
    "load_settings",
    "configure_logging",
    "Storefront",
)
