"""Cart and checkout state engine for a weekly-batch storefront"""

from .main import Storefront, create_storefront

__all__ = ["Storefront", "create_storefront"]
