# Persistence modules

from .cart_store import CartStore, persist_on_change

__all__ = [
    "CartStore",
    "persist_on_change",
]
