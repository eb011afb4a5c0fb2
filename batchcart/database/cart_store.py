"""Durable storage for cart lines"""

import json
import os
import logging
from typing import Iterable, Callable

from ..models.cart import CartLine, CartSnapshot
from ..models.product import Product

logger = logging.getLogger(__name__)


class CartStore:
    """
    JSON-file backed slot holding the cart's line items.

    The file maps namespaced keys to payloads, so several slots can share
    one file; this store only touches its own key. Reads never raise and
    writes are best-effort: a broken disk must not break the in-memory cart.
    """

    def __init__(self, path: str, key: str = "batchcart:cart"):
        self.path = path
        self.key = key

    def load(self) -> list[CartLine]:
        """Load saved lines; empty on missing or corrupt data"""
        if not os.path.exists(self.path):
            return []

        try:
            data = self._read_file()
            entries = data.get(self.key, [])
            lines = [
                CartLine(
                    product=Product.model_validate(entry["product"]),
                    quantity=int(entry["quantity"]),
                )
                for entry in entries
            ]
        except Exception as e:
            logger.warning(f"Could not load cart from {self.path}: {e}")
            return []

        lines = self._normalize(lines)
        logger.info(f"Loaded {len(lines)} cart lines from {self.path}")
        return lines

    def save(self, lines: Iterable[CartLine]) -> None:
        """Replace the stored line set"""
        try:
            payload = [
                {
                    "product": _dump_product(line.product),
                    "quantity": line.quantity,
                }
                for line in lines
            ]
            self._write_key(payload)
            logger.debug(f"Saved {len(payload)} cart lines to {self.path}")
        except Exception as e:
            logger.error(f"Could not save cart: {e}")

    def clear(self) -> None:
        """Remove the cart slot, keeping other keys in the file"""
        try:
            data = self._read_file() if os.path.exists(self.path) else {}
            if data.pop(self.key, None) is not None:
                self._write_file(data)
                logger.info("Cart storage cleared")
        except Exception as e:
            logger.warning(f"Could not clear cart storage: {e}")

    def _read_file(self) -> dict:
        with open(self.path, encoding="utf-8") as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise ValueError("cart file is not a JSON object")
        return data

    def _write_key(self, payload: list) -> None:
        try:
            data = self._read_file() if os.path.exists(self.path) else {}
        except ValueError:
            # Unreadable file is overwritten rather than merged
            data = {}
        data[self.key] = payload
        self._write_file(data)

    def _write_file(self, data: dict) -> None:
        directory = os.path.dirname(self.path)
        if directory:
            os.makedirs(directory, exist_ok=True)

        tmp_path = f"{self.path}.tmp"
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2)
        os.replace(tmp_path, self.path)

    @staticmethod
    def _normalize(lines: list[CartLine]) -> list[CartLine]:
        """Drop non-positive quantities and duplicate products (first wins)"""
        seen: set[str] = set()
        result = []
        for line in lines:
            if line.quantity < 1 or line.product_id in seen:
                continue
            seen.add(line.product_id)
            result.append(line)
        return result


def _dump_product(product: Product) -> dict:
    """Product snapshot with the price kept as an exact decimal string"""
    data = product.model_dump(mode="json", by_alias=True)
    data["price"] = str(product.price)
    return data


def persist_on_change(store: CartStore) -> Callable[[CartSnapshot, CartSnapshot], None]:
    """Cart change listener that saves lines whenever they changed"""

    def listener(previous: CartSnapshot, current: CartSnapshot) -> None:
        if previous.lines != current.lines:
            store.save(current.lines)

    return listener
