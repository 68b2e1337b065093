# product catalog writes
from __future__ import annotations

import math
import re
import time
from datetime import datetime, timezone
from typing import Iterable, Optional, Union

from db.gateway import DocumentGateway
from db.models import Product
from utils.errors import ValidationError
from utils.logger import get_logger

_logger = get_logger(__name__)

PLACEHOLDER_IMAGE_URL = "https://placehold.co/400x300/e53e3e/fff?text={text}"


def placeholder_image_url(name: str) -> str:
    """Deterministic placeholder image showing the product name."""
    return PLACEHOLDER_IMAGE_URL.format(text=re.sub(r"\s", "+", name))


def parse_price(price: Union[str, float, int, None]) -> float:
    """A positive finite price, or ValidationError."""
    try:
        value = float(price)
    except (TypeError, ValueError) as e:
        raise ValidationError("Please enter a valid name and price.") from e
    if not math.isfinite(value) or value <= 0:
        raise ValidationError("Please enter a valid name and price.")
    return value


def new_product_id() -> str:
    # epoch milliseconds, unique enough for a single admin
    return str(int(time.time() * 1000))


def find_product(products: Iterable[Product], product_id: str) -> Optional[Product]:
    return next((p for p in products if p.id == product_id), None)


class CatalogManager:
    def __init__(self, gateway: DocumentGateway, collection: str) -> None:
        self.gateway = gateway
        self.collection = collection

    async def upsert(
        self,
        product_id: Optional[str],
        name: str,
        price: Union[str, float, int],
        description: str = "",
        image_url: str = "",
        now: Optional[datetime] = None,
    ) -> str:
        """
        Create a product (empty id) or fully overwrite the one at `product_id`.
        Returns the product id.
        """
        name = (name or "").strip()
        if not name:
            raise ValidationError("Please enter a valid name and price.")
        value = parse_price(price)

        doc_id = (product_id or "").strip() or new_product_id()
        product = Product(
            id=doc_id,
            name=name,
            price=value,
            description=(description or "").strip(),
            image_url=(image_url or "").strip() or placeholder_image_url(name),
            created_at=(now or datetime.now()).astimezone(timezone.utc).isoformat(),
        )
        await self.gateway.put_record(
            self.collection, doc_id, product.to_record(), merge=False
        )
        _logger.info(f"Product {doc_id} saved: {name} ({value:.2f})")
        return doc_id

    async def remove(self, product_id: str) -> None:
        await self.gateway.delete_record(self.collection, product_id)
        _logger.info(f"Product {product_id} deleted")
