import os
import sys
import tempfile
import unittest
from datetime import datetime, timezone

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir))
src_path = os.path.join(ROOT, "src")
if src_path not in sys.path:
    sys.path.insert(0, src_path)

from db import database as db_database  # noqa: E402
from db.catalog import (  # noqa: E402
    CatalogManager,
    find_product,
    parse_price,
    placeholder_image_url,
)
from db.gateway import DocumentGateway  # noqa: E402
from db.models import Product  # noqa: E402
from utils.config import collection_path  # noqa: E402
from utils.errors import ValidationError  # noqa: E402

PRODUCTS = collection_path("test-app", "fashion_chips_products")
NOW = datetime(2025, 11, 1, 9, 30, 0)


class CatalogTestCase(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self.temp_dir = tempfile.TemporaryDirectory()
        self.orig_db_path = db_database.DB_PATH
        db_database.DB_PATH = os.path.join(self.temp_dir.name, "test.sqlite")
        db_database._initialized = False
        self.gateway = DocumentGateway(poll_interval=0.05)
        self.catalog = CatalogManager(self.gateway, PRODUCTS)

    def tearDown(self):
        db_database.DB_PATH = self.orig_db_path
        db_database._initialized = False
        self.temp_dir.cleanup()

    async def products(self):
        return [Product.from_record(r) for r in await self.gateway.get_records(PRODUCTS)]

    # ---------- validation ----------

    def test_parse_price(self):
        self.assertEqual(parse_price("3.50"), 3.5)
        self.assertEqual(parse_price(2), 2.0)
        for bad in ("", "abc", "0", 0, -1, "nan", "inf", None):
            with self.subTest(price=bad):
                with self.assertRaises(ValidationError):
                    parse_price(bad)

    async def test_invalid_input_writes_nothing(self):
        with self.assertRaises(ValidationError):
            await self.catalog.upsert(None, "   ", "2.50")
        with self.assertRaises(ValidationError):
            await self.catalog.upsert(None, "Chips", "-1")
        self.assertEqual(await self.products(), [])

    # ---------- upsert ----------

    async def test_create_generates_id_and_placeholder(self):
        product_id = await self.catalog.upsert(
            None, "Masala Chips", "3.5", "Spicy", "", now=NOW
        )
        self.assertTrue(product_id.isdigit())

        (product,) = await self.products()
        self.assertEqual(product.id, product_id)
        self.assertEqual(product.name, "Masala Chips")
        self.assertEqual(product.price, 3.5)
        self.assertEqual(product.description, "Spicy")
        self.assertEqual(
            product.image_url,
            "https://placehold.co/400x300/e53e3e/fff?text=Masala+Chips",
        )
        self.assertEqual(product.created_at, NOW.astimezone(timezone.utc).isoformat())

    async def test_update_overwrites_whole_record(self):
        product_id = await self.catalog.upsert(
            None, "Chips", 2.5, "Salted", "https://img.example/chips.png"
        )
        await self.catalog.upsert(product_id, "Large Chips", 3.75)

        (product,) = await self.products()
        self.assertEqual(product.id, product_id)
        self.assertEqual(product.name, "Large Chips")
        self.assertEqual(product.price, 3.75)
        # fields not given are not merged from the old record
        self.assertEqual(product.description, "")
        self.assertEqual(product.image_url, placeholder_image_url("Large Chips"))

    async def test_remove(self):
        keep = await self.catalog.upsert("keep", "Cola", 1.25)
        await self.catalog.upsert("drop", "Chips", 2.5)
        await self.catalog.remove("drop")
        await self.catalog.remove("never-existed")
        self.assertEqual([p.id for p in await self.products()], [keep])

    # ---------- helpers ----------

    def test_placeholder_image_url_is_deterministic(self):
        self.assertEqual(
            placeholder_image_url("Fish  and\tChips"),
            "https://placehold.co/400x300/e53e3e/fff?text=Fish++and+Chips",
        )
        self.assertEqual(placeholder_image_url("A B"), placeholder_image_url("A B"))

    def test_find_product(self):
        products = [Product("1", "Chips", 2.5), Product("2", "Cola", 1.25)]
        self.assertEqual(find_product(products, "2").name, "Cola")
        self.assertIsNone(find_product(products, "3"))


if __name__ == "__main__":
    unittest.main()
