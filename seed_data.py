"""Randomized café seed data, shaped once for MySQL rows and once for MongoDB documents.

Relational rows reference customers, tables and products by id; the ids are
uniform in ``[1, count]`` and the seed counts guarantee they exist. Document
orders reference customers and products by name instead.
"""
import random
from datetime import datetime, timezone

CUSTOMER_COUNT = 50
TABLE_COUNT = 20
PRODUCT_COUNT = 30
ORDER_COUNT = 100
ITEMS_PER_ORDER = 5

CATEGORIES = ["Drinks", "Snacks", "Meals"]
MAX_PRICE = 50
MAX_QUANTITY = 5


def customer_name(n):
    return f"Customer {n}"


def product_name(n):
    return f"Product {n}"


def random_phone():
    return f"+380{random.randint(100000000, 999999999)}"


def random_category():
    return random.choice(CATEGORIES)


def random_price():
    return round(random.random() * MAX_PRICE, 2)


def random_quantity():
    return random.randint(1, MAX_QUANTITY)


# ---------------------- MySQL rows ----------------------

def customer_rows():
    return [(customer_name(i), random_phone()) for i in range(1, CUSTOMER_COUNT + 1)]


def table_rows():
    return [(i, "free") for i in range(1, TABLE_COUNT + 1)]


def product_rows():
    return [
        (product_name(i), random_category(), f"{random_price():.2f}")
        for i in range(1, PRODUCT_COUNT + 1)
    ]


def order_row():
    return random.randint(1, CUSTOMER_COUNT), random.randint(1, TABLE_COUNT)


def order_item_rows(order_id):
    return [
        (order_id, random.randint(1, PRODUCT_COUNT), random_quantity())
        for _ in range(ITEMS_PER_ORDER)
    ]


# ---------------------- MongoDB documents ----------------------

def customer_documents():
    return [{"name": name, "phone": phone} for name, phone in customer_rows()]


def menu_documents():
    # Prices stay two-decimal strings in the document model.
    return [
        {"name": name, "category": category, "price": price}
        for name, category, price in product_rows()
    ]


def order_document():
    return {
        "customer": customer_name(random.randint(1, CUSTOMER_COUNT)),
        "table": random.randint(1, TABLE_COUNT),
        "order_date": datetime.now(timezone.utc),
        "items": [
            {
                "product": product_name(random.randint(1, PRODUCT_COUNT)),
                "quantity": random_quantity(),
            }
            for _ in range(ITEMS_PER_ORDER)
        ],
    }
