"""Faker-based data generators for Locust load test scenarios.

Each generator produces payloads that pass the domain's validation rules
(Address VO lengths, PaymentMethod choices, non-negative stock) and match the
exact field names expected by the API's Pydantic request schemas.
"""

import random
import uuid

from faker import Faker

fake = Faker()

PAYMENT_METHODS = [
    "credit_card",
    "debit_card",
    "paypal",
    "stripe",
    "razorpay",
    "cash_on_delivery",
    "bank_transfer",
]


def customer_id() -> str:
    """Generate customer ids like 'cust-lt-a1b2c3d4'."""
    return f"cust-lt-{uuid.uuid4().hex[:8]}"


def valid_sku(prefix: str = "LT") -> str:
    suffix = uuid.uuid4().hex[:8].upper()
    return f"{prefix}-{suffix}"


def address_data() -> dict:
    """Generate an AddressSchema payload within the Address VO's length limits."""
    return {
        "first_name": fake.first_name()[:50],
        "last_name": fake.last_name()[:50],
        "street": fake.street_address()[:200].ljust(5, "."),
        "city": fake.city()[:50],
        "state": fake.state_abbr(),
        "zip_code": fake.zipcode()[:20],
        "country": "US",
        "phone": f"+1-{random.randint(200, 999)}-{random.randint(200, 999)}-{random.randint(1000, 9999)}",
        "email": fake.free_email(),
    }


def product_data(stock: int | None = None) -> dict:
    """Generate a RegisterProductRequest payload."""
    price = round(random.uniform(5.0, 500.0), 2)
    discounted = random.random() < 0.3
    return {
        "name": f"{fake.word().capitalize()} {fake.word().capitalize()}",
        "price": price,
        "discount_price": round(price * 0.8, 2) if discounted else None,
        "stock": stock if stock is not None else random.randint(50, 500),
        "images": [f"https://cdn.example.com/{uuid.uuid4().hex[:8]}.jpg"],
        "category": random.choice(["Electronics", "Books", "Garden", "Kitchen"]),
        "brand": fake.company()[:100],
        "sku": valid_sku("PROD"),
    }


def order_data(product_ids: list[str], max_quantity: int = 1) -> dict:
    """Generate a PlaceOrderRequest payload with explicit lines."""
    return {
        "items": [{"product_id": pid, "quantity": random.randint(1, max_quantity)} for pid in product_ids],
        "shipping_address": address_data(),
        "payment_method": random.choice(PAYMENT_METHODS),
    }


def checkout_data() -> dict:
    """Generate a PlaceOrderFromCartRequest payload."""
    return {
        "shipping_address": address_data(),
        "payment_method": random.choice(PAYMENT_METHODS),
        "order_notes": fake.sentence()[:200] if random.random() < 0.3 else None,
    }
