"""Ordering load test scenarios.

Three stateful SequentialTaskSet journeys covering cart checkout with
cancellation and the administrator's fulfillment path, plus a user class that
races for a scarce product to exercise the oversell guard.
"""

import threading
import uuid

from locust import HttpUser, SequentialTaskSet, between, task

from loadtests.data_generators import checkout_data, customer_id, order_data, product_data
from loadtests.helpers.response import error_type, extract_error_detail
from loadtests.helpers.state import CartState, OrderState, ScarceStockTally

ADMIN_HEADERS = {"X-User-Id": "admin-loadtest", "X-User-Role": "admin"}


def customer_headers(user_id: str) -> dict:
    return {"X-User-Id": user_id, "X-User-Role": "user"}


def register_product(client, stock: int | None = None, name: str = "POST /products") -> str | None:
    with client.post(
        "/products",
        json=product_data(stock=stock),
        headers=ADMIN_HEADERS,
        catch_response=True,
        name=name,
    ) as resp:
        if resp.status_code == 201:
            return resp.json()["product_id"]
        resp.failure(f"Register product failed: {resp.status_code} — {extract_error_detail(resp)}")
        return None


class CartCheckoutJourney(SequentialTaskSet):
    """Register Product -> Add to Cart -> View Cart -> Checkout -> View Order -> Cancel.

    A customer fills a cart, checks it out, then changes their mind. Stock is
    reserved on checkout and handed back on cancellation.
    """

    def on_start(self):
        self.state = CartState(customer_id=customer_id())
        self.order = OrderState(customer_id=self.state.customer_id)

    @task
    def stock_products(self):
        for _ in range(2):
            product_id = register_product(self.client)
            if product_id is None:
                self.interrupt()
            self.state.product_ids.append(product_id)

    @task
    def add_to_cart(self):
        for product_id in self.state.product_ids:
            with self.client.post(
                "/carts/mine/items",
                json={"product_id": product_id, "quantity": 1},
                headers=customer_headers(self.state.customer_id),
                catch_response=True,
                name="POST /carts/mine/items",
            ) as resp:
                if resp.status_code != 201:
                    resp.failure(f"Add to cart failed: {resp.status_code} — {extract_error_detail(resp)}")
                    self.interrupt()

    @task
    def view_cart(self):
        with self.client.get(
            "/carts/mine",
            headers=customer_headers(self.state.customer_id),
            catch_response=True,
            name="GET /carts/mine",
        ) as resp:
            if resp.status_code != 200 or resp.json()["summary"]["item_count"] != len(self.state.product_ids):
                resp.failure(f"Cart view unexpected: {resp.status_code} — {resp.text[:200]}")

    @task
    def checkout(self):
        with self.client.post(
            "/orders/from-cart",
            json=checkout_data(),
            headers=customer_headers(self.state.customer_id),
            catch_response=True,
            name="POST /orders/from-cart",
        ) as resp:
            if resp.status_code == 201:
                self.order.order_id = resp.json()["order_id"]
            else:
                resp.failure(f"Checkout failed: {resp.status_code} — {extract_error_detail(resp)}")
                self.interrupt()

    @task
    def view_order(self):
        with self.client.get(
            f"/orders/{self.order.order_id}",
            headers=customer_headers(self.state.customer_id),
            catch_response=True,
            name="GET /orders/{id}",
        ) as resp:
            if resp.status_code != 200:
                resp.failure(f"Order view failed: {resp.status_code} — {extract_error_detail(resp)}")

    @task
    def cancel(self):
        with self.client.patch(
            f"/orders/{self.order.order_id}/cancel",
            json={"reason": "Changed my mind"},
            headers=customer_headers(self.state.customer_id),
            catch_response=True,
            name="PATCH /orders/{id}/cancel",
        ) as resp:
            if resp.status_code == 200:
                self.order.current_status = "cancelled"
            else:
                resp.failure(f"Cancel failed: {resp.status_code} — {extract_error_detail(resp)}")

    @task
    def done(self):
        self.interrupt()


class OrderFulfillmentJourney(SequentialTaskSet):
    """Place Order -> Confirm -> Paid -> Tracking -> Shipped -> Delivered -> Stats.

    The happy path: an order placed with explicit lines and driven to delivery
    by an administrator, skipping the processing step.
    """

    def on_start(self):
        self.state = OrderState(customer_id=customer_id())

    @task
    def place_order(self):
        product_id = register_product(self.client)
        if product_id is None:
            self.interrupt()

        with self.client.post(
            "/orders",
            json=order_data([product_id], max_quantity=3),
            headers=customer_headers(self.state.customer_id),
            catch_response=True,
            name="POST /orders",
        ) as resp:
            if resp.status_code == 201:
                self.state.order_id = resp.json()["order_id"]
            else:
                resp.failure(f"Place order failed: {resp.status_code} — {extract_error_detail(resp)}")
                self.interrupt()

    def _advance(self, status):
        with self.client.patch(
            f"/orders/{self.state.order_id}/status",
            json={"status": status},
            headers=ADMIN_HEADERS,
            catch_response=True,
            name="PATCH /orders/{id}/status",
        ) as resp:
            if resp.status_code == 200:
                self.state.current_status = status
            else:
                resp.failure(f"Advance to {status} failed: {resp.status_code} — {extract_error_detail(resp)}")
                self.interrupt()

    @task
    def confirm(self):
        self._advance("confirmed")

    @task
    def record_payment(self):
        with self.client.patch(
            f"/orders/{self.state.order_id}/payment",
            json={"payment_status": "paid", "transaction_id": f"txn-{uuid.uuid4().hex[:10]}"},
            headers=ADMIN_HEADERS,
            catch_response=True,
            name="PATCH /orders/{id}/payment",
        ) as resp:
            if resp.status_code != 200:
                resp.failure(f"Payment update failed: {resp.status_code} — {extract_error_detail(resp)}")

    @task
    def add_tracking(self):
        with self.client.patch(
            f"/orders/{self.state.order_id}/tracking",
            json={"tracking_number": f"1Z{uuid.uuid4().hex[:12].upper()}", "carrier": "UPS"},
            headers=ADMIN_HEADERS,
            catch_response=True,
            name="PATCH /orders/{id}/tracking",
        ) as resp:
            if resp.status_code != 200:
                resp.failure(f"Tracking failed: {resp.status_code} — {extract_error_detail(resp)}")

    @task
    def ship(self):
        self._advance("shipped")

    @task
    def deliver(self):
        self._advance("delivered")

    @task
    def stats(self):
        with self.client.get(
            "/orders/stats",
            headers=ADMIN_HEADERS,
            catch_response=True,
            name="GET /orders/stats",
        ) as resp:
            if resp.status_code != 200:
                resp.failure(f"Stats failed: {resp.status_code} — {extract_error_detail(resp)}")

    @task
    def done(self):
        self.interrupt()


class OrderingUser(HttpUser):
    """Locust user simulating everyday ordering traffic.

    Weighted distribution:
    - 60% Cart checkout with cancellation
    - 40% Administrator fulfillment path
    """

    wait_time = between(0.5, 2.0)
    tasks = {
        CartCheckoutJourney: 3,
        OrderFulfillmentJourney: 2,
    }


class ScarceStockUser(HttpUser):
    """Many customers racing to buy single units of one scarce product.

    A product with ``SCARCE_STOCK`` units is registered once. Every checkout
    either succeeds or is refused with ``InsufficientStock``; once the stock is
    drained no further order may succeed. ``tally`` records the outcomes so
    the test-stop hook can compare them with the final stock level.
    """

    SCARCE_STOCK = 25
    wait_time = between(0.05, 0.2)

    product_id: str | None = None
    tally = ScarceStockTally()
    _setup_lock = threading.Lock()

    def on_start(self):
        with ScarceStockUser._setup_lock:
            if ScarceStockUser.product_id is None:
                ScarceStockUser.product_id = register_product(
                    self.client, stock=self.SCARCE_STOCK, name="POST /products (scarce)"
                )
        self.customer_id = customer_id()

    @task
    def buy_one(self):
        if ScarceStockUser.product_id is None:
            return

        with self.client.post(
            "/orders",
            json=order_data([ScarceStockUser.product_id]),
            headers=customer_headers(self.customer_id),
            catch_response=True,
            name="POST /orders (scarce)",
        ) as resp:
            if resp.status_code == 201:
                ScarceStockUser.tally.placed += 1
            elif resp.status_code == 409 and error_type(resp) == "InsufficientStock":
                ScarceStockUser.tally.sold_out += 1
                resp.success()
            else:
                ScarceStockUser.tally.other_failures += 1
                resp.failure(f"Scarce checkout failed: {resp.status_code} — {extract_error_detail(resp)}")
