"""Order Desk Load Testing — Locust entry point.

Discovers all user classes from the scenarios package.
Run specific scenarios with Locust's class selection.

Usage:
    # All scenarios (web UI):
    locust -f loadtests/locustfile.py

    # Oversell check only:
    locust -f loadtests/locustfile.py ScarceStockUser

    # Headless (CI mode):
    locust -f loadtests/locustfile.py ScarceStockUser --headless \
           -u 50 -r 10 -t 60s --csv=results/loadtest
"""

import logging
import time

import requests
from locust import events

# Import all user classes so Locust discovers them
from loadtests.helpers.response import extract_error_detail
from loadtests.scenarios.ordering import ADMIN_HEADERS, OrderingUser, ScarceStockUser  # noqa: F401

logger = logging.getLogger("loadtest")


@events.request.add_listener
def on_request(request_type, name, response, exception, **_kw):
    """Log error details for every failed request.

    Fires globally for all scenarios — no per-task wiring needed.
    Extracts the API error body so you see "InsufficientStock: Insufficient
    stock for ..." instead of just "409".
    """
    if exception:
        logger.error("[EXCEPTION] %s %s: %s", request_type, name, exception)
    elif response is not None and response.status_code >= 400:
        detail = extract_error_detail(response)
        logger.error("[%s] %s %s: %s", response.status_code, request_type, name, detail)


@events.test_start.add_listener
def on_test_start(environment, **_kwargs):
    """Log a marker when load test begins."""
    print(f"\n[LOADTEST] Started at {time.strftime('%H:%M:%S')}")
    print(f"[LOADTEST] Target host: {environment.host}")
    print()


@events.test_stop.add_listener
def on_test_stop(environment, **_kwargs):
    """Compare scarce-stock outcomes with the product's final stock level."""
    print(f"\n[LOADTEST] Stopped at {time.strftime('%H:%M:%S')}")
    if ScarceStockUser.product_id is None:
        return

    tally = ScarceStockUser.tally
    print(f"[LOADTEST] Scarce checkouts placed={tally.placed} sold_out={tally.sold_out} other={tally.other_failures}")
    try:
        resp = requests.get(
            f"{environment.host}/products/{ScarceStockUser.product_id}",
            headers=ADMIN_HEADERS,
            timeout=5,
        )
        stock = resp.json()["stock"]
    except (requests.RequestException, KeyError, ValueError) as e:
        print(f"[LOADTEST] Could not fetch scarce product stock: {e}\n")
        return

    expected = ScarceStockUser.SCARCE_STOCK - tally.placed
    verdict = "OK" if stock == expected and stock >= 0 else "OVERSOLD"
    print(f"[LOADTEST] Final stock={stock} expected={expected} -> {verdict}\n")
