"""Order pricing: money rounding and the charges applied on top of the subtotal.

``PricingPolicy`` decides shipping, tax and discount for a checkout. The
default policy charges none of them; deployments that need real shipping or
tax rules install their own policy with ``use_policy``.
"""

import structlog

logger = structlog.get_logger(__name__)


def round_money(value) -> float:
    """Round a monetary amount to two decimals."""
    return round(float(value or 0.0), 2)


class PricingPolicy:
    """Charges applied to an order. All zero by default."""

    def shipping(self, items, subtotal: float) -> float:
        return 0.0

    def tax(self, items, subtotal: float) -> float:
        return 0.0

    def discount(self, items, subtotal: float) -> float:
        return 0.0

    def charges(self, items, subtotal: float) -> dict:
        return {
            "shipping": round_money(self.shipping(items, subtotal)),
            "tax": round_money(self.tax(items, subtotal)),
            "discount": round_money(self.discount(items, subtotal)),
        }


_active_policy = PricingPolicy()


def active_policy() -> PricingPolicy:
    return _active_policy


def use_policy(policy: PricingPolicy) -> PricingPolicy:
    """Install ``policy`` for subsequent checkouts and return the one it replaces."""
    global _active_policy
    previous, _active_policy = _active_policy, policy
    logger.info("Pricing policy installed", policy=policy.__class__.__name__)
    return previous
