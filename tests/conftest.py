"""Session setup and per-test cleanup shared by every test package.

The ordering domain runs on in-memory providers under test. Each test starts
from empty repositories, an empty event store and the default pricing policy.
"""

import os
from pathlib import Path

import pytest

# Directory name -> marker applied to every test collected beneath it
_LAYER_MARKERS = {
    "domain": "domain",
    "application": "application",
    "bdd": "application",
    "integration": "integration",
}


def pytest_addoption(parser):
    parser.addoption(
        "--env",
        action="store",
        default="test",
        help="Overlay section of domain.toml to activate (sets PROTEAN_ENV)",
    )


def pytest_sessionstart(session):
    """Initialize the ordering domain and keep its context active for the session."""
    os.environ["PROTEAN_ENV"] = session.config.option.env

    from ordering.domain import ordering

    ordering.init()
    ordering.domain_context().push()


def pytest_collection_modifyitems(config, items):
    for item in items:
        parts = Path(item.fspath).parts
        for directory, marker in _LAYER_MARKERS.items():
            if directory in parts:
                item.add_marker(getattr(pytest.mark, marker))
                break

        if "integration" in parts and not any(m.name == "fast" for m in item.iter_markers()):
            item.add_marker(pytest.mark.slow)


@pytest.fixture(autouse=True)
def clean_domain(monkeypatch):
    """Start every test with no ORDERING_* overrides and end it with empty stores."""
    for name in list(os.environ):
        if name.startswith("ORDERING_"):
            monkeypatch.delenv(name)

    yield

    from ordering.order.pricing import PricingPolicy, use_policy
    from protean import current_domain

    for provider in current_domain.providers.values():
        provider._data_reset()
    current_domain.event_store.store._data_reset()

    use_policy(PricingPolicy())
