import logging

from shopmaster.db import DatabaseConfig, load_record
from shopmaster.defaults import INITIAL_PRODUCTS, PRODUCTS_KEY
from shopmaster.engine import DashboardStats
from shopmaster.insights import FALLBACK_MESSAGE, request_insights
from shopmaster.state import ShopState


class RecordingProvider:
    def __init__(self, answer):
        self.answer = answer
        self.calls = []

    def generate(self, stats, products, sales):
        self.calls.append((stats, products, sales))
        return self.answer


class FailingProvider:
    def generate(self, stats, products, sales):
        raise ConnectionError("service unreachable")


def make_state(tmp_path) -> ShopState:
    return ShopState(DatabaseConfig(engine="sqlite", path=tmp_path / "shop.sqlite"))


def test_provider_receives_immutable_data(tmp_path):
    state = make_state(tmp_path)
    provider = RecordingProvider("Restock Black Tea 950g.")

    assert request_insights(state, provider) == "Restock Black Tea 950g."

    stats, products, sales = provider.calls[0]
    assert isinstance(stats, DashboardStats)
    assert products == state.products
    assert isinstance(products, tuple)
    assert sales == ()


def test_provider_failure_returns_fallback(tmp_path, caplog):
    state = make_state(tmp_path)

    with caplog.at_level(logging.ERROR):
        text = request_insights(state, FailingProvider())

    assert text == FALLBACK_MESSAGE
    assert "service unreachable" in caplog.text


def test_empty_answer_returns_fallback(tmp_path):
    state = make_state(tmp_path)

    assert request_insights(state, RecordingProvider("   ")) == FALLBACK_MESSAGE
    assert request_insights(state, RecordingProvider(None)) == FALLBACK_MESSAGE


class MeddlingProvider:
    """Tries to write into every object it receives."""

    def __init__(self):
        self.blocked = []

    def generate(self, stats, products, sales):
        attempts = [
            lambda: products[0].extra.__setitem__("injected", "by provider"),
            lambda: setattr(products[0], "stock", 0),
            lambda: setattr(stats, "total_revenue", 1e9),
        ]
        for attempt in attempts:
            try:
                attempt()
            except (AttributeError, TypeError) as exc:
                self.blocked.append(type(exc).__name__)
        return "Nothing to report."


def test_provider_cannot_write_into_shop_state(tmp_path):
    state = make_state(tmp_path)
    provider = MeddlingProvider()

    assert request_insights(state, provider) == "Nothing to report."
    assert len(provider.blocked) == 3

    # A later save of the same product must not carry anything injected.
    state.update_product(state.products[0])
    stored = load_record(state.cfg, PRODUCTS_KEY, [])
    assert "injected" not in stored[0]
    assert stored[0]["stock"] == INITIAL_PRODUCTS[0].stock

    assert dict(INITIAL_PRODUCTS[0].extra) == {}
    fresh = ShopState(DatabaseConfig(engine="sqlite", path=tmp_path / "other.sqlite"))
    assert dict(fresh.products[0].extra) == {}


def test_insights_is_part_of_the_public_package():
    import shopmaster

    assert "insights" in shopmaster.__all__
