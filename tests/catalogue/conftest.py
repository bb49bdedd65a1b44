import pytest


@pytest.fixture(autouse=True)
def _ctx():
    """Run each test inside the catalogue domain context."""
    from catalogue.domain import catalogue

    with catalogue.domain_context():
        yield
