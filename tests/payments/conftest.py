import pytest


@pytest.fixture(autouse=True)
def _ctx():
    """Payment outcomes are recorded on orders, so run inside the ordering context."""
    from ordering.domain import ordering

    with ordering.domain_context():
        yield
