import pytest


@pytest.fixture(autouse=True)
def _ctx():
    """Run each test inside the ordering domain context."""
    from ordering.domain import ordering

    with ordering.domain_context():
        yield
