import pytest


@pytest.fixture(autouse=True)
def _ctx():
    """Run each test inside the identity domain context."""
    from identity.domain import identity

    with identity.domain_context():
        yield
