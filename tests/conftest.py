import os
from pathlib import Path

import pytest


def pytest_addoption(parser):
    parser.addoption(
        "--env",
        action="store",
        default="test",
        help="Config environment to run tests on",
    )


def pytest_sessionstart(session):
    """Pytest hook to run before collecting tests.

    Initialize every bounded context once. Tests push the context they need
    (see the per-context conftest files); API requests push their own.
    """
    os.environ["PROTEAN_ENV"] = session.config.option.env
    os.environ.setdefault("LOG_DIR", str(Path(session.config.rootpath) / "logs"))

    from catalogue.domain import catalogue
    from identity.domain import identity
    from ordering.domain import ordering

    identity.init()
    catalogue.init()
    ordering.init()


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their directory location."""
    for item in items:
        test_path = Path(item.fspath)

        if "/domain/" in str(test_path):
            item.add_marker(pytest.mark.domain)
        elif "/application/" in str(test_path):
            item.add_marker(pytest.mark.application)
        elif "/integration/" in str(test_path):
            item.add_marker(pytest.mark.integration)
            # Integration tests are often slower
            if not any(m.name == "fast" for m in item.iter_markers()):
                item.add_marker(pytest.mark.slow)


@pytest.fixture(autouse=True)
def fake_gateway():
    """Every test starts with a fresh, succeeding FakeGateway."""
    from payments.gateway import FakeGateway, reset_gateway, set_gateway

    gateway = FakeGateway()
    set_gateway(gateway)

    yield gateway

    reset_gateway()


@pytest.fixture(autouse=True)
def run_around_tests():
    """Fixture to automatically cleanup infrastructure after every test"""
    yield

    from catalogue.domain import catalogue
    from identity.domain import identity
    from ordering.domain import ordering
    from protean import current_domain

    for domain in (identity, catalogue, ordering):
        with domain.domain_context():
            for _, provider in current_domain.providers.items():
                provider._data_reset()

            current_domain.event_store.store._data_reset()


@pytest.fixture
def make_user():
    """Factory registering a user and returning ``(Identity, bearer token)``."""
    from identity.auth import Identity, create_access_token
    from identity.domain import identity
    from identity.user.registration import RegisterUser
    from protean import current_domain

    counter = iter(range(1, 10_000))

    def _make(role="customer", email=None, password="s3cret-pass"):
        n = next(counter)
        email = email or f"{role}{n}-{os.urandom(3).hex()}@example.com"
        with identity.domain_context():
            user_id = current_domain.process(
                RegisterUser(name=f"{role.title()} {n}", email=email, password=password, role=role),
                asynchronous=False,
            )
        token, _ = create_access_token(user_id, role)
        return Identity(user_id=user_id, email=email, role=role), token

    return _make
