import asyncio

import pytest


@pytest.fixture(scope="session")
def event_loop_policy():
    return asyncio.get_event_loop_policy()


# This is needed for importing fixtures from `fixtures` directory
pytest_plugins = [
    "tests.fixtures.registry",
    "tests.fixtures.devnet",
]
