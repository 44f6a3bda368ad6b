import pytest

from app.services.context import configure_context


@pytest.fixture(autouse=True)
def reset_context():
    """Tests that install an application-wide context get a clean slate."""
    yield
    configure_context(None)
