from __future__ import annotations

import pytest

from userstyles.web.app import create_app

from tests.conftest import DARK_EXAMPLE, DOCS_AND_NEWS, MALFORMED


@pytest.fixture
def app(registry, discovery):
    """Create a Flask app over a registry with two good files and one bad one."""
    discovery.files = {
        "dark.css": DARK_EXAMPLE,
        "docs.css": DOCS_AND_NEWS,
        "bad.css": MALFORMED,
    }
    registry.reload()
    application = create_app(registry=registry)
    application.config["TESTING"] = True
    return application


@pytest.fixture
def client(app):
    """Create a Flask test client."""
    return app.test_client()
