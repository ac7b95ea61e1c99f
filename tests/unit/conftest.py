"""Unit tests conftest for Lambda function test isolation.

Every Lambda entry point is a module named ``index``. Handler tests load
them with importlib under distinct names (``scrape_obituaries_index`` etc.),
but a plain ``import index`` from an interactive session or an earlier run
would shadow them, so the cached module is dropped at session start.
"""

import sys


def pytest_sessionstart(session):
    """Initialize the test session.

    Cleans any cached modules from a previous test run or interactive session.
    """
    if "index" in sys.modules:
        del sys.modules["index"]
