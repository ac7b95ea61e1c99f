# Vulture whitelist for pytest fixtures and Lambda patterns
# These names are used by pytest/AWS but not explicitly referenced in code

# Lambda entry points (always called by AWS, never by code)
lambda_handler

# Storage operations used by other services and the admin tooling
get
update
delete

# Pytest fixtures (injected by pytest, not direct calls)
_mock_env  # side-effect fixture that sets environment variables

# Fixtures from tests/conftest.py
pytest_configure  # pytest hook
pytest_sessionstart  # pytest hook

# Common pytest patterns
monkeypatch  # pytest built-in fixture

# Mock attributes (set dynamically in tests)
side_effect
