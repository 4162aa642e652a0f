"""
Fixtures shared by the PDF capture tests.

Deployment markers and browser overrides from the developer's shell would
change which provider and executable the settings resolve, so they are
removed for every test.
"""

import pytest

ISOLATED_ENV_VARS = [
    "VERCEL_ENV",
    "AWS_LAMBDA_FUNCTION_NAME",
    "SERVERLESS_ENV",
    "CHROME_EXECUTABLE_PATH",
    "BROWSER_PROVIDER",
    "MANAGED_CHROMIUM_DIR",
    "SETTLE_DELAY_MS",
]


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch):
    for name in ISOLATED_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
