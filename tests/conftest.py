from __future__ import annotations

import pytest
import structlog


@pytest.fixture(autouse=True)
def _reset_structlog():
    # The CLI binds its logger to whatever stderr capture was active.
    yield
    structlog.reset_defaults()
