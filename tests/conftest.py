from __future__ import annotations

import pytest

from llmctx import settings as settings_module
from llmctx.config import ENV_PREFIX


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep the developer's `.env` and LLMCTX_* variables out of the tests."""
    monkeypatch.setattr(settings_module, "ENV_FILE", "")
    for key in list(settings_module.os.environ):
        if key.startswith(ENV_PREFIX):
            monkeypatch.delenv(key)
