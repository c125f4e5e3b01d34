from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path

import pytest

from exterror.config import ExtErrorConfig, configure


@pytest.fixture(autouse=True)
def default_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterator[ExtErrorConfig]:
    monkeypatch.chdir(tmp_path)
    config = ExtErrorConfig()
    configure(config)
    yield config
    configure(ExtErrorConfig())
