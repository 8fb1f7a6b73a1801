from __future__ import annotations

import pytest

from markflow.config import Settings
from markflow.models.direction import TranslationDirection


@pytest.fixture()
def settings(tmp_path) -> Settings:
    return Settings(_env_file=None, log_dir=str(tmp_path / "logs"))


@pytest.fixture()
def direction() -> TranslationDirection:
    return TranslationDirection(source="fin", target="sme")
