from __future__ import annotations

from importlib.metadata import PackageNotFoundError

import pytest

import mathtiles
from mathtiles import version as version_module


def test_package_exposes_version() -> None:
    assert mathtiles.__version__ == version_module.get_version()


def test_version_falls_back_when_not_installed(monkeypatch: pytest.MonkeyPatch) -> None:
    def missing(_name: str) -> str:
        raise PackageNotFoundError(_name)

    monkeypatch.setattr(version_module, "_pkg_version", missing)

    assert version_module.get_version() == "0.0.0"
