from __future__ import annotations

import os
from typing import Any

import pytest

from otlpmetric.config import EnvOptionsReader


class CapturingReporter:
    """Records every report instead of logging it."""

    def __init__(self) -> None:
        self.reports: list[tuple[BaseException, str, dict[str, Any]]] = []

    def report(self, error: BaseException, message: str, **key_values: Any) -> None:
        self.reports.append((error, message, key_values))

    @property
    def errors(self) -> list[BaseException]:
        return [error for error, _, _ in self.reports]


@pytest.fixture
def reporter() -> CapturingReporter:
    return CapturingReporter()


@pytest.fixture(autouse=True)
def _clean_otlp_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in list(os.environ):
        if name.startswith("OTEL_EXPORTER_OTLP"):
            monkeypatch.delenv(name)


def make_reader(env: dict[str, str] | None = None, files: dict[str, bytes] | None = None) -> EnvOptionsReader:
    env = dict(env or {})
    files = dict(files or {})

    def read_file(path: str) -> bytes:
        try:
            return files[path]
        except KeyError:
            raise FileNotFoundError(path) from None

    return EnvOptionsReader(getenv=env.get, read_file=read_file)


@pytest.fixture
def empty_env() -> EnvOptionsReader:
    return make_reader()


@pytest.fixture
def env_reader():
    """Factory building an EnvOptionsReader over a fake environment and filesystem."""
    return make_reader
