"""Pytest configuration and fixtures."""

from __future__ import annotations

import subprocess
from typing import Dict, List, Optional, Tuple

import pytest

from repo_bootstrap.api import GitHubAPI, Repository
from repo_bootstrap.i18n import set_language


class GhRecorder:
    """Stands in for ``subprocess.run`` and records every gh invocation."""

    def __init__(self) -> None:
        self.calls: List[Tuple[List[str], Optional[bytes]]] = []
        self.failures: Dict[str, str] = {}
        self.responses: Dict[str, str] = {}

    def fail_when(self, fragment: str, stderr: str = "HTTP 403: Forbidden") -> None:
        self.failures[fragment] = stderr

    def respond_when(self, fragment: str, stdout: str) -> None:
        self.responses[fragment] = stdout

    @property
    def commands(self) -> List[str]:
        return [" ".join(command) for command, _ in self.calls]

    def __call__(self, command, input=None, stdout=None, stderr=None, check=False):
        command = list(command)
        self.calls.append((command, input))
        joined = " ".join(command)
        for fragment, message in self.failures.items():
            if fragment in joined:
                raise subprocess.CalledProcessError(
                    1, command, output=b"", stderr=message.encode("utf-8")
                )
        for fragment, body in self.responses.items():
            if fragment in joined:
                return subprocess.CompletedProcess(
                    command, 0, stdout=body.encode("utf-8"), stderr=b""
                )
        return subprocess.CompletedProcess(command, 0, stdout=b"", stderr=b"")


@pytest.fixture(autouse=True)
def english_messages(monkeypatch: pytest.MonkeyPatch):
    for variable in ("GH_REPO_BOOTSTRAP_LANG", "LC_ALL", "LC_MESSAGES", "LANG"):
        monkeypatch.delenv(variable, raising=False)
    set_language("en")
    yield
    set_language("en")


@pytest.fixture
def gh(monkeypatch: pytest.MonkeyPatch) -> GhRecorder:
    recorder = GhRecorder()
    monkeypatch.setattr("repo_bootstrap.api.subprocess.run", recorder)
    return recorder


@pytest.fixture
def repo() -> Repository:
    return Repository(owner="octo", name="widgets")


@pytest.fixture
def api(repo: Repository, gh: GhRecorder) -> GitHubAPI:
    return GitHubAPI(repo)
