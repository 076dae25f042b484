from __future__ import annotations

import json
import logging
import shlex
import subprocess
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional

from .config import Label, MergeSettings
from .i18n import translate as _

logger = logging.getLogger(__name__)

SECRET_SCANNING_PAYLOAD: Dict[str, Any] = {
    "secret_scanning": {"status": "enabled"},
    "secret_scanning_push_protection": {"status": "enabled"},
}


class GitHubAPIError(RuntimeError):
    """Raised when invoking `gh` fails."""

    def __init__(self, message: str, stderr: str | None = None) -> None:
        super().__init__(message)
        self.stderr = stderr


class GhNotFoundError(GitHubAPIError):
    """Raised when the `gh` executable cannot be started."""


@dataclass(slots=True)
class Repository:
    owner: str
    name: str
    hostname: Optional[str] = None

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.name}"


def run_gh(command: List[str], *, stdin_bytes: Optional[bytes] = None) -> str:
    """Run a `gh` command line and return its decoded stdout."""

    logger.debug("Running %s", shlex.join(command))
    try:
        completed = subprocess.run(
            command,
            input=stdin_bytes,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            check=True,
        )
    except FileNotFoundError as exc:
        raise GhNotFoundError(
            _(
                "error_gh_missing",
                "The gh executable was not found. Install GitHub CLI and run `gh auth login`.",
            )
        ) from exc
    except subprocess.CalledProcessError as exc:
        stderr = (exc.stderr or b"").decode("utf-8", errors="replace")
        logger.debug("Command failed with exit code %s: %s", exc.returncode, stderr.strip())
        raise GitHubAPIError(
            _(
                "error_gh_failed",
                "Command `{command}` failed: {stderr}",
                command=" ".join(command[:3]),
                stderr=stderr.strip(),
            ),
            stderr=stderr,
        ) from exc
    return (completed.stdout or b"").decode("utf-8")


class GitHubAPI:
    """Small wrapper around `gh api`, `gh repo edit` and `gh label`."""

    def __init__(self, repo: Repository, *, api_version: str = "2022-11-28") -> None:
        self.repo = repo
        self.api_version = api_version

    def _run(
        self,
        path: str,
        *,
        method: str = "GET",
        input_data: Optional[Dict[str, Any]] = None,
        params: Optional[Iterable[str]] = None,
    ) -> Any:
        """Invoke `gh api` with JSON response."""

        command: List[str] = ["gh", "api"]
        if self.repo.hostname:
            command.extend(["--hostname", self.repo.hostname])
        path = path.strip("/")
        endpoint = f"/repos/{self.repo.full_name}"
        if path:
            endpoint = f"{endpoint}/{path}"
        command.extend(
            [
                endpoint,
                "--method",
                method.upper(),
                "-H",
                "Accept: application/vnd.github+json",
                "-H",
                f"X-GitHub-Api-Version: {self.api_version}",
            ]
        )

        if params:
            command.extend(params)

        stdin_bytes: Optional[bytes] = None
        if input_data is not None:
            command.extend(["--input", "-"])
            stdin_bytes = json.dumps(
                input_data, separators=(",", ":"), ensure_ascii=False
            ).encode("utf-8")

        stdout_text = run_gh(command, stdin_bytes=stdin_bytes)
        if not stdout_text.strip():
            return None

        try:
            return json.loads(stdout_text)
        except json.JSONDecodeError as exc:
            raise GitHubAPIError(
                _(
                    "error_invalid_json_response",
                    "Invalid JSON response for {method} {path}: {body}",
                    method=method,
                    path=endpoint,
                    body=stdout_text,
                ),
            ) from exc

    def _host_args(self) -> List[str]:
        # gh repo edit and gh label take the host as part of the repo argument.
        if self.repo.hostname:
            return [f"{self.repo.hostname}/{self.repo.full_name}"]
        return [self.repo.full_name]

    # General settings ----------------------------------------------------

    def edit_repository(self, merge: MergeSettings) -> None:
        command = ["gh", "repo", "edit", *self._host_args()]
        # These switches only exist in their enabling form.
        if merge.delete_branch_on_merge:
            command.append("--delete-branch-on-merge")
        if merge.enable_auto_merge:
            command.append("--enable-auto-merge")
        if merge.enable_squash_merge:
            command.append("--enable-squash-merge")
        command.append(f"--enable-rebase-merge={_bool_flag(merge.enable_rebase_merge)}")
        command.append(f"--enable-merge-commit={_bool_flag(merge.enable_merge_commit)}")
        run_gh(command)

    # Security ------------------------------------------------------------

    def enable_vulnerability_alerts(self) -> None:
        self._run("vulnerability-alerts", method="PUT")

    def enable_automated_security_fixes(self) -> None:
        self._run("automated-security-fixes", method="PUT")

    def enable_secret_scanning(self) -> None:
        self._run(
            "",
            method="PATCH",
            input_data={"security_and_analysis": SECRET_SCANNING_PAYLOAD},
        )

    # Repository rulesets -------------------------------------------------

    def list_rulesets(self) -> List[Dict[str, Any]]:
        # --paginate concatenates every page into one JSON array.
        return self._run("rulesets", params=["--paginate"]) or []

    def create_ruleset(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        return self._run("rulesets", method="POST", input_data=payload) or {}

    def update_ruleset(self, ruleset_id: int, payload: Dict[str, Any]) -> Dict[str, Any]:
        return self._run(f"rulesets/{ruleset_id}", method="PUT", input_data=payload) or {}

    def find_ruleset_id(self, name: str) -> Optional[int]:
        for item in self.list_rulesets():
            if item.get("name") == name:
                return item.get("id")
        return None

    # Labels --------------------------------------------------------------

    def upsert_label(self, label: Label) -> None:
        """Create the label, overwriting an existing one with the same name."""

        command = [
            "gh",
            "label",
            "create",
            label.name,
            "--description",
            label.description,
            "--color",
            label.color,
            "--repo",
            *self._host_args(),
            "--force",
        ]
        run_gh(command)


def _bool_flag(value: bool) -> str:
    return "true" if value else "false"
