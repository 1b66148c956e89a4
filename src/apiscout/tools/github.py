"""
GitHub helpers: locator parsing and shallow cloning through the git CLI.
"""

import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from ..errors import FetchError, FetchReason
from .filesystem_utils import CommandResult, FilesystemUtils

_HTTPS_RE = re.compile(r"github\.com/([^/]+)/([^/.]+)")
_SSH_RE = re.compile(r"github\.com:([^/]+)/([^/.]+)")

# git stderr fragments for a --branch that the remote does not have
_MISSING_BRANCH_MARKERS = ("Remote branch", "not found")


@dataclass(frozen=True)
class RepoLocator:
    owner: str
    repo: str

    @property
    def slug(self) -> str:
        return f"{self.owner}/{self.repo}"


def parse_github_url(url: str) -> Optional[RepoLocator]:
    """Extract owner/repo from an HTTPS or SSH-style GitHub URL"""
    for pattern in (_HTTPS_RE, _SSH_RE):
        match = pattern.search(url or "")
        if match:
            return RepoLocator(owner=match.group(1), repo=match.group(2))
    return None


def build_clone_url(repo_url: str, token: Optional[str] = None) -> str:
    """Inject a token into github.com URLs; SSH locators are rewritten to HTTPS"""
    if not token or "github.com" not in repo_url:
        return repo_url
    https_url = repo_url.replace("git@github.com:", "https://github.com/")
    path = https_url.split("github.com", 1)[1].lstrip("/:")
    return f"https://{token}@github.com/{path}"


def classify_clone_error(message: str) -> FetchReason:
    if "not found" in message or "404" in message:
        return FetchReason.NOT_FOUND
    if ("Authentication failed" in message or "403" in message
            or "could not read Username" in message):
        return FetchReason.AUTH_REQUIRED
    if "Could not resolve host" in message:
        return FetchReason.NETWORK_UNREACHABLE
    return FetchReason.UNKNOWN


class GitHubCloner:
    """Shallow-clones repositories with `git clone --depth 1`"""

    def __init__(self, fs_utils: FilesystemUtils, token: Optional[str] = None, timeout: int = 300):
        self.fs_utils = fs_utils
        self.token = token
        self.timeout = timeout
        self.logger = logging.getLogger("GitHubCloner")

    def _redact(self, text: str) -> str:
        return text.replace(self.token, "***") if self.token else text

    async def _git_clone(self, clone_url: str, dest: Path, branch: Optional[str]) -> CommandResult:
        command = ["git", "clone", "--depth", "1"]
        if branch:
            command += ["--branch", branch]
        command += [clone_url, str(dest)]
        return await self.fs_utils.run_command(
            command, timeout=self.timeout, env={"GIT_TERMINAL_PROMPT": "0"}
        )

    async def clone(self, repo_url: str, dest: Path, branch: Optional[str] = "main") -> None:
        """
        Clone repo_url into dest, falling back to the default branch when
        `branch` does not exist on the remote.

        Raises:
            FetchError: the repository could not be retrieved
        """
        clone_url = build_clone_url(repo_url, self.token)
        self.logger.info(f"Cloning repository: {repo_url} (branch: {branch})")

        result = await self._git_clone(clone_url, dest, branch)
        if not result.success and branch and any(m in result.stderr for m in _MISSING_BRANCH_MARKERS):
            self.logger.warning(f"Branch '{branch}' not found, trying default branch")
            await self.fs_utils.remove_tree(dest)
            result = await self._git_clone(clone_url, dest, None)

        if not result.success:
            detail = self._redact(result.stderr.strip())
            reason = classify_clone_error(detail)
            self.logger.error(f"Failed to clone repository ({reason.value}): {detail}")
            raise FetchError(reason, detail)

        self.logger.info(f"Repository cloned successfully to: {dest}")


__all__ = ['RepoLocator', 'parse_github_url', 'build_clone_url', 'classify_clone_error', 'GitHubCloner']
