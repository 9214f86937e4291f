"""
Shared pytest fixtures for quartz-publisher tests.

- publish_dirs: Quartz project, markdown and HTML directories
- git_repo: A working repository on master tracking a bare remote
"""

import shutil
from pathlib import Path

import pytest

from helpers import git
from quartz_publisher.core.models import PublishSettings


@pytest.fixture
def publish_dirs(tmp_path: Path) -> dict:
    """Create the three directories a publish needs."""
    dirs = {
        "generator_path": tmp_path / "quartz",
        "markdown_path": tmp_path / "notes",
        "html_path": tmp_path / "public",
    }
    for path in dirs.values():
        path.mkdir()
    return dirs


@pytest.fixture
def settings(publish_dirs: dict) -> PublishSettings:
    return PublishSettings(**{name: str(path) for name, path in publish_dirs.items()})


def init_repo(path: Path, remote: Path) -> Path:
    """Turn path into a repo on master, pushed to the bare repo at remote."""
    path.mkdir(parents=True, exist_ok=True)
    git("init", "--bare", str(remote), cwd=path.parent)
    git("init", cwd=path)
    git("symbolic-ref", "HEAD", "refs/heads/master", cwd=path)
    git("config", "user.email", "test@example.com", cwd=path)
    git("config", "user.name", "Test User", cwd=path)
    git("config", "commit.gpgsign", "false", cwd=path)
    git("config", "pull.rebase", "false", cwd=path)

    (path / "README.md").write_text("# Garden\n")
    git("add", ".", cwd=path)
    git("commit", "-m", "Initial commit", cwd=path)
    git("remote", "add", "origin", str(remote), cwd=path)
    git("push", "-u", "origin", "master", cwd=path)
    return path


@pytest.fixture
def git_repo(tmp_path: Path) -> tuple:
    """
    Create a working repository with an upstream.

    Returns:
        (working tree path, bare remote path)
    """
    if shutil.which("git") is None:
        pytest.skip("git not installed")
    remote = tmp_path / "remote.git"
    work = init_repo(tmp_path / "work", remote)
    return work, remote
