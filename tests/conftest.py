import io

import pytest
import logging

from git import Repo

from tests.fixtures import commit_all


@pytest.fixture
def capture_logs():
    """Fixture to capture log output during tests."""
    log_stream = io.StringIO()
    handler = logging.StreamHandler(log_stream)
    logger = logging.getLogger("repofetch")
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG)

    yield log_stream  # Yield the stream to the test function

    # Cleanup after the test
    logger.removeHandler(handler)
    log_stream.close()


# git fixtures


@pytest.fixture
def git_env(monkeypatch):
    """Commit identity and config for throwaway repositories.

    Submodules from local paths need protocol.file.allow, which recent git
    versions deny by default.
    """
    monkeypatch.setenv("GIT_AUTHOR_NAME", "repofetch")
    monkeypatch.setenv("GIT_AUTHOR_EMAIL", "repofetch@example.com")
    monkeypatch.setenv("GIT_COMMITTER_NAME", "repofetch")
    monkeypatch.setenv("GIT_COMMITTER_EMAIL", "repofetch@example.com")
    monkeypatch.setenv("GIT_CONFIG_NOSYSTEM", "1")
    monkeypatch.setenv("GIT_TERMINAL_PROMPT", "0")

    entries = [("protocol.file.allow", "always")]

    def add_config(key: str, value: str) -> None:
        entries.append((key, value))
        monkeypatch.setenv("GIT_CONFIG_COUNT", str(len(entries)))
        for i, (k, v) in enumerate(entries):
            monkeypatch.setenv(f"GIT_CONFIG_KEY_{i}", k)
            monkeypatch.setenv(f"GIT_CONFIG_VALUE_{i}", v)

    add_config("advice.detachedHead", "false")
    return add_config


@pytest.fixture
def upstream(tmp_path, git_env):
    """A bare-bones upstream repository on branch main with two commits."""
    path = tmp_path / "upstream" / "app"
    repo = Repo.init(path, initial_branch="main")
    (path / "README.md").write_text("first\n")
    first = commit_all(repo, "first")
    (path / "README.md").write_text("second\n")
    second = commit_all(repo, "second")
    return {"path": path, "repo": repo, "first": first, "second": second}


@pytest.fixture
def workspace(tmp_path):
    path = tmp_path / "workspace"
    path.mkdir()
    return path
