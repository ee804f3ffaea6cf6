"""Shared fixtures for migration tests."""

import io

import pytest
from loguru import logger
from rich.console import Console

from gitlab_github_migrate.migration.destination import GitHubDestination
from gitlab_github_migrate.migration.rate_governor import RateGovernor
from gitlab_github_migrate.migration.retry import RetryPolicy
from gitlab_github_migrate.utils.progress import ProgressReporter

from fakes import FakeClock, FakeGitHubClient


@pytest.fixture(autouse=True)
def reset_loguru():
    yield
    # CLI tests attach sinks to streams that are closed afterwards
    logger.remove()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def github(clock):
    return FakeGitHubClient(clock)


@pytest.fixture
def output():
    return io.StringIO()


@pytest.fixture
def progress(output):
    return ProgressReporter(Console(file=output, width=200, highlight=False))


@pytest.fixture
def governor(github, clock, progress):
    return RateGovernor(
        github.get_quota_status,
        base_cooldown=1.0,
        progress=progress,
        sleep=clock.sleep,
        clock=clock,
    )


@pytest.fixture
def retry(governor, progress):
    return RetryPolicy(governor, max_attempts=3, progress=progress)


@pytest.fixture
def destination(github, governor, retry, progress):
    return GitHubDestination(github, governor, retry, progress=progress)
