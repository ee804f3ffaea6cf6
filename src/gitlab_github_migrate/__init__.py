"""GitLab to GitHub Migration Tool

Copies the labels, milestones and issues of a GitLab project into a GitHub
repository while staying within GitHub's rate limits.
"""

__version__ = '0.1.0'

from .cli.main import main

__all__ = ['main']
