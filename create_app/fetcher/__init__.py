"""Remote-fetch collaborator: downloads a template repository snapshot.

Quick usage::

    from create_app.fetcher import FetchOptions, GitHubFetcher

    fetcher = GitHubFetcher()
    await fetcher.fetch("fraanlol/template-redux", Path("my-app"), FetchOptions())
"""

from create_app.fetcher.archive import extract_tarball
from create_app.fetcher.coordinate import FetchOptions, RemoteCoordinate, parse_coordinate
from create_app.fetcher.github import GitHubFetcher

__all__ = [
    "FetchOptions",
    "GitHubFetcher",
    "RemoteCoordinate",
    "extract_tarball",
    "parse_coordinate",
]
