"""Async GitHub tarball fetcher.

Downloads ``https://github.com/<owner>/<repo>/archive/<ref>.tar.gz`` with
``httpx.AsyncClient``, streams it to a temporary file, and extracts it in a
worker thread.  Only the snapshot is fetched: no git history, no hooks.

Typical usage::

    fetcher = GitHubFetcher(timeout=60)
    await fetcher.fetch("fraanlol/template-base", Path("./my-app"))
"""

from __future__ import annotations

import asyncio
import tempfile
import threading
from pathlib import Path

import httpx

from create_app.config import DEFAULT_ARCHIVE_URL
from create_app.errors import FetchError, TemplateNotFoundError
from create_app.fetcher.archive import extract_tarball
from create_app.fetcher.coordinate import FetchOptions, RemoteCoordinate, parse_coordinate

_CHUNK_SIZE = 64 * 1024


class GitHubFetcher:
    """Remote-fetch collaborator backed by GitHub source archives.

    Args:
        archive_url: URL pattern with ``{owner}``, ``{repo}`` and ``{ref}``.
        timeout: Per-request timeout in seconds.
        transport: Optional httpx transport; tests pass ``httpx.MockTransport``.
    """

    def __init__(
        self,
        archive_url: str = DEFAULT_ARCHIVE_URL,
        timeout: int = 60,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.archive_url = archive_url
        self.timeout = timeout
        self.transport = transport

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _client(self) -> httpx.AsyncClient:
        """Return a fresh ``AsyncClient`` that follows GitHub's codeload redirect."""
        return httpx.AsyncClient(
            timeout=httpx.Timeout(self.timeout, connect=10.0),
            follow_redirects=True,
            transport=self.transport,
        )

    def url_for(self, coordinate: RemoteCoordinate) -> str:
        return self.archive_url.format(
            owner=coordinate.owner, repo=coordinate.repo, ref=coordinate.ref
        )

    async def _download(
        self, url: str, target: Path, source: str, headers: dict[str, str]
    ) -> None:
        """Stream *url* into *target*, mapping transport failures to ``FetchError``."""
        try:
            async with self._client() as client:
                async with client.stream("GET", url, headers=headers) as response:
                    if response.status_code == 404:
                        raise TemplateNotFoundError(
                            f"Template repository '{source}' was not found ({url})",
                            source=source,
                        )
                    if response.status_code != 200:
                        raise FetchError(
                            f"Download of '{source}' failed with HTTP {response.status_code}",
                            source=source,
                        )
                    with open(target, "wb") as fh:
                        async for chunk in response.aiter_bytes(_CHUNK_SIZE):
                            fh.write(chunk)
        except httpx.ConnectError as exc:
            raise FetchError(
                f"Cannot connect to {httpx.URL(url).host}. Check your network connection.",
                source=source,
            ) from exc
        except httpx.TimeoutException as exc:
            raise FetchError(
                f"Download of '{source}' timed out after {self.timeout}s.", source=source
            ) from exc
        except httpx.HTTPError as exc:
            raise FetchError(f"Download of '{source}' failed: {exc}", source=source) from exc

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def fetch(
        self,
        source: str,
        destination: Path,
        options: FetchOptions | None = None,
    ) -> Path:
        """Populate *destination* with the repository snapshot named by *source*.

        Args:
            source: ``owner/repo[/subdir][#ref]`` coordinate.
            destination: Directory to create and fill.
            options: Force/cache behaviour; defaults to ``FetchOptions()``.

        Returns:
            *destination*.

        Raises:
            TemplateNotFoundError: The repository or ref does not exist.
            FetchError: Any other network, HTTP or archive failure.
        """
        options = options or FetchOptions()
        coordinate = parse_coordinate(source)
        url = self.url_for(coordinate)

        headers = {"Accept": "application/x-gzip, application/octet-stream"}
        if not options.cache:
            headers["Cache-Control"] = "no-cache"

        with tempfile.TemporaryDirectory(prefix="create-app-") as tmp:
            archive = Path(tmp) / "template.tar.gz"
            await self._download(url, archive, source, headers)

            stop = threading.Event()
            extraction = asyncio.ensure_future(
                asyncio.to_thread(
                    extract_tarball, archive, destination, coordinate.subdir, options.force, stop
                )
            )
            try:
                await asyncio.shield(extraction)
            except asyncio.CancelledError:
                # Let the worker stop before the caller starts rolling back.
                stop.set()
                await asyncio.wait({extraction})
                if not extraction.cancelled():
                    extraction.exception()
                raise

        return destination
