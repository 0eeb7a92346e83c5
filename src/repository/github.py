"""GitHub API client for neovim release information and downloads.

Async REST client over a single aiohttp session. Release documents, tags and
commits come from the v3 API; artifacts are streamed from the release
download host (``github_mirror`` when configured).
"""
from __future__ import annotations

import asyncio
import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Optional

import aiohttp

from common.errors import NetworkError, RateLimitError, UpstreamError
from common.logging_utils import Timer, extra_context, is_debug_enabled, safe_url
from constants import Constants
from versioning.models import RepoCommit, UpstreamRelease

logger = logging.getLogger(__name__)


def deserialize_response(payload: Any) -> Any:
    """Return the decoded payload, raising for upstream error documents.

    Args:
        payload: Decoded JSON body.

    Raises:
        RateLimitError: If the error document points at the rate-limit docs.
        UpstreamError: For any other error document.
    """
    if isinstance(payload, dict) and "message" in payload:
        documentation_url = str(payload.get("documentation_url") or "")
        if Constants.RATE_LIMIT_MARKER in documentation_url:
            raise RateLimitError(Constants.RATE_LIMIT_HELP, documentation_url)
        raise UpstreamError(str(payload.get("message")), documentation_url or None)
    return payload


class GitHubClient:
    """Lightweight async client for the upstream neovim repository.

    Supports optional authentication via the GITHUB_TOKEN environment variable.
    """

    def __init__(
        self,
        api_base: Optional[str] = None,
        mirror: Optional[str] = None,
        token: Optional[str] = None,
        timeout: int = Constants.REQUEST_TIMEOUT,
    ):
        """Initialize the client.

        Args:
            api_base: Base URL for the API (defaults to Constants.GITHUB_API_BASE)
            mirror: Base URL for release downloads (defaults to https://github.com)
            token: Personal access token (defaults to GITHUB_TOKEN env var)
            timeout: Request timeout in seconds for API calls
        """
        self.api_base = (api_base or Constants.GITHUB_API_BASE).rstrip("/")
        self.mirror = (mirror or Constants.GITHUB_DEFAULT_MIRROR).rstrip("/")
        self.token = token or os.environ.get(Constants.ENV_GITHUB_TOKEN)
        self._timeout = aiohttp.ClientTimeout(total=timeout)
        self._session: Optional[aiohttp.ClientSession] = None

    async def start(self) -> None:
        """Start the HTTP session."""
        if self._session is None:
            self._session = aiohttp.ClientSession(timeout=self._timeout)

    async def stop(self) -> None:
        """Stop the HTTP session."""
        if self._session:
            await self._session.close()
            self._session = None

    async def __aenter__(self) -> "GitHubClient":
        await self.start()
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.stop()

    def _get_headers(self) -> Dict[str, str]:
        """Get request headers including authorization if a token is available."""
        headers = {
            "User-Agent": Constants.USER_AGENT,
            "Accept": Constants.GITHUB_ACCEPT,
        }
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    def _repo_url(self, path: str) -> str:
        return f"{self.api_base}/repos/{Constants.UPSTREAM_REPO}/{path.lstrip('/')}"

    def release_download_url(self, tag: str, filename: str) -> str:
        """URL of a release asset on the download host."""
        return f"{self.mirror}/{Constants.UPSTREAM_REPO}/releases/download/{tag}/{filename}"

    async def get_json(self, url: str) -> Any:
        """GET a JSON document from the API.

        Raises:
            NetworkError: On connection failures and timeouts.
            UpstreamError: On error documents or undecodable bodies.
        """
        if self._session is None:
            await self.start()
        assert self._session is not None
        safe_target = safe_url(url)
        with Timer() as t:
            try:
                async with self._session.get(url, headers=self._get_headers()) as response:
                    status = response.status
                    text = await response.text()
            except asyncio.TimeoutError as exc:
                raise NetworkError(
                    f"Request to {safe_target} timed out after {Constants.REQUEST_TIMEOUT} seconds"
                ) from exc
            except aiohttp.ClientError as exc:
                raise NetworkError(f"Connection error for {safe_target}: {exc}") from exc

        if is_debug_enabled(logger):
            logger.debug(
                "HTTP response",
                extra=extra_context(
                    event="http_response",
                    component="github_client",
                    action="GET",
                    status_code=status,
                    duration_ms=t.duration_ms(),
                    target=safe_target,
                ),
            )

        try:
            payload = json.loads(text) if text else None
        except json.JSONDecodeError as exc:
            raise UpstreamError(
                f"Unexpected response from {safe_target} (HTTP {status})"
            ) from exc

        payload = deserialize_response(payload)
        if status >= 400:
            raise UpstreamError(f"HTTP {status} from {safe_target}")
        return payload

    async def get_release(self, tag: str) -> UpstreamRelease:
        """Fetch the release document for ``tag``."""
        data = await self.get_json(self._repo_url(f"releases/tags/{tag}"))
        return UpstreamRelease.from_json(data)

    async def get_upstream_nightly(self) -> UpstreamRelease:
        """Fetch the rolling nightly release document."""
        return await self.get_release(Constants.NIGHTLY)

    async def get_upstream_stable(self) -> UpstreamRelease:
        """Fetch the latest stable release.

        The newest release can be a nightly still being published, so the
        second of the two most recent releases is used.
        """
        data = await self.get_json(self._repo_url("releases?per_page=2"))
        if not isinstance(data, list) or len(data) < 2:
            raise UpstreamError("Could not determine the latest stable release")
        return UpstreamRelease.from_json(data[1])

    async def list_tags(self, per_page: int = Constants.TAGS_PER_PAGE) -> List[str]:
        """Return the names of the most recent tags, newest first."""
        data = await self.get_json(self._repo_url(f"tags?per_page={per_page}"))
        return [str(item.get("name")) for item in data or [] if isinstance(item, dict)]

    async def get_commits_between(self, since: str, until: str) -> List[RepoCommit]:
        """Return commits on the default branch between two timestamps."""
        url = self._repo_url(
            f"commits?since={since}&until={until}&per_page={Constants.REPO_API_PER_PAGE}"
        )
        data = await self.get_json(url)
        return [RepoCommit.from_json(item) for item in data or [] if isinstance(item, dict)]

    async def get_latest_commit(self) -> str:
        """Return the SHA of the newest commit on master."""
        data = await self.get_json(self._repo_url("commits/master"))
        return RepoCommit.from_json(data).sha

    async def download(self, url: str, dest: Path, missing_ok: bool = False) -> bool:
        """Stream ``url`` into ``dest``.

        Args:
            url: Artifact URL.
            dest: Target file; overwritten if present and removed on failure.
            missing_ok: Return False on HTTP 404 instead of raising.

        Returns:
            True when the file was written, False for a tolerated 404.
        """
        if self._session is None:
            await self.start()
        assert self._session is not None
        safe_target = safe_url(url)
        headers = {"User-Agent": Constants.USER_AGENT}
        timeout = aiohttp.ClientTimeout(total=Constants.DOWNLOAD_TIMEOUT)
        logger.debug("Downloading %s", safe_target)
        try:
            async with self._session.get(url, headers=headers, timeout=timeout) as response:
                if response.status == 404 and missing_ok:
                    return False
                if response.status >= 400:
                    raise UpstreamError(f"Download of {safe_target} failed with HTTP {response.status}")
                with open(dest, "wb") as handle:
                    async for chunk in response.content.iter_chunked(Constants.DOWNLOAD_CHUNK_SIZE):
                        handle.write(chunk)
        except asyncio.TimeoutError as exc:
            _discard(dest)
            raise NetworkError(f"Download of {safe_target} timed out") from exc
        except aiohttp.ClientError as exc:
            _discard(dest)
            raise NetworkError(f"Connection error while downloading {safe_target}: {exc}") from exc
        except BaseException:
            _discard(dest)
            raise
        return True


def _discard(path: Path) -> None:
    try:
        os.remove(path)
    except FileNotFoundError:
        pass
