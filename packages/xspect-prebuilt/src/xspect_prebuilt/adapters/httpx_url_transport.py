"""HTTPX-based implementation of ArchiveTransportPort for direct URLs.

This adapter uses httpx to download upstream archives, either from a
public mirror or, when credentials are available, from the authenticated
origin.
"""

from __future__ import annotations

import logging
import tempfile
from pathlib import Path

import httpx

from xspect_prebuilt.adapters.ports import (
    ArchiveTransportPort,
    EnvironmentTokenResolver,
    TokenResolverPort,
)
from xspect_prebuilt.domain.artifact import ArchiveSource, UrlSource
from xspect_prebuilt.domain.exceptions import TransportError

logger = logging.getLogger(__name__)


class HttpxUrlTransport:
    """HTTPX-based adapter for downloading archives from a URL.

    Without a token the mirror URL is fetched. With a token the origin URL
    is fetched instead, sending ``Authorization: token <value>``. The body
    is streamed to a per-call temporary directory that is always removed.

    Attributes:
        token_resolver: Source of the origin token.
    """

    def __init__(
        self,
        token_resolver: TokenResolverPort | None = None,
        client: httpx.Client | None = None,
        chunk_size: int = 1024 * 1024,
    ) -> None:
        """Initialize the URL transport.

        Args:
            token_resolver: Resolves the origin token. Defaults to reading
                GITHUB_TOKEN from the environment.
            client: Optional httpx.Client for dependency injection (testing).
                If not provided, a new client is created per request.
            chunk_size: Bytes per streamed chunk.
        """
        self._token_resolver = token_resolver or EnvironmentTokenResolver()
        self._client = client
        self._chunk_size = chunk_size

    def fetch(self, source: ArchiveSource) -> bytes:
        """Download the archive described by a UrlSource.

        Args:
            source: UrlSource with mirror and optional origin URLs.

        Returns:
            The compressed archive bytes.

        Raises:
            TransportError: For network failures and non-2xx responses.
            TypeError: If source is not a UrlSource.
        """
        if not isinstance(source, UrlSource):
            raise TypeError(f"HttpxUrlTransport cannot fetch {source!r}")

        token = self._token_resolver.resolve_token()
        headers: dict[str, str] = {}
        if token and source.origin:
            url = source.origin
            headers["Authorization"] = f"token {token}"
            logger.info("Downloading from origin: %s", url)
        else:
            url = source.primary
            logger.info("Downloading from mirror: %s", url)

        with tempfile.TemporaryDirectory(prefix="xspect-prebuilt-") as workdir:
            target = Path(workdir) / source.filename
            try:
                if self._client is not None:
                    self._stream_to(self._client, url, headers, target)
                else:
                    with httpx.Client(follow_redirects=True) as client:
                        self._stream_to(client, url, headers, target)
            except httpx.HTTPStatusError as e:
                raise TransportError(
                    f"Download failed with HTTP {e.response.status_code}: {url}",
                    source=url,
                    original_error=e,
                ) from e
            except httpx.HTTPError as e:
                raise TransportError(
                    f"Download failed: {url}: {e}",
                    source=url,
                    original_error=e,
                ) from e
            except OSError as e:
                raise TransportError(
                    f"Could not write download of {url}: {e}",
                    source=url,
                    original_error=e,
                ) from e

            return target.read_bytes()

    def _stream_to(
        self,
        client: httpx.Client,
        url: str,
        headers: dict[str, str],
        target: Path,
    ) -> None:
        with client.stream("GET", url, headers=headers, follow_redirects=True) as response:
            response.raise_for_status()
            with target.open("wb") as f:
                for chunk in response.iter_bytes(self._chunk_size):
                    f.write(chunk)


# Runtime protocol check
assert isinstance(HttpxUrlTransport(), ArchiveTransportPort)
