"""HTTPS client for the upstream manifest and bundle.

The bundle URL in the manifest points at an API endpoint that answers
with a redirect to the actual file, so exactly one redirect is followed.
"""

from __future__ import annotations

from pathlib import Path
import time

import httpx

from core.config import ArchiveConfig
from core.constants import BUNDLE_ACCEPT_HEADER, USER_AGENT
from core.errors import ArchiveAcquisitionError
from core.logging_config import get_logger
from core.types import ArchiveDatabaseInfo
from ingest.record_parsers import parse_archive_info

_LOGGER = get_logger(__name__)


class ArchiveDownloader:
    """Fetches archive artifacts with the configured credentials."""

    def __init__(
        self,
        config: ArchiveConfig,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """Create a downloader.

        Args:
            config: Runtime configuration with URLs, token, and timeouts.
            transport: Optional httpx transport, used to stub the network.
        """
        self._config = config
        self._transport = transport

    def fetch_manifest(self, manifest_path: Path | None = None) -> ArchiveDatabaseInfo:
        """Download and parse the manifest document.

        Args:
            manifest_path: Optional file receiving the raw manifest.

        Returns:
            Parsed bundle metadata.

        Raises:
            ArchiveAcquisitionError: If the request fails or the document is invalid.
        """
        _LOGGER.info("manifest_download_started", url=self._config.manifest_url)
        try:
            with self._client(self._config.manifest_timeout) as client:
                response = client.get(self._config.manifest_url)
        except httpx.HTTPError as error:
            raise ArchiveAcquisitionError(
                f"Failed to download manifest file: {error}"
            ) from error
        if not response.is_success:
            raise ArchiveAcquisitionError(
                f"Failed to download manifest file: {response.status_code}: {response.text}"
            )
        if manifest_path is not None:
            manifest_path.write_text(response.text, encoding="utf-8")
        try:
            info = parse_archive_info(response.text)
        except ValueError as error:
            raise ArchiveAcquisitionError(
                f"Failed to deserialize manifest file: {error}"
            ) from error
        _LOGGER.info("manifest_downloaded", bundle_url=info.url, bundle_size=info.size)
        return info

    def download_bundle(self, url: str, target_path: Path) -> int:
        """Stream the bundle to disk, following a single redirect.

        The configured download timeout bounds the whole transfer, not
        just each network read.

        Args:
            url: Bundle URL from the manifest.
            target_path: Destination file.

        Returns:
            Number of bytes written.

        Raises:
            ArchiveAcquisitionError: On timeout, an overrun of the whole-transfer
                deadline, transport failure, a second redirect, or any other
                non-success status.
        """
        _LOGGER.info("bundle_download_started", url=url, target=str(target_path))
        try:
            bundle_url = httpx.URL(url)
            deadline = time.monotonic() + self._config.download_timeout
            with self._client(self._config.download_timeout) as client:
                redirect_url = self._stream_to_file(
                    client, bundle_url, target_path, deadline, True, True
                )
                if redirect_url is not None:
                    _LOGGER.info("bundle_redirect_followed", location=str(redirect_url))
                    same_host = redirect_url.host == bundle_url.host
                    self._stream_to_file(
                        client, redirect_url, target_path, deadline, False, same_host
                    )
        except httpx.HTTPError as error:
            raise ArchiveAcquisitionError(f"Failed to download file(s): {error}") from error
        except OSError as error:
            raise ArchiveAcquisitionError(
                f"Failed to write bundle to {target_path}: {error}"
            ) from error
        byte_count = target_path.stat().st_size
        _LOGGER.info("bundle_downloaded", target=str(target_path), byte_count=byte_count)
        return byte_count

    def _stream_to_file(
        self,
        client: httpx.Client,
        url: httpx.URL,
        target_path: Path,
        deadline: float,
        allow_redirect: bool,
        send_credentials: bool,
    ) -> httpx.URL | None:
        """Issue one GET and save a successful body.

        Returns:
            Redirect target when the response is an allowed redirect, else None.
        """
        request = client.build_request("GET", url, headers={"Accept": BUNDLE_ACCEPT_HEADER})
        if not send_credentials:
            request.headers.pop("Authorization", None)
        response = client.send(request, stream=True)
        try:
            if response.is_success:
                with target_path.open("wb") as bundle_file:
                    for block in response.iter_bytes():
                        bundle_file.write(block)
                        if time.monotonic() > deadline:
                            raise ArchiveAcquisitionError(
                                "Failed to download file(s): transfer exceeded "
                                f"{self._config.download_timeout} seconds."
                            )
                return None
            if allow_redirect and response.is_redirect:
                return response.url.join(response.headers["Location"])
            response.read()
            raise ArchiveAcquisitionError(
                f"Failed to download file(s): {response.status_code}: {response.text}"
            )
        finally:
            response.close()

    def _client(self, timeout: float) -> httpx.Client:
        headers = {"User-Agent": USER_AGENT}
        if self._config.github_token:
            headers["Authorization"] = f"Bearer {self._config.github_token}"
        return httpx.Client(
            headers=headers,
            timeout=timeout,
            follow_redirects=False,
            transport=self._transport,
        )
