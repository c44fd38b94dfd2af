"""Fake archive transport for testing.

Provides a test double for ArchiveTransportPort that returns
preconfigured archive bytes without network operations.
"""

from __future__ import annotations

from xspect_prebuilt.domain.artifact import ArchiveSource


class FakeArchiveTransport:
    """Fake implementation of ArchiveTransportPort for testing.

    Returns preconfigured bytes, keyed by the source's string form
    ('name@version' or the mirror URL) with an optional fallback payload.
    Supports configuring an exception for error path testing and records
    all calls for assertion in tests.
    """

    def __init__(
        self,
        payload: bytes | None = None,
        payloads: dict[str, bytes] | None = None,
    ) -> None:
        """Initialize with optional preconfigured responses.

        Args:
            payload: Bytes returned for any source without a specific entry.
            payloads: Bytes per source string.
        """
        self._payload = payload
        self._payloads = dict(payloads or {})
        self._exception: BaseException | None = None
        self._calls: list[ArchiveSource] = []

    @property
    def calls(self) -> list[ArchiveSource]:
        """Return the sources passed to fetch(), in order."""
        return list(self._calls)

    @property
    def call_count(self) -> int:
        return len(self._calls)

    def set_payload(self, payload: bytes, source: str | None = None) -> None:
        """Configure bytes to return, for one source or as the fallback."""
        if source is None:
            self._payload = payload
        else:
            self._payloads[source] = payload

    def set_exception(self, exception: BaseException | None) -> None:
        """Configure an exception to raise from fetch(), or None to clear."""
        self._exception = exception

    def clear_calls(self) -> None:
        """Clear the recorded calls list."""
        self._calls.clear()

    def fetch(self, source: ArchiveSource) -> bytes:
        """Return configured bytes or raise the configured exception.

        Raises:
            LookupError: If nothing is configured for source.
        """
        self._calls.append(source)

        if self._exception is not None:
            raise self._exception

        key = str(source)
        if key in self._payloads:
            return self._payloads[key]
        if self._payload is not None:
            return self._payload
        raise LookupError(f"No payload configured for {key}")
