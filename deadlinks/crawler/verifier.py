"""
Link liveness probing and error classification.
"""

import asyncio
import errno
import logging
import socket
import time
from dataclasses import dataclass
from typing import Optional

import aiohttp

from .fetcher import WebFetcher
from .models import BrokenLink, ErrorKind, Link, LinkOutcome


TIMEOUT_CODE = 'TIMEOUT'
DNS_CODE = 'DNS_ERROR'
SSL_CODE = 'SSL_ERROR'
NETWORK_CODE = 'NETWORK_ERROR'
UNKNOWN_CODE = 'UNKNOWN_ERROR'


@dataclass(frozen=True)
class LinkError:
    """Classified reason a probe failed."""
    kind: ErrorKind
    code: str
    message: str


def classify_status(status: int, reason: Optional[str] = None) -> Optional[LinkError]:
    """Classify an HTTP status. Returns None for working (< 400) statuses."""
    if status < 400:
        return None
    return LinkError(
        kind=ErrorKind.HTTP_STATUS,
        code=str(status),
        message=reason or f"HTTP Error {status}"
    )


def classify_error(exc: BaseException) -> LinkError:
    """
    Map an exception raised while probing a link onto an ErrorKind.

    Timeouts are checked first: aiohttp's timeout errors also subclass its
    connection errors, and asyncio.TimeoutError is an OSError on Python 3.11+.
    """
    message = str(exc) or exc.__class__.__name__

    if isinstance(exc, asyncio.TimeoutError):
        return LinkError(ErrorKind.TIMEOUT, TIMEOUT_CODE, "Request timed out")

    if isinstance(exc, aiohttp.ClientSSLError):
        return LinkError(ErrorKind.TLS, SSL_CODE, message)

    if isinstance(exc, aiohttp.ClientConnectorError):
        os_error = exc.os_error
        if isinstance(exc, aiohttp.ClientConnectorDNSError) or isinstance(os_error, socket.gaierror):
            return LinkError(ErrorKind.DNS, DNS_CODE, message)
        code = errno.errorcode.get(os_error.errno) if os_error.errno else None
        return LinkError(ErrorKind.TRANSPORT, code or NETWORK_CODE, message)

    if isinstance(exc, aiohttp.ClientError):
        return LinkError(ErrorKind.TRANSPORT, NETWORK_CODE, message)

    return LinkError(ErrorKind.UNKNOWN, UNKNOWN_CODE, message)


class LinkVerifier:
    """
    Probes single links and classifies them as working or broken.

    ``verify`` never raises for a failed probe: every failure becomes a
    BrokenLink. It touches no state beyond the network call.
    """

    def __init__(self, fetcher: WebFetcher, timeout: float = 10.0):
        self.fetcher = fetcher
        self.timeout = timeout
        self.logger = logging.getLogger(__name__)

    async def verify(self, url: str, origin_page: str) -> LinkOutcome:
        start = time.monotonic()
        try:
            probe = await self.fetcher.probe(url, timeout=self.timeout)
        except Exception as e:
            failure = classify_error(e)
            outcome = BrokenLink(
                url=url,
                status=0,
                response_time_ms=int((time.monotonic() - start) * 1000),
                error=failure.message,
                error_code=failure.code,
                origin_page=origin_page,
                kind=failure.kind
            )
            self._log_outcome(outcome, f"Broken link: {url} -> {failure.code} ({failure.message})")
            return outcome

        failure = classify_status(probe.status, probe.reason)
        if failure is None:
            outcome = Link(url=url, status=probe.status, response_time_ms=probe.elapsed_ms)
            self._log_outcome(outcome, f"Link OK: {url} -> {probe.status} ({probe.elapsed_ms}ms)")
            return outcome

        outcome = BrokenLink(
            url=url,
            status=probe.status,
            response_time_ms=probe.elapsed_ms,
            error=failure.message,
            error_code=failure.code,
            origin_page=origin_page,
            kind=failure.kind
        )
        self._log_outcome(outcome, f"Broken link: {url} -> {probe.status} ({failure.message})")
        return outcome

    def _log_outcome(self, outcome: LinkOutcome, message: str):
        # JSONFormatter merges extra_fields into the structured record
        self.logger.info(message, extra={'extra_fields': {
            'link': outcome.url,
            'link_status': outcome.status,
            'error_code': getattr(outcome, 'error_code', None),
        }})
