"""Checker service - performs HTTP, TCP, ping and SSL probes.

Probes never raise. Every outcome, including bad configuration, comes back as
a ProbeSuccess or ProbeFailure with the elapsed time filled in.
"""
import asyncio
import logging
import socket
import ssl
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import ClassVar, Optional, Union
from urllib.parse import urlsplit

import httpx
from cryptography import x509

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 30
DEFAULT_USER_AGENT = "Alert24-Monitor/1.0"

TCP_FORMAT_ERROR = "TCP check requires hostname:port format"


@dataclass(frozen=True)
class SslInfo:
    """Certificate details for SSL checks."""
    valid: bool = True
    expires_at: Optional[datetime] = None
    days_until_expiry: Optional[int] = None

    def as_dict(self) -> dict:
        return {
            "valid": self.valid,
            "expires_at": self.expires_at.isoformat() if self.expires_at else None,
            "days_until_expiry": self.days_until_expiry,
        }


@dataclass(frozen=True)
class ProbeSuccess:
    """The target answered as expected."""
    response_time_ms: int
    status_code: Optional[int] = None
    ssl_info: Optional[SslInfo] = None

    is_successful: ClassVar[bool] = True

    @property
    def error_message(self) -> Optional[str]:
        return None


@dataclass(frozen=True)
class ProbeFailure:
    """The probe failed; error_message says why."""
    error_message: str
    response_time_ms: int
    status_code: Optional[int] = None
    ssl_info: Optional[SslInfo] = None

    is_successful: ClassVar[bool] = False


ProbeResult = Union[ProbeSuccess, ProbeFailure]


def summarize(result: ProbeResult) -> dict:
    """Compact form used in dispatcher batch results."""
    return {
        "success": result.is_successful,
        "response_time": result.response_time_ms,
        "status_code": result.status_code,
        "error": result.error_message,
    }


def _describe(error: BaseException) -> str:
    # httpx errors raised from a bare transport can have an empty message
    return str(error) or type(error).__name__


class _Stopwatch:
    def __init__(self):
        self._start = time.monotonic()

    @property
    def elapsed_ms(self) -> int:
        return int((time.monotonic() - self._start) * 1000)


class CheckerService:
    """Service for performing the four probe types."""

    def __init__(
        self,
        timeout: int = DEFAULT_TIMEOUT_SECONDS,
        user_agent: str = DEFAULT_USER_AGENT,
        inspect_certificates: bool = True,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.timeout = timeout
        self.user_agent = user_agent
        self.inspect_certificates = inspect_certificates
        # Tests swap in httpx.MockTransport
        self._transport = transport

    async def check(self, check_type: str, target: str, config: Optional[dict] = None) -> ProbeResult:
        """Perform a probe based on check type."""
        config = config or {}
        timeout = config.get("timeout_seconds") or self.timeout
        watch = _Stopwatch()

        try:
            if check_type == "http":
                return await self._check_http(target, config, timeout, watch)
            elif check_type == "ping":
                return await self._check_ping(target, timeout, watch)
            elif check_type == "tcp":
                return await self._check_tcp(target, timeout, watch)
            elif check_type == "ssl":
                return await self._check_ssl(target, timeout, watch)
            else:
                return ProbeFailure(f"Unsupported check type: {check_type}", watch.elapsed_ms)
        except Exception as e:
            # Bad URLs and the like; probes report, they don't raise
            logger.debug(f"{check_type} probe of {target} raised {e!r}")
            return ProbeFailure(_describe(e), watch.elapsed_ms)

    def _client(self, timeout: float) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=timeout,
            follow_redirects=True,
            headers={"User-Agent": self.user_agent},
            transport=self._transport,
        )

    async def _request(self, method: str, url: str, timeout: float, **kwargs) -> httpx.Response:
        """Issue one request under a hard deadline covering the whole exchange."""
        async with self._client(timeout) as client:
            return await asyncio.wait_for(client.request(method, url, **kwargs), timeout=timeout)

    @staticmethod
    def _timeout_failure(timeout: float, watch: _Stopwatch) -> ProbeFailure:
        return ProbeFailure(f"Timeout after {timeout}s", watch.elapsed_ms)

    async def _check_http(self, target: str, config: dict, timeout: float, watch: _Stopwatch) -> ProbeResult:
        """HTTP check: success when the status code is one of the expected codes."""
        method = (config.get("method") or "GET").upper()
        headers = config.get("headers") or {}
        body = config.get("body")
        expected_codes = [config.get("expected_status_code") or 200]

        try:
            response = await self._request(
                method,
                target,
                timeout,
                headers=headers,
                content=body if body else None,
            )
        except (asyncio.TimeoutError, httpx.TimeoutException):
            return self._timeout_failure(timeout, watch)
        except httpx.ConnectError as e:
            return ProbeFailure(
                f"DNS resolution failed or connection refused: {_describe(e)}", watch.elapsed_ms
            )
        except httpx.HTTPError as e:
            return ProbeFailure(_describe(e), watch.elapsed_ms)

        elapsed = watch.elapsed_ms
        if response.status_code in expected_codes:
            return ProbeSuccess(response_time_ms=elapsed, status_code=response.status_code)

        expected = ",".join(str(code) for code in expected_codes)
        return ProbeFailure(
            f"Status {response.status_code} not in expected codes {expected}",
            elapsed,
            status_code=response.status_code,
        )

    async def _check_ping(self, target: str, timeout: float, watch: _Stopwatch) -> ProbeResult:
        """Reachability check.

        ICMP needs raw sockets, so a HEAD request to port 80 stands in for
        it. Any HTTP response at all means the host is up.
        """
        hostname = target.strip()
        if "://" in hostname:
            hostname = urlsplit(hostname).hostname or ""

        try:
            response = await self._request("HEAD", f"http://{hostname}", timeout)
        except (asyncio.TimeoutError, httpx.TimeoutException):
            return self._timeout_failure(timeout, watch)
        except httpx.HTTPError as e:
            return ProbeFailure(f"Host {hostname} unreachable: {_describe(e)}", watch.elapsed_ms)

        return ProbeSuccess(response_time_ms=watch.elapsed_ms, status_code=response.status_code)

    async def _check_tcp(self, target: str, timeout: float, watch: _Stopwatch) -> ProbeResult:
        """Port reachability via a HEAD request to hostname:port."""
        parts = target.strip().split(":")
        if len(parts) != 2 or not parts[0] or not parts[1].isdigit():
            return ProbeFailure(TCP_FORMAT_ERROR, watch.elapsed_ms)

        hostname, port = parts[0], int(parts[1])

        try:
            response = await self._request("HEAD", f"http://{hostname}:{port}/", timeout)
        except (asyncio.TimeoutError, httpx.TimeoutException):
            return self._timeout_failure(timeout, watch)
        except httpx.HTTPError as e:
            return ProbeFailure(
                f"TCP connection to {hostname}:{port} failed - {_describe(e)}", watch.elapsed_ms
            )

        return ProbeSuccess(response_time_ms=watch.elapsed_ms, status_code=response.status_code)

    async def _check_ssl(self, target: str, timeout: float, watch: _Stopwatch) -> ProbeResult:
        """HTTPS check: any status below 500 passes; certificate details are attached."""
        url = target.strip()
        if url.startswith("http://"):
            url = url[len("http://"):]
        if not url.startswith("https://"):
            url = f"https://{url}"

        try:
            response = await self._request("HEAD", url, timeout)
        except (asyncio.TimeoutError, httpx.TimeoutException):
            return self._timeout_failure(timeout, watch)
        except httpx.HTTPError as e:
            return ProbeFailure(f"SSL check failed - {_describe(e)}", watch.elapsed_ms)

        # The certificate read shares the probe's deadline
        remaining = timeout - watch.elapsed_ms / 1000
        ssl_info = await self._certificate_info(url, remaining)
        elapsed = watch.elapsed_ms

        if response.status_code < 500:
            return ProbeSuccess(response_time_ms=elapsed, status_code=response.status_code, ssl_info=ssl_info)
        return ProbeFailure(
            f"SSL check failed with status {response.status_code}",
            elapsed,
            status_code=response.status_code,
            ssl_info=ssl_info,
        )

    async def _certificate_info(self, url: str, timeout: float) -> SslInfo:
        """Read the peer certificate within `timeout` seconds.

        Falls back to an unverified-details placeholder when inspection is off
        or does not finish in time.
        """
        if not self.inspect_certificates or timeout <= 0:
            return SslInfo()

        parts = urlsplit(url)
        host = parts.hostname
        if not host:
            return SslInfo()

        try:
            loop = asyncio.get_running_loop()
            expiry = await asyncio.wait_for(
                loop.run_in_executor(None, self._get_ssl_expiry, host, parts.port or 443, timeout),
                timeout=timeout,
            )
        except Exception as e:
            logger.debug(f"Could not read certificate for {host}: {e!r}")
            return SslInfo()

        if expiry is None:
            return SslInfo()

        days_remaining = (expiry - datetime.now(timezone.utc)).days
        return SslInfo(valid=days_remaining > 0, expires_at=expiry, days_until_expiry=days_remaining)

    def _get_ssl_expiry(self, host: str, port: int, timeout: float) -> Optional[datetime]:
        """Get the certificate's notAfter (blocking operation)."""
        # Read the certificate without validating the chain; the HEAD request
        # above already did that
        context = ssl.create_default_context()
        context.check_hostname = False
        context.verify_mode = ssl.CERT_NONE

        with socket.create_connection((host, port), timeout=timeout) as sock:
            with context.wrap_socket(sock, server_hostname=host) as ssock:
                # getpeercert() returns an empty dict under CERT_NONE
                cert_der = ssock.getpeercert(binary_form=True)
                if not cert_der:
                    return None
                cert = x509.load_der_x509_certificate(cert_der)
                return cert.not_valid_after_utc
