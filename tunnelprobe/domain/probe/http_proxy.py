"""
HTTP proxy probe
"""
from dataclasses import dataclass
from typing import Any, Optional

import requests

from ...core.constants import (
    PROXY_CHECK_URL,
    CONNECT_FAILED_STATUS,
    CONNECT_FAILED_REASON,
)
from ...core.logging import get_logger
from .models import ProxyDescriptor, ProxyCheckOptions

logger = get_logger(__name__)


@dataclass(frozen=True)
class ProxyResponse:
    """Status line (and body, for synthetic failures) of a proxy check"""
    status: int
    reason: str
    body: str = ""


def classify_status(status: int) -> bool:
    """2xx and 3xx mean the proxy relayed the request"""
    return 200 <= status < 400


def fetch_through_proxy(
    proxy: ProxyDescriptor,
    options: ProxyCheckOptions,
    session: Optional[Any] = None,
) -> ProxyResponse:
    """
    HEAD the check URL through proxy.

    Transport-level failures (refused, DNS, timeout, proxy errors) are
    reported as CONNECT_FAILED_STATUS with the exception text as body.
    """
    if session is None:
        with requests.Session() as own_session:
            return fetch_through_proxy(proxy, options, own_session)

    proxies = {"http": proxy.url, "https": proxy.url}

    try:
        response = session.head(
            PROXY_CHECK_URL,
            proxies=proxies,
            timeout=options.timeout or None,
            allow_redirects=False,
        )
    except requests.exceptions.RequestException as e:
        return ProxyResponse(
            status=CONNECT_FAILED_STATUS,
            reason=CONNECT_FAILED_REASON,
            body=str(e),
        )

    return ProxyResponse(status=response.status_code, reason=response.reason or "")


def check_http_proxy(
    proxy: ProxyDescriptor,
    options: ProxyCheckOptions,
    session: Optional[Any] = None,
) -> bool:
    """
    Check whether proxy relays HTTP traffic.

    Returns:
        True for a 2xx/3xx answer, False for anything else
    """
    logger.info(f"Checking HTTP proxy {proxy} (timeout={options.timeout or 'none'})")

    response = fetch_through_proxy(proxy, options, session)
    if classify_status(response.status):
        logger.info(f"Proxy {proxy} answered {response.status} {response.reason}")
        return True

    if options.debug_level:
        logger.info(f"Proxy {proxy} failed: {response.status} {response.reason}")
        # Connection-level errors are the hard ones to diagnose remotely
        if response.status == CONNECT_FAILED_STATUS and response.body:
            logger.info(response.body)
    return False
