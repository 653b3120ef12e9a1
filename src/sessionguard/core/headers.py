"""Header names, SDK identity and pure response inspection."""

from __future__ import annotations

from typing import List, Mapping, Optional, Union

import httpx

from sessionguard.core.models import IntentKind, StoreIntent
from sessionguard.version import __version__


CONTINUATION_HEADER = "id-refresh-token"
ANTI_FORGERY_HEADER = "anti-csrf"
SDK_NAME_HEADER = "sdk-name"
SDK_VERSION_HEADER = "sdk-version"

SDK_NAME = "sessionguard"

HeaderSource = Union[httpx.Headers, Mapping[str, str], None]


def get_domain_from_url(url: str) -> str:
    """Return ``scheme://host[:port]`` for an absolute http(s) URL."""
    if url.startswith("https://") or url.startswith("http://"):
        return "/".join(url.split("/")[:3])
    raise ValueError("Please make sure that the provided URL starts with http:// or https://")


def sdk_headers() -> dict[str, str]:
    return {SDK_NAME_HEADER: SDK_NAME, SDK_VERSION_HEADER: __version__}


def build_request_headers(base: HeaderSource, anti_forgery: Optional[str]) -> httpx.Headers:
    """Merge caller headers with the anti-forgery token and SDK identity.

    Only the anti-forgery and SDK identity keys are written; every other
    caller-supplied header passes through untouched.
    """
    headers = httpx.Headers(base)
    if anti_forgery is not None:
        headers[ANTI_FORGERY_HEADER] = anti_forgery
    headers.update(sdk_headers())
    return headers


def continuation_intents(headers: HeaderSource) -> List[StoreIntent]:
    value = httpx.Headers(headers).get(CONTINUATION_HEADER)
    if value is None:
        return []
    return [StoreIntent(IntentKind.SET_CONTINUATION, value)]


def anti_forgery_intents(headers: HeaderSource) -> List[StoreIntent]:
    value = httpx.Headers(headers).get(ANTI_FORGERY_HEADER)
    if value is None:
        return []
    return [StoreIntent(IntentKind.SET_ANTI_FORGERY, value)]


def refresh_intents(status: int, headers: HeaderSource, expiry_status_code: int) -> List[StoreIntent]:
    """Continuation mutations for a refresh response.

    An expiry status without a continuation header means the backend no longer
    knows the session, so the local token is erased.
    """
    intents = continuation_intents(headers)
    if not intents and status == expiry_status_code:
        intents.append(StoreIntent(IntentKind.CLEAR_CONTINUATION))
    return intents
