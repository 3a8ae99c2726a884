# core/services/web3_cache.py

from __future__ import annotations

from typing import Dict, Tuple

from aiohttp import ClientTimeout
from web3 import AsyncHTTPProvider, AsyncWeb3

_W3_CACHE: Dict[Tuple[str, float], AsyncWeb3] = {}


def get_async_web3(rpc_url: str, *, timeout_sec: float = 30.0) -> AsyncWeb3:
    """
    One AsyncWeb3 (and so one HTTP session) per rpc_url, shared by all
    requests. The provider's request timeout is the only timeout applied to
    chain calls.
    """
    url = (rpc_url or "").strip()
    if not url:
        raise ValueError("rpc_url is required")

    key = (url, float(timeout_sec))
    w3 = _W3_CACHE.get(key)
    if w3 is None:
        w3 = AsyncWeb3(AsyncHTTPProvider(url, request_kwargs={"timeout": ClientTimeout(total=timeout_sec)}))
        _W3_CACHE[key] = w3
    return w3
