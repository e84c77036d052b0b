from __future__ import annotations

import itertools
import json
import os
import ssl
from functools import lru_cache
from typing import Any
from urllib.request import Request, urlopen

import certifi


_REQUEST_IDS = itertools.count(1)


class GatewayError(RuntimeError):
    """Ledger unreachable, rejected a request, or returned an error payload."""


def _resolve_ca_bundle() -> tuple[str | None, str | None]:
    env_cafile = os.getenv("SSL_CERT_FILE")
    if env_cafile:
        return env_cafile, None

    env_capath = os.getenv("SSL_CERT_DIR")
    if env_capath:
        return None, env_capath

    return certifi.where(), None


@lru_cache(maxsize=1)
def _ssl_context() -> ssl.SSLContext:
    cafile, capath = _resolve_ca_bundle()
    if cafile:
        return ssl.create_default_context(cafile=cafile)
    if capath:
        return ssl.create_default_context(capath=capath)
    return ssl.create_default_context()


def post_json(url: str, payload: dict[str, Any], timeout: float = 10.0):
    body = json.dumps(payload).encode("utf-8")
    request = Request(
        url,
        data=body,
        headers={"Content-Type": "application/json", "User-Agent": "vault-quoter/0.1"},
        method="POST",
    )
    context = _ssl_context() if url.startswith("https") else None
    with urlopen(request, timeout=timeout, context=context) as response:
        text = response.read().decode("utf-8")
    return json.loads(text)


def rpc_call(url: str, method: str, params: list[Any], timeout: float = 10.0) -> Any:
    payload = {
        "jsonrpc": "2.0",
        "id": next(_REQUEST_IDS),
        "method": method,
        "params": params,
    }
    try:
        response = post_json(url, payload, timeout=timeout)
    except (OSError, ValueError) as exc:
        raise GatewayError(f"rpc transport failed method={method} error={exc}") from exc
    if not isinstance(response, dict):
        raise GatewayError(f"rpc returned non-object payload method={method}")
    error = response.get("error")
    if error:
        if isinstance(error, dict):
            message = error.get("message") or json.dumps(error)
        else:
            message = str(error)
        raise GatewayError(f"rpc error method={method} error={message}")
    return response.get("result")
