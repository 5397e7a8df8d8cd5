from flask import request


def client_ip() -> str:
    """Socket peer, already rewritten by ProxyFix when TRUSTED_PROXY_COUNT is set."""
    return request.remote_addr or "unknown"


def user_agent() -> str:
    return (request.headers.get("User-Agent") or "")[:255]
