"""Approve/reject verdicts for single text items.

The remote verdict service is preferred; when it is not configured or the
call fails in any way, the local e-mail heuristic decides instead.
"""
import logging
import re
from dataclasses import dataclass

import requests
from flask import current_app, has_app_context

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r"[^\s@]+@[^\s@]+\.[^\s@]+")
ACCEPTED_DOMAIN_MARKERS = (".com", ".org", ".net")

# Remote payload fields, tried in this order
APPROVED_STATUSES = ("approved", "Aprovada")
MESSAGE_FIELDS = ("message", "retorno")

DEFAULT_TIMEOUT_SECONDS = 10


class RemoteVerdictError(Exception):
    """The remote service answered with something we cannot decode."""


@dataclass(frozen=True)
class Verdict:
    approved: bool
    message: str
    source: str = "local"  # remote | local | error

    def to_dict(self) -> dict:
        return {"approved": self.approved, "message": self.message, "source": self.source}


def heuristic_verdict(text: str) -> Verdict:
    # The domain check is a plain substring test, independent of the regex match.
    is_email = EMAIL_PATTERN.fullmatch(text) is not None
    has_valid_domain = any(marker in text for marker in ACCEPTED_DOMAIN_MARKERS)

    if is_email and has_valid_domain:
        return Verdict(True, "Valid email format", "local")
    return Verdict(False, "Invalid format or domain", "local")


def decode_remote_verdict(payload) -> Verdict:
    if not isinstance(payload, dict):
        raise RemoteVerdictError(f"expected a JSON object, got {type(payload).__name__}")

    status = payload.get("status")
    approved = status in APPROVED_STATUSES or payload.get("approved") is True

    message = None
    for field in MESSAGE_FIELDS:
        value = payload.get(field)
        if value:
            message = str(value)
            break
    if message is None:
        message = "" if status is None else str(status)

    return Verdict(approved, message, "remote")


def fetch_remote_verdict(text: str, endpoint: str, timeout: float) -> Verdict:
    resp = requests.post(
        endpoint,
        json={"data": text},
        headers={"ngrok-skip-browser-warning": "true"},
        timeout=timeout,
    )
    resp.raise_for_status()
    try:
        payload = resp.json()
    except ValueError as exc:
        raise RemoteVerdictError(f"malformed JSON body: {exc}") from exc
    return decode_remote_verdict(payload)


def _settings(endpoint, timeout):
    if has_app_context():
        cfg = current_app.config
        if endpoint is None:
            endpoint = cfg.get("CLASSIFIER_ENDPOINT")
        if timeout is None:
            timeout = cfg.get("CLASSIFIER_TIMEOUT_SECONDS", DEFAULT_TIMEOUT_SECONDS)
    return endpoint, timeout or DEFAULT_TIMEOUT_SECONDS


def classify(text: str, endpoint: str = None, timeout: float = None) -> Verdict:
    """Never raises; failures come back as a rejected verdict."""
    try:
        endpoint, timeout = _settings(endpoint, timeout)
        if endpoint:
            try:
                return fetch_remote_verdict(text, endpoint, timeout)
            except (requests.RequestException, RemoteVerdictError) as exc:
                logger.warning("Remote classifier unavailable, using local heuristic: %s", exc)
        return heuristic_verdict(text)
    except Exception as exc:
        logger.exception("Classification failed for %r", text)
        return Verdict(False, f"Classification error: {exc}", "error")
