import logging
import time
from dataclasses import dataclass, asdict

from flask import current_app, has_app_context

from processing import sessions
from processing.classifier import classify

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ItemResult:
    input: str
    approved: bool
    message: str

    def to_dict(self) -> dict:
        return asdict(self)


def parse_lines(raw: str) -> list:
    """Split on newlines, trim, drop blank lines."""
    return [line.strip() for line in (raw or "").split("\n") if line.strip()]


def _item_delay() -> float:
    if has_app_context():
        return float(current_app.config.get("BATCH_ITEM_DELAY_SECONDS", 0.1))
    return 0.1


def run_batch(sess, raw_input: str, should_stop=None, on_result=None,
              classifier=classify, delay: float = None, sleep=time.sleep) -> list:
    """
    Classify every line of ``raw_input`` in order, one at a time.

    Counters on ``sess`` are committed after each item. ``should_stop`` is
    polled before each item; once it returns True nothing else is
    dispatched, but recorded results and counters stay. ``is_active`` is
    cleared however the run ends.
    """
    lines = parse_lines(raw_input)
    delay = _item_delay() if delay is None else delay
    results = []

    sessions.start_run(sess, len(lines))
    logger.info("Batch started for user %s: %d items", sess.user_id, len(lines))

    try:
        for index, line in enumerate(lines):
            if should_stop is not None and should_stop():
                logger.info("Batch for user %s stopped after %d items", sess.user_id, index)
                break

            try:
                verdict = classifier(line)
                result = ItemResult(line, verdict.approved, verdict.message)
            except Exception as exc:
                logger.error("Processing error on %r: %s", line, exc)
                result = ItemResult(line, False, str(exc) or "Processing error")

            results.append(result)
            sessions.record_verdict(sess, result.approved)
            if on_result is not None:
                on_result(result)

            if delay and index < len(lines) - 1:
                sleep(delay)
    finally:
        sessions.finish_run(sess)

    logger.info(
        "Batch finished for user %s: %d approved, %d rejected",
        sess.user_id, sess.approved_count, sess.rejected_count,
    )
    return results
