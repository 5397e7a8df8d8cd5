from datetime import timedelta

from flask import current_app

from models import db
from models.db import utcnow
from models.processing_session import ProcessingSession

COUNTER_FIELDS = ("approved_count", "rejected_count", "loaded_count", "tested_count")


def get_session(user_id: int):
    return (
        ProcessingSession.query
        .filter_by(user_id=user_id)
        .order_by(ProcessingSession.id.asc())
        .first()
    )


def get_or_create_session(user_id: int) -> ProcessingSession:
    sess = get_session(user_id)
    if sess:
        return sess
    sess = ProcessingSession(user_id=user_id)
    db.session.add(sess)
    db.session.commit()
    return sess


def start_run(sess: ProcessingSession, loaded: int) -> ProcessingSession:
    for field in COUNTER_FIELDS:
        setattr(sess, field, 0)
    sess.loaded_count = loaded
    sess.is_active = True
    sess.stop_requested = False
    db.session.commit()
    return sess


def record_verdict(sess: ProcessingSession, approved: bool) -> ProcessingSession:
    if approved:
        sess.approved_count += 1
    else:
        sess.rejected_count += 1
    sess.tested_count += 1
    db.session.commit()
    return sess


def finish_run(sess: ProcessingSession) -> ProcessingSession:
    sess.is_active = False
    sess.stop_requested = False
    db.session.commit()
    return sess


def is_running(sess: ProcessingSession, now=None) -> bool:
    """
    True while a batch loop owns this session. Every item commits, so a
    session untouched for BATCH_STALE_SECONDS belongs to a loop that died
    without reaching finish_run.
    """
    if not sess.is_active:
        return False
    stale_after = current_app.config.get("BATCH_STALE_SECONDS", 300)
    return sess.updated_at > (now or utcnow()) - timedelta(seconds=stale_after)


def request_stop(user_id: int) -> bool:
    """Ask the running batch to halt before its next item; it clears is_active itself."""
    sess = get_session(user_id)
    if not sess or not sess.is_active or sess.stop_requested:
        return False
    if not is_running(sess):
        finish_run(sess)
        return True
    sess.stop_requested = True
    db.session.commit()
    return True


def stop_requested(sess: ProcessingSession) -> bool:
    # set by another request
    db.session.refresh(sess, attribute_names=["stop_requested"])
    return sess.stop_requested


def clear_counters(sess: ProcessingSession) -> ProcessingSession:
    for field in COUNTER_FIELDS:
        setattr(sess, field, 0)
    db.session.commit()
    return sess
