from flask import Blueprint, request, jsonify, g

from processing import sessions
from processing.batch import parse_lines, run_batch
from utils.audit import log_event
from utils.auth_context import login_required

processing_bp = Blueprint("processing", __name__, url_prefix="/processing")


@processing_bp.get("/session")
@login_required
def get_session():
    sess = sessions.get_or_create_session(g.user.id)
    return jsonify(sess.to_dict()), 200


@processing_bp.post("/run")
@login_required
def run():
    data = request.get_json(silent=True) or {}
    raw = data.get("input")
    if not isinstance(raw, str):
        return jsonify(error="input must be a string"), 400
    if not parse_lines(raw):
        return jsonify(error="Please enter items to process"), 400

    sess = sessions.get_or_create_session(g.user.id)
    if sessions.is_running(sess):
        return jsonify(error="A batch is already running"), 409

    results = run_batch(sess, raw, should_stop=lambda: sessions.stop_requested(sess))
    approved = sum(1 for r in results if r.approved)

    log_event(
        "PROCESSING_RUN",
        user_id=g.user.id,
        entity="processing_session",
        entity_id=sess.id,
        metadata={"loaded": sess.loaded_count, "tested": sess.tested_count, "approved": approved},
    )
    return jsonify(
        results=[r.to_dict() for r in results],
        session=sess.to_dict(),
        stopped=len(results) < sess.loaded_count,
    ), 200


@processing_bp.post("/stop")
@login_required
def stop():
    stopped = sessions.request_stop(g.user.id)
    if stopped:
        log_event("PROCESSING_STOP", user_id=g.user.id)
    return jsonify(message="Processing stopped" if stopped else "Nothing to stop", stopped=stopped), 200


@processing_bp.post("/clear")
@login_required
def clear():
    sess = sessions.get_or_create_session(g.user.id)
    if sessions.is_running(sess):
        return jsonify(error="Stop the running batch first"), 409
    sessions.clear_counters(sess)
    return jsonify(sess.to_dict()), 200
