from flask import Blueprint, jsonify, request

from models.db import utcnow
from processing.classifier import heuristic_verdict

health_bp = Blueprint("health", __name__, url_prefix="/api")


@health_bp.get("/health")
def health():
    return jsonify(status="OK", timestamp=utcnow().isoformat() + "Z"), 200


@health_bp.post("/check")
def check():
    """Local verdict endpoint; CLASSIFIER_ENDPOINT may point here."""
    data = request.get_json(silent=True) or {}
    text = data.get("data")
    if not isinstance(text, str):
        return jsonify(error="data must be a string"), 400

    verdict = heuristic_verdict(text)
    return jsonify(
        status="approved" if verdict.approved else "rejected",
        message=verdict.message,
        approved=verdict.approved,
    ), 200
