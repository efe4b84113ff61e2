import os
import logging
import uuid
import sentry_sdk
from flask import Flask, request, jsonify, g
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from werkzeug.middleware.proxy_fix import ProxyFix
from dotenv import load_dotenv
from amenities import catalogue_to_dict, categories_from_payload, top_rated_by_category
from score_engine import compute_score_report, report_to_dict
from scoring_config import SCORING_MODEL

load_dotenv()

# ---------------------------------------------------------------------------
# Sentry error tracking — gated on SENTRY_DSN; silent when unset (local dev)
# ---------------------------------------------------------------------------
def _sentry_before_send(event, hint):
    """Demote expected failures to breadcrumbs; only unexpected errors become Sentry events."""
    exc_info = hint.get("exc_info")
    if exc_info:
        exc_type, exc_value, _ = exc_info
        # Malformed scoring payloads are the caller's problem
        if exc_type is not None and issubclass(exc_type, ValueError):
            sentry_sdk.add_breadcrumb(
                category="payload",
                message=str(exc_value) if exc_value else "",
                level="warning",
            )
            return None
    return event


_sentry_dsn = os.environ.get("SENTRY_DSN")
if _sentry_dsn:
    from sentry_sdk.integrations.flask import FlaskIntegration

    sentry_sdk.init(
        dsn=_sentry_dsn,
        integrations=[FlaskIntegration()],
        traces_sample_rate=0.0,
        release=os.environ.get("RAILWAY_GIT_COMMIT_SHA"),
        environment=os.environ.get("RAILWAY_ENVIRONMENT", "production"),
        before_send=_sentry_before_send,
    )

app = Flask(__name__)

# Proxy fix — PaaS hosts run behind a reverse proxy that sets
# X-Forwarded-For.  ProxyFix rewrites request.remote_addr to the real
# client IP so both Flask-Limiter and logging see the correct address.
app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1)

logging.basicConfig(level=os.environ.get("LOG_LEVEL", "INFO").upper())
logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Rate limiting.  In-memory storage is per-process (with 2 gunicorn workers
# the effective limit is ~2x nominal).
# ---------------------------------------------------------------------------
RATE_LIMIT_DEFAULT = os.environ.get("RATE_LIMIT_DEFAULT", "60/minute")
RATE_LIMIT_SCORES = os.environ.get("RATE_LIMIT_SCORES", "30/minute")

limiter = Limiter(
    get_remote_address,
    app=app,
    default_limits=[RATE_LIMIT_DEFAULT],
    storage_uri="memory://",
)
logging.getLogger("flask-limiter").setLevel(logging.WARNING)


# ---------------------------------------------------------------------------
# Request ID middleware — every request gets a unique ID for tracing
# ---------------------------------------------------------------------------
def _generate_request_id():
    return uuid.uuid4().hex[:10]


@app.before_request
def _set_request_context():
    g.request_id = request.headers.get("X-Request-ID") or _generate_request_id()


@app.after_request
def _after_request(response):
    response.headers["X-Request-ID"] = getattr(g, "request_id", "")
    return response


def _error(message: str, status: int):
    return jsonify({"error": message, "request_id": getattr(g, "request_id", None)}), status


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------

@app.route("/healthz")
@limiter.exempt
def healthz():
    return jsonify({"status": "ok", "model_version": SCORING_MODEL.version})


@app.route("/api/categories")
def categories():
    """Amenity categories and radii the collector should search."""
    return jsonify(catalogue_to_dict())


@app.route("/api/scores", methods=["POST"])
@limiter.limit(lambda: RATE_LIMIT_SCORES)
def scores():
    """Score a nearby-places snapshot.

    Body: {"categories": [...]} or a bare list of categories.
    """
    payload = request.get_json(silent=True)
    if payload is None:
        return _error("Request body must be JSON", 400)

    try:
        snapshot = categories_from_payload(payload)
    except ValueError as e:
        logger.info("[%s] rejected scoring payload: %s", g.request_id, e)
        return _error(str(e), 400)

    report = compute_score_report(snapshot)
    body = report_to_dict(report)
    body["top_by_category"] = top_rated_by_category(snapshot)
    body["request_id"] = g.request_id

    s = report.scores
    logger.info(
        "[%s] scored %d categories  walk=%d drive=%d urban=%d (%s)",
        g.request_id, len(snapshot), s.walk_score, s.drive_score, s.urban_score, s.urban_label,
    )
    return jsonify(body)


# ---------------------------------------------------------------------------
# Error handlers
# ---------------------------------------------------------------------------

@app.errorhandler(429)
def rate_limited(e):
    return _error("Too many requests. Please wait and try again.", 429)


@app.errorhandler(404)
def not_found(e):
    return _error("Not found", 404)


@app.errorhandler(405)
def method_not_allowed(e):
    return _error("Method not allowed", 405)


@app.errorhandler(500)
def internal_error(e):
    return _error("Internal server error", 500)


# ---------------------------------------------------------------------------
# Startup
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    port = int(os.environ.get("PORT", 5001))
    debug = os.environ.get("FLASK_DEBUG", "0") == "1"
    app.run(host="0.0.0.0", port=port, debug=debug)
