import logging

from flask import Flask, Response, current_app, jsonify, request
from flask_cors import CORS
from pydantic import ValidationError
from werkzeug.exceptions import HTTPException

# Sibling modules live in the 'api' folder next to this file
from config import Config
from export import expenses_to_csv
from schemas import ExpenseBatch, SummaryRequest
from settlement import calculate_settlements, format_settlement, settlements_to_text
from summary import SummaryError, SummaryService, SummaryUnavailableError

logger = logging.getLogger(__name__)


def create_app(config_class=Config, summary_service=None):
    app = Flask(__name__)
    app.config.from_object(config_class)
    # Balances keep first-appearance order in responses
    app.json.sort_keys = False

    logging.basicConfig(level=app.config["LOG_LEVEL"])

    CORS(app, resources={r"/api/*": {"origins": app.config["CORS_ORIGINS"]}})  # Allows the React frontend to communicate with this backend

    # Tests hand in a fake; otherwise built from config on first use
    if summary_service is not None:
        app.extensions["summary_service"] = summary_service

    register_routes(app)
    register_error_handlers(app)
    return app


def get_summary_service():
    service = current_app.extensions.get("summary_service")
    if service is None:
        service = SummaryService.from_config(current_app.config)
        current_app.extensions["summary_service"] = service
    return service


def register_routes(app):
    # --- 1. HEALTH CHECK ROUTE ---
    @app.route('/api', methods=['GET'])
    def health_check():
        return jsonify({"status": "healthy", "message": "Backend is running!"})

    # --- 2. CALCULATION ROUTE ---
    @app.route('/api/calculate', methods=['POST'])
    def calculate():
        batch = ExpenseBatch.from_json(request.get_json(silent=True))
        balances, settlements = calculate_settlements(batch.to_expenses(), batch.people)

        logger.info("Settled %d expenses into %d transfers", len(batch.expenses), len(settlements))
        return jsonify({
            "balances": {person: float(amount) for person, amount in balances.items()},
            "settlements": [s.to_dict() for s in settlements],
            "lines": [format_settlement(s) for s in settlements],
            "text": settlements_to_text(settlements),
        })

    # --- 3. AI SUMMARY ROUTE ---
    @app.route('/api/summary', methods=['POST'])
    def summary():
        payload = SummaryRequest.from_json(request.get_json(silent=True))
        expenses = payload.to_expenses()
        if not expenses and not (payload.settlements or "").strip():
            return jsonify({"error": "No expenses or settlements provided"}), 400

        settlements_text = payload.settlements
        if not settlements_text or not settlements_text.strip():
            _, settlements = calculate_settlements(expenses, payload.people)
            settlements_text = settlements_to_text(settlements)

        return jsonify(get_summary_service().summarize(settlements_text, expenses))

    # --- 4. CSV EXPORT ROUTE ---
    @app.route('/api/export', methods=['POST'])
    def export():
        batch = ExpenseBatch.from_json(request.get_json(silent=True))
        return Response(
            expenses_to_csv(batch.to_expenses()),
            mimetype='text/csv',
            headers={'Content-Disposition': 'attachment; filename=expenses.csv'},
        )


def register_error_handlers(app):
    @app.errorhandler(ValidationError)
    def invalid_request(e):
        details = e.errors(include_url=False, include_context=False, include_input=False)
        return jsonify({"error": "invalid_request", "details": details}), 400

    @app.errorhandler(SummaryUnavailableError)
    def summary_unavailable(e):
        logger.warning("AI summary requested but unavailable: %s", e)
        return jsonify({"error": str(e)}), 503

    @app.errorhandler(SummaryError)
    def summary_failed(e):
        logger.exception("AI request failed")
        return jsonify({"error": "AI request failed", "details": str(e)}), 502

    @app.errorhandler(Exception)
    def unexpected(e):
        if isinstance(e, HTTPException):
            return e
        # Returns specific error message to the frontend if something crashes
        logger.exception("Unhandled error on %s", request.path)
        return jsonify({"error": str(e)}), 500


app = create_app()

# Vercel ignores this block, but it's useful for local testing
if __name__ == '__main__':
    app.run(debug=True, port=app.config["PORT"])
