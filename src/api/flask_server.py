"""
Flask API server for the Smart Availability Engine
"""
import logging
import time
from collections import deque
from flask import Flask, request, jsonify
from flask_cors import CORS
import signal
import sys
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

from config.settings import Config
from src.availability.errors import SchedulingError
from src.availability.models import Candidate, ScheduleItem, parse_weekday_base
from src.availability.snapshot import ScheduleSnapshot
from src.scheduler.alternative_search import build_recommendation_message
from src.scheduler.smart_scheduler import SmartScheduler
from utils.logger import SchedulerLogger
from utils.validators import DataSanitizer, RequestValidator

logger = logging.getLogger(__name__)

Handler = Callable[[Dict[str, Any]], Dict[str, Any]]
Validator = Callable[[Dict[str, Any]], List[str]]


class AvailabilityAPI:
    """
    JSON HTTP surface over the scheduler. Every request carries its own
    snapshot; the server keeps only debug history between requests.
    """

    def __init__(self, scheduler: Optional[SmartScheduler] = None, install_signal_handlers: bool = True):
        self.config = Config()
        self.app = Flask(__name__)
        CORS(self.app)  # Enable CORS for cross-origin requests

        self.scheduler = scheduler or SmartScheduler()

        # Store received data for debugging
        self.received_requests = deque(maxlen=self.config.DEBUG_REQUEST_HISTORY)
        self.requests_processed = 0
        self.start_time = time.time()

        self._setup_routes()

        if install_signal_handlers:
            self._setup_signal_handlers()

    def _handle(self, endpoint: str, action: Handler, validate: Optional[Validator] = None):
        """Common request flow: parse, validate, run, log"""
        started = time.time()
        data = request.get_json(silent=True)
        if not isinstance(data, dict):
            logger.error(f"No JSON object received on {endpoint}")
            return jsonify({"error": "No JSON data provided"}), 400

        data = DataSanitizer.sanitize_request(data)
        self.received_requests.append({
            "timestamp": datetime.now().isoformat(),
            "endpoint": endpoint,
            "data": data,
        })
        logger.info(f"🚀 RECEIVED {endpoint}: {data.get('title') or data.get('intent') or ''}")

        if validate is not None:
            errors = validate(data)
            if errors:
                logger.warning(f"❌ Invalid request on {endpoint}: {errors}")
                return jsonify({"error": "Invalid request", "details": errors}), 400

        try:
            result = action(data)
        except SchedulingError as e:
            logger.warning(f"❌ {endpoint} rejected: {e}")
            return jsonify({"error": str(e)}), 400
        except Exception as e:
            logger.error(f"Error processing {endpoint}: {e}")
            return jsonify({"error": "Internal server error"}), 500

        processing_time = time.time() - started
        self.requests_processed += 1
        SchedulerLogger.log_request_response(endpoint, data, result, processing_time)
        if processing_time > self.config.API_TIMEOUT:
            logger.warning(f"⚠️  Processing time ({processing_time:.2f}s) exceeded limit ({self.config.API_TIMEOUT}s)")
        return jsonify(result)

    # Handlers -----------------------------------------------------------

    def _check_event(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """Conflict check without committing; alternatives included on conflict"""
        snapshot = ScheduleSnapshot.from_dict(data.get("snapshot"))
        candidate = Candidate.from_dict(data)
        result = self.scheduler.check_event(snapshot, candidate)
        response = result.to_dict()
        response["recommendations"] = []
        if result.has_conflict and not result.is_duplicate:
            commitments = snapshot.commitments(include_availability=self.scheduler.availability_blocks_events)
            recommendations = self.scheduler.find_alternatives_with_fallback(candidate, commitments)
            response["recommendations"] = [r.to_dict() for r in recommendations]
            response["message"] = build_recommendation_message(recommendations)
        response["status"] = "duplicate" if result.is_duplicate else ("conflict" if result.has_conflict else "free")
        return response

    def _with_intent(self, intent: str) -> Handler:
        def run(data: Dict[str, Any]) -> Dict[str, Any]:
            return self.scheduler.process_request(dict(data, intent=intent))
        return run

    def _merged_view(self, data: Dict[str, Any]) -> Dict[str, Any]:
        snapshot = ScheduleSnapshot.from_dict(data.get("snapshot"))
        return {"status": "ok", "snapshot": self.scheduler.merged_view(snapshot).to_dict()}

    def _combinations(self, data: Dict[str, Any]) -> Dict[str, Any]:
        base = parse_weekday_base(data.get("weekdayBase"))
        items = [ScheduleItem.from_dict(record, base) for record in data.get("schedules") or []]
        combinations = self.scheduler.generate_combinations(items, seed=data.get("seed"))
        return {
            "status": "ok",
            "combinations": [[item.to_dict() for item in combo] for combo in combinations],
        }

    def _setup_routes(self):
        """Setup Flask routes"""

        @self.app.route('/health', methods=['GET'])
        def health_check():
            """Health check endpoint"""
            return jsonify({
                "status": "healthy",
                "timestamp": datetime.now().isoformat(),
                "scheduler_available": self.scheduler is not None
            })

        @self.app.route('/status', methods=['GET'])
        def get_status():
            """Get server status and statistics"""
            return jsonify({
                "status": "running",
                "requests_processed": self.requests_processed,
                "uptime": time.time() - self.start_time,
                "search": self.config.get_search_config(),
                "combinations": self.config.get_combination_config(),
            })

        @self.app.route('/debug/requests', methods=['GET'])
        def get_debug_info():
            """Get debug information (last few requests)"""
            recent_requests = list(self.received_requests)[-5:]
            return jsonify({
                "recent_requests": recent_requests,
                "total_requests": len(self.received_requests)
            })

        routes = [
            ('/events/check', self._check_event, RequestValidator.validate_event_request),
            ('/events', self._with_intent("add_event"), RequestValidator.validate_event_request),
            ('/events/accept', self._with_intent("accept_recommendation"), None),
            ('/events/reschedule', self._with_intent("reschedule_existing"), RequestValidator.validate_event_request),
            ('/events/delete', self._with_intent("delete_event"), None),
            ('/recurring', self._with_intent("add_recurring_event"), RequestValidator.validate_recurring_request),
            ('/slots/preferred', self._with_intent("add_preferred_time"), RequestValidator.validate_recurring_request),
            ('/slots/cycle', self._with_intent("cycle_slot"), None),
            ('/slots/holiday', self._with_intent("toggle_holiday"), None),
            ('/slots/delete-range', self._with_intent("delete_range"), RequestValidator.validate_date_range),
            ('/slots/merged', self._merged_view, None),
            ('/combinations', self._combinations, None),
            ('/combinations/apply', self._with_intent("apply_combination"), None),
        ]
        for rule, action, validate in routes:
            self._add_post_route(rule, action, validate)

        @self.app.errorhandler(404)
        def not_found(error):
            return jsonify({"error": "Endpoint not found"}), 404

        @self.app.errorhandler(500)
        def internal_error(error):
            return jsonify({"error": "Internal server error"}), 500

    def _add_post_route(self, rule: str, action: Handler, validate: Optional[Validator]):
        def view():
            return self._handle(rule, action, validate)
        self.app.add_url_rule(rule, endpoint=rule, view_func=view, methods=['POST'])

    def _setup_signal_handlers(self):
        """Setup graceful shutdown handlers"""
        def signal_handler(signum, frame):
            logger.info(f"Received signal {signum}, shutting down gracefully...")
            self.shutdown()
            sys.exit(0)

        signal.signal(signal.SIGINT, signal_handler)
        signal.signal(signal.SIGTERM, signal_handler)

    def run(self, host=None, port=None, debug=False):
        """Run the Flask server"""
        host = host or self.config.API_HOST
        port = port or self.config.API_PORT

        self.start_time = time.time()

        logger.info(f"Starting Smart Availability API server on {host}:{port}")

        try:
            self.app.run(
                host=host,
                port=port,
                debug=debug,
                threaded=True,  # Enable threading for concurrent requests
                use_reloader=False  # Disable reloader in production
            )
        except Exception as e:
            logger.error(f"Failed to start server: {e}")
            raise

    def shutdown(self):
        """Graceful shutdown"""
        logger.info(f"Shutting down Smart Availability API server after {self.requests_processed} request(s)")


def create_app(scheduler: Optional[SmartScheduler] = None) -> Flask:
    """Factory function to create Flask app"""
    api = AvailabilityAPI(scheduler, install_signal_handlers=False)
    return api.app


def main():
    """Main entry point for the API server"""
    import argparse

    parser = argparse.ArgumentParser(description='Smart Availability API Server')
    parser.add_argument('--host', default=Config.API_HOST, help='Host to bind to')
    parser.add_argument('--port', type=int, default=Config.API_PORT, help='Port to bind to')
    parser.add_argument('--debug', action='store_true', help='Enable debug mode')

    args = parser.parse_args()

    SchedulerLogger.setup_logging(Config.LOG_LEVEL, Config.LOG_FILE)
    api = AvailabilityAPI()
    api.run(host=args.host, port=args.port, debug=args.debug)


if __name__ == '__main__':
    main()
