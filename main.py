#!/usr/bin/env python3
"""
Main entry point for the Smart Availability Engine

It can be used as a standalone server, as a one-shot CLI over JSON files,
and as a library through schedule_assistant().
"""

import sys
import json
import logging
from pathlib import Path

# Add the project directory to the Python path
sys.path.insert(0, str(Path(__file__).parent))

from config.settings import Config
from src.availability.errors import SchedulingError
from src.availability.models import ScheduleItem, parse_weekday_base
from src.availability.snapshot import ScheduleSnapshot
from src.availability.time_utils import parse_date
from src.api.flask_server import AvailabilityAPI
from src.scheduler.smart_scheduler import SmartScheduler
from utils.availability_analyzer import AvailabilityAnalyzer
from utils.logger import SchedulerLogger

logger = logging.getLogger(__name__)


def schedule_assistant(request_data):
    """
    Process one structured scheduling intent

    Args:
        request_data (dict): {"intent": ..., "snapshot": {...}, ...intent fields}

    Returns:
        dict: outcome with status, message, conflicts, recommendations and
        the updated snapshot; {"status": "error", "error": ...} when the
        request cannot be processed
    """
    scheduler = SmartScheduler()
    try:
        return scheduler.process_request(request_data)
    except SchedulingError as e:
        logger.error(f"Error in schedule_assistant: {e}")
        return {"status": "error", "error": str(e)}


def run_server(host=None, port=None):
    """Run the Flask API server"""
    logger.info("Starting Smart Availability Engine...")

    try:
        api = AvailabilityAPI()
        api.run(host=host, port=port)
    except KeyboardInterrupt:
        logger.info("Server shutdown requested")


def run_tests(api_url="http://localhost:5000"):
    """Run smoke tests against a running server"""
    from tests.smoke_client import SmokeTestClient

    logger.info(f"Running tests against {api_url}")

    client = SmokeTestClient(api_url)
    results = client.run_test_suite()

    summary = results["summary"]
    print(f"\nTest Results:")
    print(f"  Total: {summary['total']}")
    print(f"  Passed: {summary['passed']}")
    print(f"  Failed: {summary['failed']}")
    print(f"  Success rate: {(summary['passed']/summary['total']*100) if summary['total'] > 0 else 0:.1f}%")
    print(f"  Avg response time: {summary['avg_response_time']:.2f}s")

    return results


def run_combine(request_data, seed=None):
    """Generate timetable combinations from {"schedules": [...], "weekdayBase": 0}"""
    base = parse_weekday_base(request_data.get("weekdayBase"))
    items = [ScheduleItem.from_dict(record, base) for record in request_data.get("schedules", [])]
    combinations = SmartScheduler().generate_combinations(items, seed=seed)
    return {"combinations": [[item.to_dict() for item in combo] for combo in combinations]}


def run_analyze(snapshot_data, start, days):
    snapshot = ScheduleSnapshot.from_dict(snapshot_data.get("snapshot", snapshot_data))
    return AvailabilityAnalyzer(snapshot).analyze(parse_date(start), days)


def _load_json(path):
    with open(path, 'r') as f:
        return json.load(f)


def _write_json(result, output):
    if output:
        with open(output, 'w') as f:
            json.dump(result, f, indent=2, ensure_ascii=False)
    else:
        print(json.dumps(result, indent=2, ensure_ascii=False))


def main():
    """Main CLI entry point"""
    import argparse

    parser = argparse.ArgumentParser(description='Smart Availability Engine')
    parser.add_argument('--log-level', default=Config.LOG_LEVEL, help='Logging level')
    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    # Server command
    server_parser = subparsers.add_parser('server', help='Run API server')
    server_parser.add_argument('--host', default=Config.API_HOST, help='Host to bind to')
    server_parser.add_argument('--port', type=int, default=Config.API_PORT, help='Port to bind to')

    # Test command
    test_parser = subparsers.add_parser('test', help='Run smoke tests against a running server')
    test_parser.add_argument('--url', default='http://localhost:5000', help='API URL to test')

    # Process command (for single request)
    process_parser = subparsers.add_parser('process', help='Process single intent request')
    process_parser.add_argument('input_file', help='Input JSON file')
    process_parser.add_argument('--output', help='Output JSON file')

    # Combine command
    combine_parser = subparsers.add_parser('combine', help='Generate timetable combinations')
    combine_parser.add_argument('input_file', help='Input JSON file with "schedules"')
    combine_parser.add_argument('--seed', type=int, help='Random seed for reproducible output')
    combine_parser.add_argument('--output', help='Output JSON file')

    # Analyze command
    analyze_parser = subparsers.add_parser('analyze', help='Report free time over several days')
    analyze_parser.add_argument('snapshot_file', help='Snapshot JSON file')
    analyze_parser.add_argument('--start', required=True, help='First date (YYYY-MM-DD)')
    analyze_parser.add_argument('--days', type=int, default=7, help='Number of days to analyze (default: 7)')
    analyze_parser.add_argument('--json', action='store_true', help='Output as JSON instead of formatted text')

    args = parser.parse_args()
    SchedulerLogger.setup_logging(log_level=args.log_level, log_file=Config.LOG_FILE)

    if args.command == 'server':
        run_server(host=args.host, port=args.port)

    elif args.command == 'test':
        run_tests(api_url=args.url)

    elif args.command == 'process':
        _write_json(schedule_assistant(_load_json(args.input_file)), args.output)

    elif args.command == 'combine':
        _write_json(run_combine(_load_json(args.input_file), seed=args.seed), args.output)

    elif args.command == 'analyze':
        analysis = run_analyze(_load_json(args.snapshot_file), args.start, args.days)
        if args.json:
            _write_json(analysis, None)
        else:
            AvailabilityAnalyzer.display(analysis)

    else:
        parser.print_help()


if __name__ == '__main__':
    main()
