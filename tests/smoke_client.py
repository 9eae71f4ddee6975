"""
Smoke test client for a running Smart Availability API server
"""
import json
import requests
import time
from typing import Any, Callable, Dict, List
import logging

# Monday 2025-03-03 with a 14:30-15:30 commitment
BASE_SNAPSHOT = {
    "recurringSlots": [
        {"dayOfWeek": 0, "startTime": "09:00", "endTime": "12:00", "priority": 3},
    ],
    "dateOverrides": [],
    "exceptions": [
        {"id": "e1", "title": "Design review", "specificDate": "2025-03-03",
         "startTime": "14:30", "endTime": "15:30", "priority": 3},
    ],
    "personalTimes": [
        {"id": "p1", "title": "Sleep", "days": [4], "startTime": "23:00", "endTime": "07:00"},
    ],
}


class SmokeTestClient:
    """Exercise every endpoint once and check the response shape"""

    def __init__(self, base_url: str = "http://localhost:5000", timeout: int = 15):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.logger = logging.getLogger(__name__)

    def test_health_check(self) -> bool:
        """Test health check endpoint"""
        try:
            response = requests.get(f"{self.base_url}/health", timeout=5)
        except requests.exceptions.RequestException as e:
            self.logger.error(f"Health check error: {e}")
            return False
        if response.status_code == 200:
            self.logger.info("Health check passed")
            return True
        self.logger.error(f"Health check failed: {response.status_code}")
        return False

    def post(self, path: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        """POST a JSON payload and return a result record"""
        start_time = time.time()
        try:
            response = requests.post(
                f"{self.base_url}{path}",
                json=payload,
                timeout=self.timeout,
                headers={'Content-Type': 'application/json'}
            )
        except requests.exceptions.Timeout:
            self.logger.error(f"{path}: request timeout")
            return {"success": False, "error": "timeout", "response_time": time.time() - start_time}
        except requests.exceptions.RequestException as e:
            self.logger.error(f"{path}: request error: {e}")
            return {"success": False, "error": str(e), "response_time": time.time() - start_time}

        response_time = time.time() - start_time
        if response.status_code != 200:
            self.logger.error(f"{path}: HTTP {response.status_code}")
            return {"success": False, "error": f"HTTP {response.status_code}",
                    "response_time": response_time, "status_code": response.status_code}

        self.logger.info(f"{path}: ok (RT: {response_time:.2f}s)")
        return {"success": True, "data": response.json(), "response_time": response_time,
                "status_code": response.status_code}

    def _cases(self) -> List[Dict[str, Any]]:
        def status_is(expected: str) -> Callable[[Dict[str, Any]], bool]:
            return lambda data: data.get("status") == expected

        return [
            {
                "name": "conflicting event gets alternatives",
                "path": "/events/check",
                "payload": {"snapshot": BASE_SNAPSHOT, "title": "Sync",
                            "startDateTime": "2025-03-03T14:00:00+09:00",
                            "endDateTime": "2025-03-03T15:00:00+09:00"},
                "check": lambda data: data.get("hasConflict") and len(data.get("recommendations", [])) > 0,
            },
            {
                "name": "free event is scheduled",
                "path": "/events",
                "payload": {"snapshot": BASE_SNAPSHOT, "title": "Lunch",
                            "startDateTime": "2025-03-03T12:00:00+09:00",
                            "endDateTime": "2025-03-03T13:00:00+09:00"},
                "check": status_is("scheduled"),
            },
            {
                "name": "recurring personal time",
                "path": "/recurring",
                "payload": {"snapshot": BASE_SNAPSHOT, "title": "Gym", "days": [1, 3],
                            "startTime": "19:00", "endTime": "20:00"},
                "check": status_is("updated"),
            },
            {
                "name": "holiday toggle",
                "path": "/slots/holiday",
                "payload": {"snapshot": BASE_SNAPSHOT, "date": "2025-03-05"},
                "check": status_is("updated"),
            },
            {
                "name": "timetable combinations",
                "path": "/combinations",
                "payload": {"seed": 7, "schedules": [
                    {"title": "Math", "startTime": "09:00", "endTime": "10:00", "days": [0, 2]},
                    {"title": "Art", "startTime": "09:30", "endTime": "10:30", "days": [0]},
                    {"title": "Swim", "startTime": "18:00", "endTime": "19:00", "days": [1]},
                ]},
                "check": lambda data: len(data.get("combinations", [])) > 0,
            },
        ]

    def run_test_suite(self) -> Dict[str, Any]:
        """Run complete smoke suite"""
        results = {
            "timestamp": time.strftime("%Y-%m-%d %H:%M:%S"),
            "health_check": self.test_health_check(),
            "tests": [],
            "summary": {"total": 0, "passed": 0, "failed": 0, "avg_response_time": 0},
        }

        total_response_time = 0.0
        for i, case in enumerate(self._cases(), 1):
            self.logger.info(f"Running test {i}: {case['name']}")
            response = self.post(case["path"], case["payload"])
            passed = bool(response.get("success") and case["check"](response["data"]))

            results["tests"].append({
                "test_id": i,
                "name": case["name"],
                "success": passed,
                "response_time": response.get("response_time", 0),
                "error": response.get("error"),
            })
            results["summary"]["total"] += 1
            results["summary"]["passed" if passed else "failed"] += 1
            total_response_time += response.get("response_time", 0)

        if results["summary"]["total"] > 0:
            results["summary"]["avg_response_time"] = total_response_time / results["summary"]["total"]
        return results


def main():
    """Main test execution"""
    import argparse

    parser = argparse.ArgumentParser(description='Smart Availability smoke test client')
    parser.add_argument('--url', default='http://localhost:5000', help='API base URL')
    parser.add_argument('--output', help='Output file for test results')
    parser.add_argument('--verbose', action='store_true', help='Verbose logging')

    args = parser.parse_args()

    log_level = logging.DEBUG if args.verbose else logging.INFO
    logging.basicConfig(level=log_level, format='%(asctime)s - %(levelname)s - %(message)s')

    client = SmokeTestClient(args.url)
    print(f"Running tests against {args.url}")
    results = client.run_test_suite()

    summary = results["summary"]
    print(f"\nTest Results:")
    print(f"  Total tests: {summary['total']}")
    print(f"  Passed: {summary['passed']}")
    print(f"  Failed: {summary['failed']}")
    print(f"  Average response time: {summary['avg_response_time']:.2f}s")
    print(f"  Health check: {'✓' if results['health_check'] else '✗'}")

    if args.output:
        with open(args.output, 'w') as f:
            json.dump(results, f, indent=2)
        print(f"\nDetailed results saved to: {args.output}")


if __name__ == '__main__':
    main()
