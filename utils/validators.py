"""
Validation utilities for the Smart Availability Engine
"""
import re
from typing import Dict, Any, List

from src.availability.errors import SchedulingError
from src.availability.time_utils import parse_date, parse_datetime, parse_end_time, parse_time_of_day

SNAPSHOT_KEYS = ("recurringSlots", "dateOverrides", "exceptions", "personalTimes")


class RequestValidator:
    """Validator for incoming scheduling requests"""

    @staticmethod
    def validate_time_of_day(text: str, allow_end_of_day: bool = False) -> bool:
        try:
            (parse_end_time if allow_end_of_day else parse_time_of_day)(text)
            return True
        except SchedulingError:
            return False

    @staticmethod
    def validate_date(text: str) -> bool:
        try:
            parse_date(text)
            return True
        except SchedulingError:
            return False

    @staticmethod
    def validate_datetime(text: str) -> bool:
        try:
            parse_datetime(text)
            return True
        except SchedulingError:
            return False

    @staticmethod
    def validate_snapshot_structure(snapshot: Any) -> List[str]:
        """Check the snapshot container shape; record contents are checked while parsing"""
        errors = []
        if snapshot is None:
            return errors
        if not isinstance(snapshot, dict):
            return ["'snapshot' must be an object"]

        for key in SNAPSHOT_KEYS:
            if key in snapshot and not isinstance(snapshot[key], list):
                errors.append(f"'snapshot.{key}' must be a list")
            elif key in snapshot:
                for i, record in enumerate(snapshot[key]):
                    if not isinstance(record, dict):
                        errors.append(f"'snapshot.{key}[{i}]' must be an object")
        return errors

    @staticmethod
    def validate_event_request(request_data: Dict[str, Any]) -> List[str]:
        """Validate an event request and return list of errors"""
        errors = []

        start = request_data.get("startDateTime") or request_data.get("startTime")
        end = request_data.get("endDateTime") or request_data.get("endTime")
        for name, value in (("startDateTime", start), ("endDateTime", end)):
            if value is None:
                errors.append(f"Missing required field: {name}")
            elif not RequestValidator.validate_datetime(value):
                errors.append(f"Invalid {name}: {value}. Expected: YYYY-MM-DDTHH:MM:SS+HH:MM")

        if "title" in request_data and not isinstance(request_data["title"], str):
            errors.append("'title' must be a string")

        errors.extend(RequestValidator.validate_snapshot_structure(request_data.get("snapshot")))
        return errors

    @staticmethod
    def validate_recurring_request(request_data: Dict[str, Any]) -> List[str]:
        errors = []
        if not RequestValidator.validate_time_of_day(request_data.get("startTime")):
            errors.append(f"Invalid startTime: {request_data.get('startTime')}. Expected: HH:MM")
        if not RequestValidator.validate_time_of_day(request_data.get("endTime"), allow_end_of_day=True):
            errors.append(f"Invalid endTime: {request_data.get('endTime')}. Expected: HH:MM")

        days = request_data.get("days", request_data.get("weekdays"))
        if not days and not request_data.get("specificDate"):
            errors.append("Missing required field: days (or specificDate)")
        elif days is not None and not isinstance(days, list):
            errors.append("'days' must be a list")

        errors.extend(RequestValidator.validate_snapshot_structure(request_data.get("snapshot")))
        return errors

    @staticmethod
    def validate_date_range(request_data: Dict[str, Any]) -> List[str]:
        errors = []
        for field in ("startDate", "endDate"):
            if field not in request_data:
                errors.append(f"Missing required field: {field}")
            elif not RequestValidator.validate_date(request_data[field]):
                errors.append(f"Invalid {field}: {request_data[field]}. Expected: YYYY-MM-DD")
        errors.extend(RequestValidator.validate_snapshot_structure(request_data.get("snapshot")))
        return errors


class DataSanitizer:
    """Sanitize and clean input data"""

    @staticmethod
    def sanitize_text(text: str) -> str:
        """Sanitize text content"""
        # Remove excessive whitespace
        text = re.sub(r'\s+', ' ', text.strip())
        # Remove markup characters
        text = re.sub(r'[<>]', '', text)
        return text

    @staticmethod
    def sanitize_request(request_data: Dict[str, Any]) -> Dict[str, Any]:
        """Sanitize free-text fields of a request and of the snapshot records it carries"""
        sanitized = DataSanitizer._sanitize_fields(request_data)

        snapshot = sanitized.get("snapshot")
        if isinstance(snapshot, dict):
            snapshot = snapshot.copy()
            for key in SNAPSHOT_KEYS:
                if isinstance(snapshot.get(key), list):
                    snapshot[key] = [DataSanitizer._sanitize_fields(r) if isinstance(r, dict) else r
                                     for r in snapshot[key]]
            sanitized["snapshot"] = snapshot

        return sanitized

    @staticmethod
    def _sanitize_fields(record: Dict[str, Any]) -> Dict[str, Any]:
        cleaned = record.copy()
        for field in ("title", "location"):
            if isinstance(cleaned.get(field), str):
                cleaned[field] = DataSanitizer.sanitize_text(cleaned[field])
        return cleaned
