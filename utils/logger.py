"""
Logging utilities for the Smart Availability Engine
"""
import logging
import sys
from datetime import datetime
import json
from typing import Any, Dict, Optional


class SchedulerLogger:
    """Logging setup shared by the CLI and the API server"""

    @staticmethod
    def setup_logging(log_level: str = "INFO", log_file: Optional[str] = None):
        """Setup logging configuration"""

        formatter = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        )

        root_logger = logging.getLogger()
        root_logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))
        root_logger.handlers.clear()

        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(formatter)
        root_logger.addHandler(console_handler)

        if log_file:
            file_handler = logging.FileHandler(log_file)
            file_handler.setFormatter(formatter)
            root_logger.addHandler(file_handler)

        # Suppress some noisy loggers
        logging.getLogger('urllib3').setLevel(logging.WARNING)
        logging.getLogger('werkzeug').setLevel(logging.WARNING)

        return root_logger

    @staticmethod
    def log_request_response(endpoint: str, request_data: Dict[str, Any],
                             response_data: Dict[str, Any], processing_time: float):
        """One JSON line per handled API request"""
        logger = logging.getLogger(__name__)

        snapshot = request_data.get("snapshot") or {}
        log_entry = {
            "timestamp": datetime.now().isoformat(),
            "endpoint": endpoint,
            "processing_time_seconds": round(processing_time, 4),
            "request_summary": {
                "title": request_data.get("title"),
                "start": request_data.get("startDateTime") or request_data.get("startTime"),
                "end": request_data.get("endDateTime") or request_data.get("endTime"),
                "snapshot_sizes": {key: len(value) for key, value in snapshot.items()
                                   if isinstance(value, list)},
            },
            "response_summary": {
                "status": response_data.get("status"),
                "conflicts": len(response_data.get("conflicts", [])),
                "recommendations": len(response_data.get("recommendations", [])),
            },
        }

        logger.info(f"Request processed: {json.dumps(log_entry)}")
