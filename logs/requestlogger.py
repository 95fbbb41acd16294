import os
import logging
import json
from datetime import datetime, timezone

HISTORY_LIMIT = 50


def get_logger(name: str, logs_dir: str = None, timestamp: datetime = None) -> logging.Logger:
    """
    Returns a logger for a request node.
    When logs_dir is given the logger also writes to ``<logs_dir>/<name>.log``.
    """
    logger = logging.getLogger(f"suitetalk.nodes.{name}")
    logger.setLevel(logging.INFO)

    if logs_dir is None:
        return logger

    timestamp_str = (timestamp or datetime.now()).strftime("%Y%m%d_%H%M%S")
    log_file_path = os.path.join(logs_dir, f"{name}.log")

    # Remove file handlers left over from a previous setup
    for handler in list(logger.handlers):
        if isinstance(handler, logging.FileHandler):
            logger.removeHandler(handler)
            handler.close()

    fh = logging.FileHandler(log_file_path, encoding="utf-8")
    fh.setLevel(logging.INFO)
    formatter = logging.Formatter('%(asctime)s - %(levelname)s - %(message)s')
    fh.setFormatter(formatter)
    logger.addHandler(fh)

    logger.info(f"Logger initialized for {name} in {logs_dir} at {timestamp_str}")
    return logger


def setup_logging_for_request(name: str, timestamp: datetime, root: str = "logs"):
    """
    Returns the outer_logs_dir and logs_dir for one node run.
    """
    current_time = timestamp.strftime("%Y%m%d_%H%M%S")

    outer_logs_dir = os.path.join(root, "requests", name)
    os.makedirs(outer_logs_dir, exist_ok=True)

    logs_dir = os.path.join(outer_logs_dir, current_time)
    os.makedirs(logs_dir, exist_ok=True)

    return outer_logs_dir, logs_dir


def save_request_status(outer_logs_dir: str, name: str, status: dict, status_code=None):
    """
    Saves the latest node status to a JSON file, keeping earlier ones as history.
    Failures are logged, never raised: status reporting must not break a request.
    """
    status_path = os.path.join(outer_logs_dir, f"{name}_status.json")
    now = datetime.now(timezone.utc).isoformat()

    record = {
        "updated_at": now,
        "status": status,
        "status_code": status_code,
        "history": [],
    }

    try:
        if os.path.exists(status_path):
            with open(status_path, "r", encoding="utf-8") as f:
                existing = json.load(f)
            history = existing.get("history", [])
            if "status" in existing:
                history.append({
                    "updated_at": existing.get("updated_at"),
                    "status": existing["status"],
                    "status_code": existing.get("status_code"),
                })
            record["history"] = history[-HISTORY_LIMIT:]
    except Exception as e:
        logging.warning(f"Failed to read existing status to preserve history: {e}")

    try:
        os.makedirs(outer_logs_dir, exist_ok=True)
        with open(status_path, "w", encoding="utf-8") as f:
            json.dump(record, f, ensure_ascii=False, indent=4)
        logging.info(f"Status saved to {status_path}")
    except Exception as e:
        logging.error(f"Error while saving status: {e}")
    return status_path
