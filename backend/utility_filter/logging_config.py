"""
Structured Logging System
=========================
Structured logging for scoring observability and calibration.

This module provides:
- Structured JSON logging for machine-parseable outputs
- Specialized loggers for scores, decisions and the HTTP API
- Log files organized by log type and experiment
- Helpers to read score logs back for calibration analysis

Usage:
    from utility_filter.logging_config import get_utility_logger, log_video_score

    # Get specialized loggers
    logger = get_utility_logger("scoring")
    logger.info("Scored video", extra={"video_id": "...", "score": 72.4})

    # Convenience functions
    log_video_score(video_id, score_result)
    log_scoring_decision(decision_type, details)
"""

import sys
import json
import logging
import threading
from datetime import datetime
from pathlib import Path
from typing import Optional, Dict, Any, Union

from .config import get_config


# Attributes present on every LogRecord; everything else came in via extra={}
_RESERVED_ATTRS = frozenset((
    'name', 'msg', 'args', 'created', 'filename', 'funcName', 'levelname',
    'levelno', 'lineno', 'module', 'msecs', 'pathname', 'process',
    'processName', 'relativeCreated', 'stack_info', 'exc_info', 'exc_text',
    'thread', 'threadName', 'taskName', 'message',
))


def _extra_fields(record: logging.LogRecord) -> Dict[str, Any]:
    """Fields attached through extra={} or a LoggerAdapter."""
    return {
        key: value for key, value in record.__dict__.items()
        if key not in _RESERVED_ATTRS
    }


# =============================================================================
# CUSTOM FORMATTERS
# =============================================================================

class StructuredFormatter(logging.Formatter):
    """
    One JSON object per line, extras flattened to the top level.

    Example line in logs/scores/:
        {"timestamp": "...", "level": "INFO", "logger": "utility.scores",
         "message": "Scored video abc123: 43.9", "video_id": "abc123",
         "score": 43.9, "tier": "red", ...}

    Values json cannot encode are written as their str().
    """

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.fromtimestamp(record.created).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        entry.update(_extra_fields(record))

        if record.exc_info:
            entry['exception'] = self.formatException(record.exc_info)

        return json.dumps(entry, default=str)


class ConsoleFormatter(logging.Formatter):
    """
    Single-line console output: [LEVEL] logger: message (key=value, ...)

    Only scalar extras are shown; component dicts and weight tables go to
    the JSONL files.
    """

    LEVEL_COLORS = {
        logging.DEBUG: '\033[2m',      # Dim
        logging.INFO: '\033[32m',      # Green
        logging.WARNING: '\033[33m',   # Yellow
        logging.ERROR: '\033[1;31m',   # Bold red
        logging.CRITICAL: '\033[1;35m',
    }
    RESET = '\033[0m'

    def __init__(self, use_colors: bool = True):
        super().__init__()
        self.use_colors = use_colors and sys.stderr.isatty()

    def format(self, record: logging.LogRecord) -> str:
        level = record.levelname
        color = self.LEVEL_COLORS.get(record.levelno)
        if self.use_colors and color:
            level = f"{color}{level}{self.RESET}"

        line = f"[{level}] {record.name}: {record.getMessage()}"

        shown = [
            f"{key}={value}"
            for key, value in _extra_fields(record).items()
            if isinstance(value, (str, int, float, bool))
        ]
        if shown:
            line = f"{line} ({', '.join(shown)})"

        if record.exc_info:
            line = f"{line}\n{self.formatException(record.exc_info)}"

        return line


# =============================================================================
# LOGGER FACTORY
# =============================================================================

_loggers: Dict[str, logging.Logger] = {}
_loggers_lock = threading.Lock()


def get_experiment_log_path(
    experiment_name: str,
    log_type: str = "scores"
) -> Path:
    """Today's JSONL file for a log type: logs/<type>/<experiment>_<YYYYMMDD>.jsonl"""
    day = datetime.now().strftime("%Y%m%d")
    return get_config().paths.logs / log_type / f"{experiment_name}_{day}.jsonl"


def get_utility_logger(
    name: str,
    log_to_file: bool = True,
    experiment_name: Optional[str] = None
) -> logging.Logger:
    """
    Get or create the logger "utility.<name>".

    Loggers are cached per name, so handlers are attached only once. The
    level comes from experiment.log_level; a JSONL file handler is added
    when both log_to_file and experiment.log_to_file are set.

    Args:
        name: Logger name, also the log subdirectory ("scores", "decisions", ...)
        log_to_file: Whether to write JSONL logs to file
        experiment_name: Overrides experiment.experiment_name in the file name

    Returns:
        Configured logger instance
    """
    full_name = f"utility.{name}"
    with _loggers_lock:
        if full_name not in _loggers:
            _loggers[full_name] = _build_logger(full_name, name, log_to_file, experiment_name)
        return _loggers[full_name]


def _build_logger(
    full_name: str,
    name: str,
    log_to_file: bool,
    experiment_name: Optional[str]
) -> logging.Logger:
    """Attach handlers to a fresh logger; called once per name under the lock."""
    config = get_config()
    logger = logging.getLogger(full_name)
    logger.setLevel(getattr(logging, config.experiment.log_level.upper(), logging.INFO))
    logger.propagate = False

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(ConsoleFormatter())
    logger.addHandler(console_handler)

    if log_to_file and config.experiment.log_to_file:
        log_file = get_experiment_log_path(
            experiment_name or config.experiment.experiment_name,
            log_type=name
        )
        log_file.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_file, mode='a', encoding='utf-8')
        file_handler.setFormatter(StructuredFormatter())
        logger.addHandler(file_handler)

    return logger


def get_score_logger() -> logging.Logger:
    """Get a logger for per-video scores."""
    return get_utility_logger("scores")


def get_decision_logger() -> logging.Logger:
    """Get a logger for batch-level decisions (rankings, strategy comparisons)."""
    return get_utility_logger("decisions")


def get_api_logger(request_id: Optional[str] = None) -> Union[logging.Logger, logging.LoggerAdapter]:
    """Get a logger for the HTTP layer."""
    logger = get_utility_logger("api", log_to_file=False)
    if request_id:
        logger = logging.LoggerAdapter(logger, {'request_id': request_id})
    return logger


# =============================================================================
# CONVENIENCE LOGGING FUNCTIONS
# =============================================================================

def log_video_score(
    video_id: Optional[str],
    score: float,
    tier: str,
    confidence: str,
    components: Dict[str, float] = None,
    slop_flag: bool = False,
    method: str = "pareto_utility",
    logger: Optional[logging.Logger] = None
) -> None:
    """
    Log the score computed for a video.

    Args:
        video_id: Video identifier (None when scoring anonymous signals)
        score: Final score in [0, 100]
        tier: Tier value ("green", "yellow", "red")
        confidence: Confidence value
        components: Component values (approval, velocity, ...)
        slop_flag: Whether the anti-bot floor fired
        method: Scoring strategy used
        logger: Optional logger override
    """
    config = get_config()
    if not config.experiment.log_scores:
        return

    log = logger or get_score_logger()
    log.info(
        f"Scored video {video_id or '<anonymous>'}: {score:.1f}",
        extra={
            'video_id': video_id,
            'score': score,
            'tier': tier,
            'confidence': confidence,
            'components': components or {},
            'slop_flag': slop_flag,
            'method': method
        }
    )


def log_scoring_decision(
    decision_type: str,
    details: Dict[str, Any],
    request_id: Optional[str] = None,
    logger: Optional[logging.Logger] = None
) -> None:
    """
    Log a batch-level scoring decision.

    Args:
        decision_type: Type of decision (e.g., "ranking_complete")
        details: Decision details
        request_id: Optional request identifier
        logger: Optional logger override
    """
    config = get_config()
    if not config.experiment.log_decisions:
        return

    log = logger or get_decision_logger()
    extra = {
        'decision_type': decision_type,
        'details': details
    }
    if request_id:
        extra['request_id'] = request_id

    log.info(f"Decision: {decision_type}", extra=extra)


# =============================================================================
# LOG FILE UTILITIES
# =============================================================================

def read_log_file(log_path: Union[str, Path]) -> list:
    """
    Read a JSONL log file and return list of log entries.

    Lines that are not valid JSON are skipped.

    Args:
        log_path: Path to the log file

    Returns:
        List of parsed log entry dictionaries
    """
    entries = []
    with open(log_path, 'r', encoding='utf-8') as f:
        for line in f:
            line = line.strip()
            if line:
                try:
                    entries.append(json.loads(line))
                except json.JSONDecodeError:
                    continue
    return entries


def get_score_logs_for_video(video_id: str) -> list:
    """Get all score log entries for a specific video."""
    log_dir = get_config().paths.logs / "scores"
    if not log_dir.exists():
        return []

    entries = []
    for log_file in sorted(log_dir.glob("*.jsonl")):
        for entry in read_log_file(log_file):
            if entry.get('video_id') == video_id:
                entries.append(entry)

    return entries
