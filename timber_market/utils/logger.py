"""
Logging for the timber marketplace.

All application loggers hang off the "timber_market" logger, which writes
everything to a rotating file and INFO-and-up (configurable) to stdout.
Marketplace actions additionally go to the audit_log table via AuditLogger.
"""

import json
import logging
import sys
from datetime import datetime
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import List, Optional

from ..config.config_manager import get_config_manager
from ..models.audit_log import ActionType, Actor, AuditLog, Outcome

ROOT_LOGGER_NAME = "timber_market"

FILE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(filename)s:%(lineno)d - %(message)s"
CONSOLE_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"


class MarketLogger:
    """
    Owns the handlers of the package root logger.

    Settings come from the "logging" config section: log_dir, level,
    max_file_size_mb and backup_count.
    """

    def __init__(
        self,
        name: str = ROOT_LOGGER_NAME,
        log_dir: Optional[str] = None,
        log_file: str = "timber_market.log"
    ) -> None:
        config = get_config_manager()
        self.name = name
        self.log_dir = Path(log_dir or config.get("logging.log_dir", "logs"))
        self.log_dir.mkdir(parents=True, exist_ok=True)
        self.log_file = self.log_dir / log_file

        self.logger = logging.getLogger(name)
        self.logger.setLevel(logging.DEBUG)
        self.close()

        self.logger.addHandler(self._file_handler(
            max_bytes=config.get("logging.max_file_size_mb", 10) * 1024 * 1024,
            backup_count=config.get("logging.backup_count", 5),
        ))
        self.logger.addHandler(self._console_handler(config.get("logging.level", "INFO")))

    def _file_handler(self, max_bytes: int, backup_count: int) -> logging.Handler:
        handler = RotatingFileHandler(
            self.log_file,
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding="utf-8"
        )
        handler.setLevel(logging.DEBUG)
        handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
        return handler

    def _console_handler(self, level: str) -> logging.Handler:
        handler = logging.StreamHandler(sys.stdout)
        handler.setLevel(getattr(logging, str(level).upper(), logging.INFO))
        handler.setFormatter(logging.Formatter(CONSOLE_FORMAT, datefmt="%H:%M:%S"))
        return handler

    def get_logger(self, name: Optional[str] = None) -> logging.Logger:
        """The root logger, or the child called name."""
        if not name or name == self.name:
            return self.logger
        return self.logger.getChild(name)

    def close(self) -> None:
        """Close and detach all handlers."""
        for handler in list(self.logger.handlers):
            handler.close()
            self.logger.removeHandler(handler)


class AuditLogger:
    """
    Records marketplace actions in the audit_log table.

    Every entry is mirrored to the file log. Without a database manager only
    the file log is written and the query methods return empty lists.
    """

    def __init__(self, db_manager=None) -> None:
        self.db_manager = db_manager
        self.file_logger = get_logger("audit")

    def log_action(
        self,
        action_type: ActionType,
        actor: Actor,
        details: Optional[dict] = None,
        outcome: Outcome = Outcome.SUCCESS,
        record_id: Optional[str] = None,
        company_id: Optional[str] = None,
        error_message: Optional[str] = None
    ) -> str:
        """
        Record one action.

        Args:
            action_type: What happened
            actor: Who did it
            details: Free-form context, stored as JSON
            outcome: success, failure or pending
            record_id: Demand or stock item the action concerns
            company_id: Company the action concerns
            error_message: Reason for a failure

        Returns:
            The new entry's log_id
        """
        entry = AuditLog(
            action_type=action_type,
            actor=actor,
            details=details or {},
            outcome=outcome,
            record_id=record_id,
            company_id=company_id,
            error_message=error_message,
        )
        self.file_logger.info(f"AUDIT: {entry.to_readable_string()}")

        if self.db_manager:
            try:
                self._insert(entry)
            except Exception as e:
                self.file_logger.error(f"Failed to write audit log to database: {e}")

        return entry.log_id

    def _insert(self, entry: AuditLog) -> None:
        self.db_manager.execute_update(
            """
            INSERT INTO audit_log
            (log_id, timestamp, action_type, actor, details, outcome,
             record_id, company_id, error_message)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                entry.log_id,
                entry.timestamp.isoformat(),
                entry.action_type.value,
                entry.actor.value,
                json.dumps(entry.details, default=str),
                entry.outcome.value,
                entry.record_id,
                entry.company_id,
                entry.error_message,
            )
        )

    def _select(self, where: str = "", params: tuple = (), limit: int = 100) -> List[dict]:
        if not self.db_manager:
            return []
        rows = self.db_manager.execute_query(
            f"SELECT * FROM audit_log {where} ORDER BY timestamp DESC LIMIT ?",
            params + (limit,)
        )
        return [dict(row) for row in rows]

    def get_recent_logs(self, limit: int = 100) -> List[dict]:
        """Newest audit rows as plain dicts, details still JSON text."""
        return self._select(limit=limit)

    def get_logs_for_record(self, record_id: str, limit: int = 100) -> List[dict]:
        """Newest audit rows for one demand or stock item."""
        return self._select("WHERE record_id = ?", (record_id,), limit)

    def get_recent_entries(self, limit: int = 100) -> List[AuditLog]:
        return [_to_entry(row) for row in self.get_recent_logs(limit)]

    def get_entries_for_record(self, record_id: str, limit: int = 100) -> List[AuditLog]:
        return [_to_entry(row) for row in self.get_logs_for_record(record_id, limit)]


def _to_entry(row: dict) -> AuditLog:
    return AuditLog(
        **{key: row[key] for key in row if key not in ("timestamp", "details")},
        timestamp=datetime.fromisoformat(row["timestamp"]),
        details=json.loads(row["details"]) if row["details"] else {},
    )


_logger: Optional[MarketLogger] = None
_audit_logger: Optional[AuditLogger] = None


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """
    Get an application logger.

    Args:
        name: Optional child name under the timber_market logger

    Returns:
        Logger instance
    """
    global _logger
    if _logger is None:
        _logger = MarketLogger()
    return _logger.get_logger(name)


def get_audit_logger(db_manager=None) -> AuditLogger:
    """
    Process-wide AuditLogger.

    Passing a db_manager attaches it, replacing any previously attached one.
    """
    global _audit_logger
    if _audit_logger is None:
        _audit_logger = AuditLogger(db_manager)
    elif db_manager is not None:
        _audit_logger.db_manager = db_manager
    return _audit_logger


def reset_loggers() -> None:
    """Close handlers and forget the global loggers (used by tests)."""
    global _logger, _audit_logger
    if _logger is not None:
        _logger.close()
    _logger = None
    _audit_logger = None
