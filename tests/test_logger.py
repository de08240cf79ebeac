"""
Tests for application logging and the audit trail.
"""

from timber_market.models import ActionType, Actor, Outcome
from timber_market.utils import AuditLogger, get_audit_logger, get_logger


class TestGetLogger:
    """Loggers under the timber_market root."""

    def test_named_loggers_are_children(self):
        assert get_logger().name == "timber_market"
        assert get_logger("stock_service").name == "timber_market.stock_service"

    def test_messages_reach_the_log_file(self, tmp_path):
        get_logger("stock_service").warning("stock listing rejected")

        log_file = tmp_path / "logs" / "timber_market.log"
        assert "stock listing rejected" in log_file.read_text(encoding="utf-8")


class TestAuditLogger:
    """Audit rows in the database."""

    def test_without_database(self):
        audit = AuditLogger()
        log_id = audit.log_action(ActionType.COMPANY_ADDED, Actor.ADMIN)

        assert log_id
        assert audit.get_recent_entries() == []

    def test_log_action_is_stored(self, db_manager):
        audit = get_audit_logger(db_manager)
        log_id = audit.log_action(
            ActionType.STOCK_STATUS_CHANGED,
            Actor.ADMIN,
            details={"from": "available", "to": "sold"},
            outcome=Outcome.FAILURE,
            record_id="STK-1718000000000-3fa29c1e",
            error_message="listing locked",
        )

        [entry] = audit.get_entries_for_record("STK-1718000000000-3fa29c1e")
        assert entry.log_id == log_id
        assert entry.details == {"from": "available", "to": "sold"}
        assert entry.outcome == Outcome.FAILURE
        assert "Error: listing locked" in entry.to_readable_string()

    def test_recent_entries_newest_first(self, db_manager):
        audit = get_audit_logger(db_manager)
        first = audit.log_action(ActionType.DEMAND_SUBMITTED, Actor.CUSTOMER)
        second = audit.log_action(ActionType.AI_REQUEST, Actor.LLM, details={"feature": "price"})

        entries = audit.get_recent_entries(limit=10)
        assert [e.log_id for e in entries] == [second, first]
        assert audit.get_recent_entries(limit=1)[0].action_type == ActionType.AI_REQUEST
