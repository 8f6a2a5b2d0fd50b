"""Tests for outcome and target models."""

import pytest
from pydantic import ValidationError

from cluster_readiness.exceptions import ConfigurationError, ProbeError
from cluster_readiness.readiness import Outcome, OutcomeStatus, Target


class TestOutcome:
    """Test Outcome model."""

    def test_success(self):
        """Test creating a successful outcome."""
        outcome = Outcome.success()

        assert outcome.status == OutcomeStatus.SUCCESS
        assert outcome.is_success
        assert outcome.reason is None
        assert outcome.cause is None

    def test_failure_carries_reason(self):
        """Test failure carries reason."""
        outcome = Outcome.failure("port closed", check_name="postgres")

        assert outcome.status == OutcomeStatus.FAILURE
        assert not outcome.is_success
        assert outcome.reason == "port closed"
        assert outcome.check_name == "postgres"

    def test_error_keeps_cause(self):
        """Test error keeps cause."""
        cause = ConnectionRefusedError("connection refused")
        outcome = Outcome.error(cause)

        assert outcome.status == OutcomeStatus.ERROR
        assert outcome.cause is cause
        assert outcome.reason == "ConnectionRefusedError: connection refused"

    def test_outcome_is_frozen(self):
        """Test outcome is frozen."""
        outcome = Outcome.failure("nope")

        with pytest.raises(ValidationError):
            outcome.reason = "changed"

    def test_cause_excluded_from_dump(self):
        """Test cause excluded from dump."""
        outcome = Outcome.error(ValueError("boom"), check_name="x")

        assert "cause" not in outcome.model_dump()

    def test_attributed_to_sets_missing_name(self):
        """Test attributed to sets missing name."""
        outcome = Outcome.failure("nope").attributed_to("http")

        assert outcome.check_name == "http"

    def test_attributed_to_keeps_existing_name(self):
        """Test attributed to keeps existing name."""
        outcome = Outcome.failure("nope", check_name="inner").attributed_to("outer")

        assert outcome.check_name == "inner"

    def test_describe(self):
        """Test the one-line diagnostic of an outcome."""
        assert Outcome.failure("port closed", check_name="db").describe() == "[db] port closed"
        assert Outcome.failure("port closed").describe() == "port closed"
        assert Outcome.success(check_name="db").describe() == "[db] ready"
        assert Outcome(status=OutcomeStatus.FAILURE).describe() == "not ready"

    def test_str(self):
        """Test string representation of an outcome."""
        assert str(Outcome.failure("port closed", check_name="db")) == "failure: [db] port closed"


class TestOutcomeOnResultOf:
    """Test mapping an attempt onto an outcome."""

    def test_truthy_result_is_success(self):
        """Test truthy result is success."""
        assert Outcome.on_result_of(lambda: True).is_success

    def test_falsy_result_is_failure(self):
        """Test falsy result is failure."""
        outcome = Outcome.on_result_of(lambda: False)

        assert outcome.status == OutcomeStatus.FAILURE
        assert outcome.reason == "Attempt to complete health check failed"

    def test_exception_is_error(self):
        """Test exception is error."""
        error = OSError("no route to host")

        def attempt():
            raise error

        outcome = Outcome.on_result_of(attempt)

        assert outcome.status == OutcomeStatus.ERROR
        assert outcome.cause is error


class TestTarget:
    """Test Target model."""

    def test_address(self):
        """Test target address and string representation."""
        target = Target(name="db", host="localhost", port=5432)

        assert target.address == "localhost:5432"
        assert str(target) == "db@localhost:5432"

    def test_in_format(self):
        """Test substituting host and port placeholders."""
        target = Target(name="selenium", host="127.0.0.1", port=4444)

        assert target.in_format("http://$HOST:$EXTERNAL_PORT/wd/hub") == "http://127.0.0.1:4444/wd/hub"

    def test_in_format_without_placeholders(self):
        """Test in format without placeholders."""
        target = Target(name="selenium", host="127.0.0.1", port=4444)

        assert target.in_format("http://example.com") == "http://example.com"

    def test_in_format_unknown_placeholder(self):
        """Test in format unknown placeholder."""
        target = Target(name="selenium", host="127.0.0.1", port=4444)

        with pytest.raises(ProbeError, match=r"\$INTERNAL_PORT"):
            target.in_format("$HOST:$INTERNAL_PORT")

    def test_invalid_port_rejected(self):
        """Test invalid port rejected."""
        with pytest.raises(ValidationError):
            Target(name="db", host="localhost", port=70000)

    def test_parse(self):
        """Test building a target from a host:port string."""
        target = Target.parse("db", "db.internal:5432")

        assert target == Target(name="db", host="db.internal", port=5432)

    @pytest.mark.parametrize("address", ["localhost", "localhost:", ":5432", "localhost:abc", "localhost:99999"])
    def test_parse_malformed(self, address):
        """Test that malformed addresses are rejected."""
        with pytest.raises(ConfigurationError, match="Malformed address for service 'db'"):
            Target.parse("db", address)
