"""Tests for cluster providers and service-bound checks."""

from unittest.mock import Mock

import pytest

from cluster_readiness.exceptions import ConfigurationError, TargetNotFoundError
from cluster_readiness.readiness import (
    ClusterProvider,
    Outcome,
    OutcomeStatus,
    ServiceHealthCheck,
    StaticCluster,
    Target,
    all_of,
    any_of,
    health_check,
    service_health_check,
)

DB = Target(name="db", host="localhost", port=5432)
WEB = Target(name="web", host="localhost", port=8080)


class TestStaticCluster:
    """Test StaticCluster provider."""

    def test_resolve(self):
        """Test resolving known services."""
        cluster = StaticCluster([DB, WEB])

        assert cluster.resolve("db") == DB
        assert cluster.names == ["db", "web"]

    def test_unknown_service(self):
        """Test unknown service."""
        cluster = StaticCluster([DB, WEB])

        with pytest.raises(TargetNotFoundError, match="Service not found in cluster: cache") as exc_info:
            cluster.resolve("cache")

        assert exc_info.value.name == "cache"
        assert exc_info.value.known == ["db", "web"]

    def test_from_addresses(self):
        """Test from addresses."""
        cluster = StaticCluster.from_addresses({"db": "localhost:5432", "web": "localhost:8080"})

        assert cluster.resolve("web") == WEB

    def test_from_addresses_malformed(self):
        """Test from addresses malformed."""
        with pytest.raises(ConfigurationError):
            StaticCluster.from_addresses({"db": "localhost"})

    def test_from_settings(self, monkeypatch: pytest.MonkeyPatch):
        """Test building a cluster from the services setting."""
        monkeypatch.setenv("CLUSTER_READINESS_SERVICES", '{"db": "db.internal:5432"}')

        cluster = StaticCluster.from_settings()

        assert cluster.resolve("db") == Target(name="db", host="db.internal", port=5432)


class TestServiceHealthCheck:
    """Test checks bound to a named service."""

    def test_resolves_service_and_delegates(self):
        """Test resolves service and delegates."""
        seen = []

        def accepts_connections(target):
            seen.append(target)
            return True

        check = service_health_check("db", accepts_connections)
        outcome = check.evaluate(StaticCluster([DB, WEB]))

        assert outcome.is_success
        assert seen == [DB]

    def test_outcome_names_service_and_check(self):
        """Test outcome names service and check."""
        check = ServiceHealthCheck("db", health_check(lambda target: Outcome.failure("port closed"), name="port_open"))

        outcome = check.evaluate(StaticCluster([DB]))

        assert outcome.status == OutcomeStatus.FAILURE
        assert outcome.check_name == "db:port_open"
        assert outcome.describe() == "[db:port_open] port closed"

    def test_resolves_on_every_attempt(self):
        """Test resolves on every attempt."""
        cluster = Mock(spec=ClusterProvider)
        cluster.resolve.return_value = DB
        check = service_health_check("db", lambda target: True)

        check.evaluate(cluster)
        check.evaluate(cluster)

        assert cluster.resolve.call_count == 2

    def test_unknown_service_is_error_outcome(self):
        """Test unknown service is error outcome."""
        outcome = service_health_check("cache", lambda target: True).evaluate(StaticCluster([DB]))

        assert outcome.status == OutcomeStatus.ERROR
        assert isinstance(outcome.cause, TargetNotFoundError)

    def test_services(self):
        """Test services needed by a service-bound check."""
        assert service_health_check("db", lambda target: True).services == frozenset({"db"})

    def test_composite_services(self):
        """Test composite services."""
        check = all_of(
            service_health_check("db", lambda target: True),
            any_of(service_health_check("web", lambda target: True), service_health_check("api", lambda target: True)),
        )

        assert check.services == frozenset({"db", "web", "api"})

    def test_any_of_names_last_failing_service(self):
        """Test any of names last failing service."""
        check = any_of(
            service_health_check("web1", lambda target: False),
            service_health_check("web2", lambda target: False),
        )
        cluster = StaticCluster.from_addresses({"web1": "localhost:8081", "web2": "localhost:8082"})

        outcome = check.evaluate(cluster)

        assert outcome.status == OutcomeStatus.FAILURE
        assert outcome.check_name == "web2:<lambda>"


class TestResolveServices:
    """Test up-front service resolution of checks."""

    def test_plain_check_accepts_any_cluster(self):
        """Test that a check needing no service resolves nothing."""
        cluster = Mock(spec=ClusterProvider)

        health_check(lambda target: True).resolve_services(cluster)

        cluster.resolve.assert_not_called()

    def test_service_check_requires_service(self):
        """Test that a service-bound check fails on an unknown service."""
        with pytest.raises(TargetNotFoundError, match="cache"):
            service_health_check("cache", lambda target: True).resolve_services(StaticCluster([DB]))

    def test_all_of_requires_every_service(self):
        """Test that all-of fails when any one service is unknown."""
        check = all_of(service_health_check("db", lambda target: True), service_health_check("cache", lambda target: True))

        with pytest.raises(TargetNotFoundError, match="cache"):
            check.resolve_services(StaticCluster([DB, WEB]))

    def test_any_of_requires_one_service(self):
        """Test that any-of passes when at least one alternative is known."""
        check = any_of(service_health_check("cache", lambda target: True), service_health_check("web", lambda target: True))

        check.resolve_services(StaticCluster([DB, WEB]))

    def test_any_of_with_no_known_service(self):
        """Test that any-of reports the last unknown alternative."""
        check = any_of(service_health_check("cache1", lambda target: True), service_health_check("cache2", lambda target: True))

        with pytest.raises(TargetNotFoundError, match="cache2"):
            check.resolve_services(StaticCluster([DB, WEB]))

    def test_nested_composites(self):
        """Test that resolution follows the policy of each nested composite."""
        check = all_of(
            service_health_check("db", lambda target: True),
            any_of(service_health_check("cache", lambda target: True), service_health_check("web", lambda target: True)),
        )

        check.resolve_services(StaticCluster([DB, WEB]))
