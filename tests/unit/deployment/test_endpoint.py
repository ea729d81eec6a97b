"""Tests for endpoint recreation, traffic cutover and smoke-test invocation."""

import logging
from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest
from azure.core.exceptions import (
    HttpResponseError,
    ResourceNotFoundError,
    ServiceRequestError,
    ServiceResponseError,
)

from deployment.endpoint import (
    build_endpoint,
    ensure_clean_endpoint,
    invoke_endpoint,
    shift_traffic,
)
from deployment.errors import EndpointOperationError, TrafficUpdateError


def _done_poller(result=None):
    poller = MagicMock()
    poller.done.return_value = True
    poller.result.return_value = result
    return poller


class TestBuildEndpoint:
    """Tests for build_endpoint function."""

    def test_binds_user_assigned_identity(self):
        endpoint = build_endpoint("endpoint-a", "desc", "/uai/one")

        assert endpoint.name == "endpoint-a"
        assert endpoint.description == "desc"
        assert endpoint.auth_mode == "key"
        assert endpoint.identity.type == "user_assigned"
        assert [i.resource_id for i in endpoint.identity.user_assigned_identities] == [
            "/uai/one"
        ]


class TestEnsureCleanEndpoint:
    """Tests for ensure_clean_endpoint function."""

    def test_missing_endpoint_is_created(self):
        ml_client = MagicMock()
        ml_client.online_endpoints.get.side_effect = ResourceNotFoundError(message="nope")
        ml_client.online_endpoints.begin_create_or_update.return_value = _done_poller("created")

        result = ensure_clean_endpoint(ml_client, "endpoint-a", "desc", "/uai/one")

        assert result == "created"
        ml_client.online_endpoints.begin_delete.assert_not_called()
        endpoint = ml_client.online_endpoints.begin_create_or_update.call_args[0][0]
        assert endpoint.name == "endpoint-a"

    def test_existing_endpoint_deleted_before_create(self):
        ml_client = MagicMock()
        order = []
        ml_client.online_endpoints.begin_delete.side_effect = (
            lambda name: order.append("delete") or _done_poller()
        )
        ml_client.online_endpoints.begin_create_or_update.side_effect = (
            lambda endpoint: order.append("create") or _done_poller("created")
        )

        ensure_clean_endpoint(ml_client, "endpoint-a", "desc", "/uai/one", timeout=60)

        assert order == ["delete", "create"]
        ml_client.online_endpoints.begin_delete.assert_called_once_with(name="endpoint-a")

    def test_delete_waits_for_completion(self):
        ml_client = MagicMock()
        delete_poller = _done_poller()
        ml_client.online_endpoints.begin_delete.return_value = delete_poller
        ml_client.online_endpoints.begin_create_or_update.return_value = _done_poller()

        ensure_clean_endpoint(ml_client, "endpoint-a", "desc", "/uai/one", timeout=60)

        delete_poller.wait.assert_called_once_with(timeout=60)

    def test_lookup_failure_aborts(self):
        ml_client = MagicMock()
        ml_client.online_endpoints.get.side_effect = HttpResponseError(message="throttled")

        with pytest.raises(EndpointOperationError, match="throttled"):
            ensure_clean_endpoint(ml_client, "endpoint-a", "desc", "/uai/one")

        ml_client.online_endpoints.begin_delete.assert_not_called()
        ml_client.online_endpoints.begin_create_or_update.assert_not_called()

    def test_unreachable_platform_on_lookup(self):
        ml_client = MagicMock()
        ml_client.online_endpoints.get.side_effect = ServiceRequestError("connection reset")

        with pytest.raises(EndpointOperationError, match="connection reset"):
            ensure_clean_endpoint(ml_client, "endpoint-a", "desc", "/uai/one")

        ml_client.online_endpoints.begin_create_or_update.assert_not_called()

    def test_unreachable_platform_on_create(self):
        ml_client = MagicMock()
        ml_client.online_endpoints.get.side_effect = ResourceNotFoundError(message="nope")
        ml_client.online_endpoints.begin_create_or_update.side_effect = ServiceRequestError(
            "name resolution failed"
        )

        with pytest.raises(EndpointOperationError, match="name resolution failed"):
            ensure_clean_endpoint(ml_client, "endpoint-a", "desc", "/uai/one")

    def test_missing_endpoint_logged(self, caplog):
        caplog.set_level(logging.INFO, logger="deployment.endpoint")
        ml_client = MagicMock()
        ml_client.online_endpoints.get.side_effect = ResourceNotFoundError(message="nope")
        ml_client.online_endpoints.begin_create_or_update.return_value = _done_poller()

        ensure_clean_endpoint(ml_client, "endpoint-a", "desc", "/uai/one")

        assert "Endpoint 'endpoint-a' does not exist; nothing to delete" in caplog.text
        assert "Created endpoint 'endpoint-a'" in caplog.text

    def test_delete_failure_aborts(self):
        ml_client = MagicMock()
        ml_client.online_endpoints.begin_delete.side_effect = HttpResponseError(message="locked")

        with pytest.raises(EndpointOperationError, match="locked"):
            ensure_clean_endpoint(ml_client, "endpoint-a", "desc", "/uai/one")

        ml_client.online_endpoints.begin_create_or_update.assert_not_called()

    def test_create_failure(self):
        ml_client = MagicMock()
        ml_client.online_endpoints.get.side_effect = ResourceNotFoundError(message="nope")
        ml_client.online_endpoints.begin_create_or_update.side_effect = HttpResponseError(
            message="identity misconfigured"
        )

        with pytest.raises(EndpointOperationError, match="identity misconfigured"):
            ensure_clean_endpoint(ml_client, "endpoint-a", "desc", "/uai/one")

    def test_create_timeout(self):
        ml_client = MagicMock()
        ml_client.online_endpoints.get.side_effect = ResourceNotFoundError(message="nope")
        stuck = MagicMock()
        stuck.done.return_value = False
        ml_client.online_endpoints.begin_create_or_update.return_value = stuck

        with pytest.raises(EndpointOperationError, match="did not finish"):
            ensure_clean_endpoint(ml_client, "endpoint-a", "desc", "/uai/one", timeout=1)


class TestShiftTraffic:
    """Tests for shift_traffic function."""

    def _ml_client(self, before, after=None):
        ml_client = MagicMock()
        ml_client.online_endpoints.get.return_value = SimpleNamespace(
            name="endpoint-a", traffic=dict(before)
        )

        def update(endpoint):
            reported = after if after is not None else dict(endpoint.traffic)
            return _done_poller(SimpleNamespace(name=endpoint.name, traffic=reported))

        ml_client.online_endpoints.begin_create_or_update.side_effect = update
        return ml_client

    def test_overwrites_existing_split(self):
        ml_client = self._ml_client({"blue": 70, "dep-a": 30})

        updated = shift_traffic(ml_client, "endpoint-a", "dep-a")

        assert updated.traffic == {"dep-a": 100}
        submitted = ml_client.online_endpoints.begin_create_or_update.call_args[0][0]
        assert submitted.traffic == {"dep-a": 100}

    def test_empty_traffic(self):
        ml_client = self._ml_client({})

        assert shift_traffic(ml_client, "endpoint-a", "dep-a").traffic == {"dep-a": 100}

    def test_read_failure(self):
        ml_client = MagicMock()
        ml_client.online_endpoints.get.side_effect = ResourceNotFoundError(message="gone")

        with pytest.raises(TrafficUpdateError, match="Could not read traffic"):
            shift_traffic(ml_client, "endpoint-a", "dep-a")

    def test_update_failure(self):
        ml_client = self._ml_client({})
        ml_client.online_endpoints.begin_create_or_update.side_effect = HttpResponseError(
            message="conflict"
        )

        with pytest.raises(TrafficUpdateError, match="conflict"):
            shift_traffic(ml_client, "endpoint-a", "dep-a")

    def test_unreachable_platform_on_read(self):
        ml_client = MagicMock()
        ml_client.online_endpoints.get.side_effect = ServiceRequestError("connection reset")

        with pytest.raises(TrafficUpdateError, match="connection reset"):
            shift_traffic(ml_client, "endpoint-a", "dep-a")

        ml_client.online_endpoints.begin_create_or_update.assert_not_called()

    def test_connection_dropped_during_update(self):
        ml_client = self._ml_client({})
        ml_client.online_endpoints.begin_create_or_update.side_effect = ServiceResponseError(
            "connection aborted"
        )

        with pytest.raises(TrafficUpdateError, match="connection aborted"):
            shift_traffic(ml_client, "endpoint-a", "dep-a")

    def test_logs_traffic_before_and_after(self, caplog):
        caplog.set_level(logging.INFO, logger="deployment.endpoint")
        ml_client = self._ml_client({"blue": 70, "dep-a": 30})

        shift_traffic(ml_client, "endpoint-a", "dep-a")

        messages = [record.getMessage() for record in caplog.records]
        assert "Traffic on 'endpoint-a' before update: {'blue': 70, 'dep-a': 30}" in messages
        assert "Traffic on 'endpoint-a' after update: {'dep-a': 100}" in messages

    def test_platform_reports_other_allocation(self):
        ml_client = self._ml_client({}, after={"blue": 100})

        with pytest.raises(TrafficUpdateError, match="expected"):
            shift_traffic(ml_client, "endpoint-a", "dep-a")


class TestInvokeEndpoint:
    """Tests for invoke_endpoint function."""

    def test_sends_request_file(self, temp_dir):
        request_file = temp_dir / "request.json"
        request_file.write_text('{"input_data": {}}')
        ml_client = MagicMock()
        ml_client.online_endpoints.invoke.return_value = '{"output": "hi"}'

        response = invoke_endpoint(ml_client, "endpoint-a", "dep-a", request_file)

        assert response == '{"output": "hi"}'
        ml_client.online_endpoints.invoke.assert_called_once_with(
            endpoint_name="endpoint-a",
            deployment_name="dep-a",
            request_file=str(request_file),
        )

    def test_missing_request_file(self, temp_dir):
        with pytest.raises(FileNotFoundError):
            invoke_endpoint(MagicMock(), "endpoint-a", "dep-a", temp_dir / "missing.json")

    def test_rejected_request(self, temp_dir):
        request_file = temp_dir / "request.json"
        request_file.write_text("{}")
        ml_client = MagicMock()
        ml_client.online_endpoints.invoke.side_effect = HttpResponseError(message="424")

        with pytest.raises(EndpointOperationError, match="Smoke-test request"):
            invoke_endpoint(ml_client, "endpoint-a", "dep-a", request_file)
