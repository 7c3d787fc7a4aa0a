# =============================================================================
# tests/unit/test_realtime_service.py
# Unit Tests for RealTimeDataService.fetch
# =============================================================================

import pytest

from conftest import Candidate, make_response, server_error
from medreserve.errors import AuthenticationError, UnknownResourceError
from medreserve.realtime import (
    APPOINTMENTS,
    DASHBOARD_METRICS,
    DOCTORS,
    MEDICAL_REPORTS,
    PRESCRIPTIONS,
    SOURCE_CACHE,
    SOURCE_FALLBACK,
    SOURCE_NETWORK,
    SOURCE_STALE,
    SPECIALTIES,
    RealTimeDataService,
    ResourceStrategy,
    build_default_strategies,
)

FALLBACK = [{"id": "fallback"}]


def strategy(name=DOCTORS, *candidates, **kwargs):
    return ResourceStrategy(
        name=name,
        candidates=list(candidates),
        fallback=kwargs.pop("fallback", lambda: list(FALLBACK)),
        **kwargs,
    )


class TestNoThrowReadPath:
    """fetch never raises for registered resources"""

    def test_every_default_resource_survives_total_failure(
        self, http_client, fake_session, generator, connection, retry_policy, recording_sleep
    ):
        fake_session.request.return_value = make_response(500, {"message": "down"})
        service = RealTimeDataService(
            build_default_strategies(http_client, generator),
            connection,
            retry_policy,
            sleep=recording_sleep,
        )

        for name in (DOCTORS, APPOINTMENTS, MEDICAL_REPORTS, PRESCRIPTIONS, SPECIALTIES):
            data = service.fetch(name)
            assert isinstance(data, list) and data, name
            assert service.provenance(name) == SOURCE_FALLBACK

        metrics = service.fetch(DASHBOARD_METRICS)
        assert metrics["totalDoctors"] == 60
        assert set(metrics) >= {"availableDoctors", "upcomingAppointments", "totalAppointments", "lastUpdated"}

    def test_fallback_is_cached(self, make_service):
        service = make_service(strategy(DOCTORS, Candidate(server_error())))

        data = service.fetch(DOCTORS)

        assert data == FALLBACK
        assert service.get_cached(DOCTORS) == FALLBACK

    def test_transform_failure_falls_back(self, make_service):
        def broken(records):
            raise KeyError("shape")

        service = make_service(strategy(DOCTORS, Candidate([{"id": 1}]), transform=broken))

        assert service.fetch(DOCTORS) == FALLBACK


class TestRetries:

    def test_always_failing_candidate_attempted_max_retries_plus_one(self, make_service, recording_sleep):
        candidate = Candidate(server_error())
        service = make_service(strategy(DOCTORS, candidate))

        service.fetch(DOCTORS)

        assert candidate.calls == 4
        assert recording_sleep.delays == [5.0, 10.0, 20.0]

    def test_every_candidate_tried_each_round(self, make_service):
        candidates = [Candidate(server_error()) for _ in range(3)]
        service = make_service(strategy(DOCTORS, *candidates))

        service.fetch(DOCTORS)

        assert [c.calls for c in candidates] == [4, 4, 4]

    def test_second_candidate_ends_round(self, make_service, recording_sleep):
        first = Candidate(server_error())
        second = Candidate({"content": [{"id": 1}]})
        third = Candidate([{"id": 3}])
        service = make_service(strategy(DOCTORS, first, second, third))

        assert service.fetch(DOCTORS) == [{"id": 1}]
        assert (first.calls, second.calls, third.calls) == (1, 1, 0)
        assert recording_sleep.delays == []
        assert service.provenance(DOCTORS) == SOURCE_NETWORK

    def test_non_client_error_moves_to_next_candidate(self, make_service, recording_sleep):
        first = Candidate(ConnectionResetError("reset by peer"))
        second = Candidate([{"id": 7}])
        service = make_service(strategy(DOCTORS, first, second))

        assert service.fetch(DOCTORS) == [{"id": 7}]
        assert (first.calls, second.calls) == (1, 1)
        assert recording_sleep.delays == []
        assert service.provenance(DOCTORS) == SOURCE_NETWORK

    def test_non_client_error_is_retried(self, make_service, recording_sleep):
        candidate = Candidate(KeyError("content"), KeyError("content"), [{"id": 9}])
        service = make_service(strategy(DOCTORS, candidate))

        assert service.fetch(DOCTORS) == [{"id": 9}]
        assert recording_sleep.delays == [5.0, 10.0]

    def test_malformed_payload_counts_as_failure(self, make_service):
        malformed = Candidate({"unexpected": True})
        good = Candidate({"data": [{"id": 2}]})
        service = make_service(strategy(DOCTORS, malformed, good))

        assert service.fetch(DOCTORS) == [{"id": 2}]
        assert malformed.calls == 1

    def test_success_on_later_round(self, make_service, recording_sleep):
        candidate = Candidate(server_error(), server_error(), [{"id": 9}])
        service = make_service(strategy(DOCTORS, candidate))

        assert service.fetch(DOCTORS) == [{"id": 9}]
        assert recording_sleep.delays == [5.0, 10.0]

    def test_authentication_error_is_not_retried(self, make_service, recording_sleep):
        candidate = Candidate(AuthenticationError())
        service = make_service(strategy(APPOINTMENTS, candidate))

        assert service.fetch(APPOINTMENTS) == FALLBACK
        assert candidate.calls == 1
        assert recording_sleep.delays == []

    def test_retry_state_dropped_after_call(self, make_service):
        seen = []
        service = None

        def candidate():
            seen.append([(s.resource, s.attempt) for s in service.retry_states()])
            raise server_error()

        service = make_service(strategy(DOCTORS, candidate))
        service.fetch(DOCTORS)

        assert seen[0] == [(DOCTORS, 1)]
        assert seen[-1] == [(DOCTORS, 4)]
        assert service.retry_states() == []


class TestEmptyCollections:

    def test_empty_appointments_served_as_fallback(self, make_service):
        service = make_service(strategy(APPOINTMENTS, Candidate([]), empty_is_fallback=True))

        assert service.fetch(APPOINTMENTS) == FALLBACK
        assert service.provenance(APPOINTMENTS) == SOURCE_FALLBACK

    def test_empty_doctors_kept(self, make_service):
        service = make_service(strategy(DOCTORS, Candidate({"content": []})))

        assert service.fetch(DOCTORS) == []
        assert service.provenance(DOCTORS) == SOURCE_NETWORK


class TestCache:

    def test_offline_serves_cache_without_network(self, make_service, connection):
        candidate = Candidate([{"id": 1}])
        service = make_service(strategy(DOCTORS, candidate))
        cached = service.fetch(DOCTORS)

        connection.set_offline()
        result = service.fetch(DOCTORS)

        assert result == cached
        assert candidate.calls == 1
        assert service.provenance(DOCTORS) == SOURCE_CACHE

    def test_offline_without_cache_still_fetches(self, make_service, connection):
        candidate = Candidate([{"id": 1}])
        service = make_service(strategy(DOCTORS, candidate))
        connection.set_offline()

        assert service.fetch(DOCTORS) == [{"id": 1}]
        assert candidate.calls == 1

    def test_stale_cache_beats_fallback(self, make_service):
        candidate = Candidate([{"id": 1}], server_error())
        service = make_service(strategy(DOCTORS, candidate))
        service.fetch(DOCTORS)

        assert service.fetch(DOCTORS) == [{"id": 1}]
        assert service.provenance(DOCTORS) == SOURCE_STALE

    def test_online_transition_invalidates_cache(self, make_service, connection):
        candidate = Candidate([{"id": 1}], [{"id": 2}])
        service = make_service(strategy(DOCTORS, candidate))
        service.fetch(DOCTORS)

        connection.set_offline()
        connection.set_online()

        assert service.get_cached(DOCTORS) is None
        assert service.fetch(DOCTORS) == [{"id": 2}]
        assert candidate.calls == 2

    def test_going_offline_keeps_cache(self, make_service, connection):
        service = make_service(strategy(DOCTORS, Candidate([{"id": 1}])))
        service.fetch(DOCTORS)

        connection.set_offline()

        assert service.get_cached(DOCTORS) == [{"id": 1}]

    def test_invalidation_listener_called_on_reconnect(self, make_service, connection):
        service = make_service(strategy(DOCTORS, Candidate([])))
        calls = []
        service.add_invalidation_listener(lambda: calls.append(True))

        connection.set_offline()
        connection.set_online()

        assert calls == [True]

    def test_superseded_result_is_discarded(self, make_service):
        service = None

        def candidate():
            if candidate.calls == 0:
                candidate.calls += 1
                # a newer fetch for the same resource completes first
                service.fetch(DOCTORS)
                return [{"id": "old"}]
            candidate.calls += 1
            return [{"id": "new"}]

        candidate.calls = 0
        service = make_service(strategy(DOCTORS, candidate))

        result = service.fetch(DOCTORS)

        assert result == [{"id": "new"}]
        assert service.get_cached(DOCTORS) == [{"id": "new"}]
        assert service.cache_entry(DOCTORS).sequence == 2

    def test_clear_cache_and_reset(self, make_service):
        service = make_service(
            strategy(DOCTORS, Candidate([{"id": 1}])),
            strategy(APPOINTMENTS, Candidate([{"id": 2}])),
        )
        service.fetch(DOCTORS)
        service.fetch(APPOINTMENTS)

        service.clear_cache(DOCTORS)
        assert service.get_cached(DOCTORS) is None
        assert service.get_cached(APPOINTMENTS) == [{"id": 2}]

        service.reset()
        assert service.get_cached(APPOINTMENTS) is None
        assert service.provenance(APPOINTMENTS) is None


class TestRegistry:

    def test_unknown_resource_raises(self, make_service):
        service = make_service(strategy(DOCTORS, Candidate([])))

        with pytest.raises(UnknownResourceError) as exc_info:
            service.fetch("vitals")

        assert exc_info.value.resource == "vitals"

    def test_dashboard_metrics_registered_automatically(self, make_service):
        service = make_service(strategy(DOCTORS, Candidate([])))

        assert DASHBOARD_METRICS in service.resources
