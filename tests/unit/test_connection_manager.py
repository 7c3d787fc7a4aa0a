# =============================================================================
# tests/unit/test_connection_manager.py
# Unit Tests for ConnectionManager
# =============================================================================

from unittest.mock import patch

from medreserve.offline import ConnectionManager, ConnectionStatus


class TestTransitions:

    def test_starts_online_by_default(self):
        assert ConnectionManager().is_online

    def test_callbacks_fire_on_change_only(self):
        manager = ConnectionManager()
        seen = []
        manager.register_callback(lambda state: seen.append(state.status))

        manager.set_online()
        manager.set_offline()
        manager.set_offline()
        manager.set_online()

        assert seen == [ConnectionStatus.OFFLINE, ConnectionStatus.ONLINE]

    def test_failing_callback_does_not_block_others(self):
        manager = ConnectionManager()
        seen = []

        def broken(state):
            raise RuntimeError("boom")

        manager.register_callback(broken)
        manager.register_callback(lambda state: seen.append(state.is_online))

        manager.set_offline()

        assert seen == [False]

    def test_unregister(self):
        manager = ConnectionManager()
        seen = []
        callback = seen.append
        manager.register_callback(callback)
        manager.unregister_callback(callback)

        manager.set_offline()

        assert seen == []

    def test_status_display(self):
        manager = ConnectionManager(online=False)

        display = manager.get_status_display()

        assert display["status"] == "offline"
        assert display["is_online"] is False


class TestProbe:

    def test_unreachable_host_goes_offline(self):
        manager = ConnectionManager("http://api.test:8080/api")

        with patch("medreserve.offline.connection_manager.socket.create_connection", side_effect=OSError("refused")):
            state = manager.check_connection()

        assert not state.is_online
        assert state.failed_probes == 1
        assert "refused" in state.error_message

    def test_reachable_host_comes_back(self):
        manager = ConnectionManager("http://api.test:8080/api", online=False)

        with patch("medreserve.offline.connection_manager.socket.create_connection") as create:
            state = manager.check_connection()

        create.assert_called_once_with(("api.test", 8080), timeout=ConnectionManager.PROBE_TIMEOUT)
        assert state.is_online

    def test_no_url_assumes_reachable(self):
        manager = ConnectionManager(online=False)

        assert manager.check_connection().is_online

    def test_monitoring_start_stop(self):
        manager = ConnectionManager()
        manager.start_monitoring()
        manager.stop_monitoring()

        assert not manager._monitor.is_alive()

    def test_threshold_delays_offline(self):
        manager = ConnectionManager("http://api.test:8080/api")

        with patch("medreserve.offline.connection_manager.socket.create_connection", side_effect=OSError("refused")):
            first = manager.check_connection(threshold=2)
            second = manager.check_connection(threshold=2)

        assert first.is_online
        assert first.failed_probes == 1
        assert not second.is_online

    def test_listeners_receive_snapshot(self):
        manager = ConnectionManager()
        seen = []
        manager.register_callback(seen.append)

        manager.set_offline()
        manager.set_online()

        assert [state.is_online for state in seen] == [False, True]
        assert seen[0] is not manager.state
