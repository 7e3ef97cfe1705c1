import logging
import os
import sys

import pytest

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from sessiongrid.modules.lifecycle import (
    LifecycleEvents,
    SessionDestroyEvent,
    SessionInitEvent,
    UIInitEvent,
)
from sessiongrid.modules.lifecycle.clustering import SessionClusteringListener
from sessiongrid.modules.sanitizer import ProcessingGuard, SessionAttributeSanitizer
from sessiongrid.modules.session import HttpSession
from sessiongrid.modules.ui import UI, Component, PushMode, UISession


class Widget(Component):
    pass


@pytest.fixture
def guard():
    return ProcessingGuard()


@pytest.fixture
def listener(guard):
    return SessionClusteringListener(guard, SessionAttributeSanitizer(), session_timeout=1800)


@pytest.fixture
def events(listener):
    dispatcher = LifecycleEvents()
    listener.service_init(dispatcher)
    return dispatcher


@pytest.fixture
def http_session():
    session = HttpSession("session-1", max_inactive_interval=60)
    session.set_attribute("userMessage", "hello")
    session.set_attribute("saveTime", "2024-01-01T00:00:00")
    session.set_attribute("tempWidget", Widget())
    return session


class TestSessionInitialization:
    def test_configures_and_sanitizes(self, events, http_session):
        events.fire_session_init(UISession(http_session))

        assert http_session.get_attribute("app.session.clustered") is True
        assert http_session.get_attribute("app.session.type") == "redis-grid"
        assert isinstance(http_session.get_attribute("app.session.created"), int)
        assert http_session.max_inactive_interval == 1800
        assert http_session.get_attribute("userMessage") == "hello"
        assert http_session.get_attribute("saveTime") == "2024-01-01T00:00:00"
        assert http_session.get_attribute("tempWidget") is None

    def test_reconfiguring_keeps_creation_marker(self, listener, http_session):
        listener.configure_session_for_clustering(http_session, http_session.id)
        created = http_session.get_attribute("app.session.created")
        attributes = http_session.attributes

        listener.configure_session_for_clustering(http_session, http_session.id)

        assert http_session.get_attribute("app.session.created") == created
        assert http_session.attributes == attributes

    def test_skipped_while_session_in_progress(self, listener, guard, http_session):
        with guard.hold(http_session.id) as acquired:
            assert acquired
            listener.handle_session_initialization(SessionInitEvent(UISession(http_session)))

        assert http_session.get_attribute("app.session.clustered") is None
        assert http_session.get_attribute("tempWidget") is not None

    def test_guard_released_after_pass(self, listener, guard, http_session):
        listener.handle_session_initialization(SessionInitEvent(UISession(http_session)))

        assert http_session.id in guard
        assert not guard.is_processing(http_session.id)

    def test_recursive_initialization_is_skipped(self, guard, http_session):
        """A session reload triggered from inside a pass does not run a second pass."""
        calls = []

        class ReloadingSanitizer(SessionAttributeSanitizer):
            def sanitize(self, session):
                calls.append(session.id)
                if len(calls) == 1:
                    listener.handle_session_initialization(SessionInitEvent(UISession(session)))
                super().sanitize(session)

        listener = SessionClusteringListener(guard, ReloadingSanitizer())
        listener.handle_session_initialization(SessionInitEvent(UISession(http_session)))

        assert calls == [http_session.id]

    @pytest.mark.parametrize(
        "event",
        [None, SessionInitEvent(None), SessionInitEvent(UISession(None))],
    )
    def test_missing_objects_warn_and_return(self, listener, guard, event, caplog):
        with caplog.at_level(logging.WARNING):
            listener.handle_session_initialization(event)

        assert caplog.records
        assert caplog.records[-1].levelno == logging.WARNING
        assert len(guard) == 0

    def test_blank_session_id_skipped(self, listener, guard, caplog):
        with caplog.at_level(logging.WARNING):
            listener.handle_session_initialization(SessionInitEvent(UISession(HttpSession("  "))))

        assert "Session ID is empty" in caplog.text
        assert len(guard) == 0

    def test_session_access_failure_skipped(self, listener, guard, caplog):
        class ExplodingUISession:
            @property
            def session(self):
                raise RuntimeError("not ready")

        with caplog.at_level(logging.WARNING):
            listener.handle_session_initialization(SessionInitEvent(ExplodingUISession()))

        assert "Exception while accessing session information" in caplog.text
        assert len(guard) == 0

    def test_configuration_error_logged(self, listener, caplog):
        session = HttpSession("s1")
        session.invalidate()

        with caplog.at_level(logging.ERROR):
            listener.configure_session_for_clustering(session, session.id)

        assert "Error configuring session for clustering" in caplog.text


class TestSessionDestruction:
    def test_discards_guard_entry(self, events, guard, http_session):
        ui_session = UISession(http_session)
        events.fire_session_init(ui_session)
        assert http_session.id in guard

        events.fire_session_destroy(ui_session)

        assert http_session.id not in guard

    def test_destroyed_during_pass_can_initialize_again(self, listener, guard, http_session):
        ui_session = UISession(http_session)

        with guard.hold(http_session.id):
            listener.handle_session_destruction(SessionDestroyEvent(ui_session))

        fresh = HttpSession(http_session.id)
        fresh.set_attribute("tempWidget", Widget())
        listener.handle_session_initialization(SessionInitEvent(UISession(fresh)))

        assert fresh.get_attribute("app.session.clustered") is True
        assert fresh.get_attribute("tempWidget") is None

    @pytest.mark.parametrize(
        "event",
        [SessionDestroyEvent(None), SessionDestroyEvent(UISession(None))],
    )
    def test_missing_session_is_quiet(self, listener, event, caplog):
        with caplog.at_level(logging.DEBUG):
            listener.handle_session_destruction(event)

        assert all(record.levelno <= logging.DEBUG for record in caplog.records)

    def test_none_event_warns(self, listener, caplog):
        with caplog.at_level(logging.WARNING):
            listener.handle_session_destruction(None)

        assert "SessionDestroyEvent is None" in caplog.text


class TestUIInitialization:
    def test_sets_automatic_push_and_detach_listener(self, events, http_session, caplog):
        ui = UISession(http_session).create_ui()
        events.fire_ui_init(ui)

        assert ui.push_mode is PushMode.AUTOMATIC

        with caplog.at_level(logging.DEBUG):
            ui.detach()
        assert "preserving session for clustering" in caplog.text

    def test_ui_without_session(self, events):
        ui = UI(None)
        events.fire_ui_init(ui)
        assert ui.push_mode is PushMode.AUTOMATIC

    @pytest.mark.parametrize("event", [None, UIInitEvent(None)])
    def test_missing_ui_warns(self, listener, event, caplog):
        with caplog.at_level(logging.WARNING):
            listener.handle_ui_initialization(event)

        assert "UIInitEvent or UI is None" in caplog.text


class TestLifecycleEvents:
    def test_failing_listener_does_not_stop_others(self, caplog):
        dispatcher = LifecycleEvents()
        received = []

        def failing(event):
            raise RuntimeError("listener bug")

        dispatcher.add_session_init_listener(failing)
        dispatcher.add_session_init_listener(received.append)

        with caplog.at_level(logging.ERROR):
            dispatcher.fire_session_init(UISession(HttpSession("s1")))

        assert len(received) == 1
        assert isinstance(received[0], SessionInitEvent)
        assert "Error during session initialization handling" in caplog.text

    def test_listeners_run_in_order(self):
        dispatcher = LifecycleEvents()
        order = []
        dispatcher.add_session_destroy_listener(lambda event: order.append("first"))
        dispatcher.add_session_destroy_listener(lambda event: order.append("second"))

        dispatcher.fire_session_destroy(None)

        assert order == ["first", "second"]
