"""Tests for the event listener registry."""

import logging

import pytest

from clinic_scheduler import events


class TestListenerRegistry:
    def test_register_and_list(self):
        def listener(payload):
            return None

        events.register_listener(events.SESSION_CREATED, listener)

        assert events.get_registered_listeners(events.SESSION_CREATED) == [listener]
        assert events.get_registered_listeners(events.PATIENT_CREATED) == []

    def test_clear(self):
        events.register_listener(events.SESSION_CREATED, print)
        events.clear_listeners()
        assert events.get_registered_listeners(events.SESSION_CREATED) == []


class TestPublish:
    @pytest.mark.asyncio
    async def test_sync_and_async_listeners(self):
        seen = []

        async def async_listener(payload):
            seen.append(("async", payload))

        events.register_listener("demo", lambda payload: seen.append(("sync", payload)))
        events.register_listener("demo", async_listener)

        delivered = await events.publish("demo", 42)

        assert delivered == 2
        assert seen == [("sync", 42), ("async", 42)]

    @pytest.mark.asyncio
    async def test_failure_logged_and_others_still_run(self, caplog):
        seen = []

        def broken(payload):
            raise RuntimeError("crm unavailable")

        events.register_listener("demo", broken)
        events.register_listener("demo", seen.append)

        with caplog.at_level(logging.ERROR):
            delivered = await events.publish("demo", "payload")

        assert delivered == 1
        assert seen == ["payload"]
        assert "crm unavailable" in caplog.text

    @pytest.mark.asyncio
    async def test_no_listeners(self):
        assert await events.publish("nothing", None) == 0
