# Playlink Resource Tests
# Tests for startup checks, wiring and shutdown

import asyncio
from io import StringIO

import httpx

from playlink.config.schema import PlaylinkConfig
from playlink.hooks.pipeline import HookPipeline
from playlink.logger import PlaylinkLogger
from playlink.resource import RESOURCE_NAME, PlaylinkResource

from tests.conftest import FakeHost, Remote


def make_resource(host: FakeHost, remote: Remote, logger: PlaylinkLogger, config=None) -> PlaylinkResource:
    return PlaylinkResource(
        host,
        config,
        pipeline=HookPipeline.allow_all(logger),
        http=remote.client(logger),
        logger=logger,
    )


class TestStartup:
    """Tests for PlaylinkResource.start()."""

    def test_unset_server_id_stops_resource(self, remote: Remote, logger: PlaylinkLogger, log_output: StringIO):
        host = FakeHost({"1": {"license": "license:aaa"}})
        resource = make_resource(host, remote, logger)

        assert resource.start() is False
        assert host.stopped
        assert host.commands == {}
        assert resource.scheduler is None
        assert "'playlink_server_id' is not set" in log_output.getvalue()

    def test_sentinel_server_id_stops_resource(self, remote: Remote, logger: PlaylinkLogger):
        host = FakeHost(convars={"playlink_server_id": "__default__"})
        assert make_resource(host, remote, logger).start() is False
        assert host.stopped

    def test_wrong_resource_name(self, remote: Remote, logger: PlaylinkLogger, log_output: StringIO):
        host = FakeHost(convars={"playlink_server_id": "abc"}, resource_name="playlink-main")

        assert make_resource(host, remote, logger).start() is False
        assert host.stopped
        assert "Resource must be named 'playlink'" in log_output.getvalue()

    def test_start_wires_components(self, host: FakeHost, remote: Remote, logger: PlaylinkLogger):
        resource = make_resource(host, remote, logger)

        async def scenario():
            started = resource.start()
            armed = resource.scheduler.state.has_pending
            await host.fire_stop()
            return started, armed

        started, armed = asyncio.run(scenario())

        assert started and armed
        assert RESOURCE_NAME in host.commands
        assert len(host.joining_callbacks) == 1
        assert resource.scheduler.stopped
        assert not resource.started

    def test_base_url_from_server_id(self, host: FakeHost, remote: Remote, logger: PlaylinkLogger):
        resource = make_resource(host, remote, logger)
        resource.prepare()

        assert resource.scheduler.ping_url == "https://playlink.gg/api/servers/abc/ping"
        assert resource.commands.connect_url == "https://playlink.gg/api/servers/abc/connect"

    def test_dev_server_id(self, remote: Remote, logger: PlaylinkLogger):
        host = FakeHost(convars={"playlink_server_id": "dev"})
        resource = make_resource(host, remote, logger)
        resource.prepare()

        assert resource.scheduler.ping_url == "http://localhost:3000/api/servers/dev/ping"

    def test_custom_convar_and_prefix(self, remote: Remote, logger: PlaylinkLogger):
        config = PlaylinkConfig(server={"convar_name": "link_id"}, chat={"prefix": "[LINK]"})
        host = FakeHost(convars={"link_id": "xyz"})
        resource = make_resource(host, remote, logger, config)
        resource.prepare()

        assert resource.server_id == "xyz"
        assert resource.commands.chat_prefix == "[LINK]"


class TestJoiningAndCommand:
    """Tests for the host-facing callbacks."""

    def test_suggestion_on_join(self, host: FakeHost, remote: Remote, logger: PlaylinkLogger):
        resource = make_resource(host, remote, logger)

        async def scenario():
            resource.start()
            for callback in host.joining_callbacks:
                callback("7")
            await resource.stop()

        asyncio.run(scenario())
        assert host.suggestions == [("7", RESOURCE_NAME)]

    def test_registered_command_dispatches(self, host: FakeHost, remote: Remote, logger: PlaylinkLogger):
        resource = make_resource(host, remote, logger)

        async def scenario():
            resource.start()
            await host.commands[RESOURCE_NAME]("1", [])
            await resource.stop()

        asyncio.run(scenario())
        assert "Arguments required" in host.last_message()


class TestShutdown:
    """Tests for PlaylinkResource.stop()."""

    def test_stop_waits_for_cycle_in_flight(self, host: FakeHost, remote: Remote, logger: PlaylinkLogger):
        resource = make_resource(host, remote, logger)

        async def scenario():
            release = asyncio.Event()

            async def slow(request):
                await release.wait()
                return httpx.Response(200, text="OK")

            remote.reply(slow)
            resource.start()
            while not remote.requests:
                await asyncio.sleep(0.005)

            stopping = asyncio.create_task(resource.stop())
            await asyncio.sleep(0.01)
            waited = not stopping.done()
            release.set()
            await stopping
            return waited

        assert asyncio.run(scenario())
        assert resource.scheduler.state.cycles == 1
        assert not resource.scheduler.state.has_pending
        assert not resource.started
