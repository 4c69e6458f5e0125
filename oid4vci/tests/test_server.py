import pytest

from oid4vci import setup, shutdown, startup
from oid4vci.server import Oid4vciServer


@pytest.mark.asyncio
async def test_setup_loads_both_backends(config, provider, clock):
    context = await setup(config, provider, clock)
    assert len(context.processors.available_formats) == 4
    assert context.clock is clock
    assert context.notes is not None


@pytest.mark.asyncio
async def test_start_stop(context):
    server = Oid4vciServer("127.0.0.1", 0, context)
    await server.start()
    assert server.site is not None
    assert server.app is not None
    await server.stop()
    assert server.runner is None


@pytest.mark.asyncio
async def test_startup_shutdown(config, provider, clock):
    config.host = "127.0.0.1"
    config.port = 0
    server = await startup(await setup(config, provider, clock))
    await shutdown(server)
    assert server.site is None
