import pytest  # type: ignore[import-not-found]

from quizbox.core.settings import settings
from quizbox.health import service

pytestmark = pytest.mark.anyio


async def test_get_health_payload_shape(engine) -> None:
    payload = await service.get_health_payload()
    assert payload["status"] == "ok"
    assert payload["version"] == settings.API_VERSION
    assert payload["db"]["ok"] is True
