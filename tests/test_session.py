import asyncio

import pytest

from worksafe.client.session import AnalysisInProgress, PhotoSession, SessionState
from worksafe.core.errors import AnalysisError, ErrorKind, PhotoValidationError
from worksafe.schemas.safety import AnalysisResult, Risk

from conftest import FakeUpload

RESULT = AnalysisResult(
    risks=[Risk(title="Open trench", level="high", recommendation="Fence it off")]
)


class StubClient:
    def __init__(self, result=RESULT, error=None, gate=None):
        self.result = result
        self.error = error
        self.gate = gate
        self.calls = 0

    async def analyze(self, photo):
        self.calls += 1
        if self.gate is not None:
            await self.gate.wait()
        if self.error is not None:
            raise self.error
        return self.result


async def test_upload_then_analyze():
    session = PhotoSession(StubClient())
    assert session.state == SessionState.EMPTY

    await session.upload(FakeUpload())
    assert session.state == SessionState.PHOTO_READY

    result = await session.analyze()

    assert result == RESULT
    assert session.state == SessionState.ANALYZED
    assert session.view().items[0].title == "Open trench"


async def test_new_upload_revokes_previous_preview_and_clears_result():
    session = PhotoSession(StubClient())
    first = await session.upload(FakeUpload(filename="a.png"))
    await session.analyze()

    second = await session.upload(FakeUpload(filename="b.png"))

    previews = session.ingestor.previews
    assert first.preview_url not in previews
    assert second.preview_url in previews
    assert session.result is None
    assert session.state == SessionState.PHOTO_READY


async def test_reset_releases_everything():
    session = PhotoSession(StubClient())
    photo = await session.upload(FakeUpload())
    await session.analyze()

    session.reset()

    assert session.state == SessionState.EMPTY
    assert session.result is None
    assert photo.preview_url not in session.ingestor.previews


async def test_analysis_failure_is_recorded_not_raised():
    error = AnalysisError(ErrorKind.PROVIDER_QUOTA_EXCEEDED, "API quota exceeded", 429)
    session = PhotoSession(StubClient(error=error))
    await session.upload(FakeUpload())

    assert await session.analyze() is None

    assert session.error_kind == ErrorKind.PROVIDER_QUOTA_EXCEEDED
    assert "quota" in session.error
    assert session.state == SessionState.PHOTO_READY

    session.dismiss_error()
    assert session.error is None


async def test_analyze_without_photo_reports_missing_input():
    client = StubClient()
    session = PhotoSession(client)

    assert await session.analyze() is None
    assert session.error_kind == ErrorKind.MISSING_INPUT
    assert client.calls == 0


async def test_only_one_analysis_in_flight():
    gate = asyncio.Event()
    client = StubClient(gate=gate)
    session = PhotoSession(client)
    await session.upload(FakeUpload())

    first = asyncio.create_task(session.analyze())
    await asyncio.sleep(0)
    assert session.state == SessionState.ANALYZING

    with pytest.raises(AnalysisInProgress):
        await session.analyze()
    with pytest.raises(AnalysisInProgress):
        await session.upload(FakeUpload())

    gate.set()
    assert await first == RESULT
    assert client.calls == 1


async def test_invalid_upload_keeps_current_photo():
    session = PhotoSession(StubClient())
    photo = await session.upload(FakeUpload())

    with pytest.raises(PhotoValidationError):
        await session.upload(FakeUpload(content_type="image/gif"))

    assert session.photo == photo
    assert photo.preview_url in session.ingestor.previews
    assert session.error is not None


async def test_reset_abandons_running_analysis():
    gate = asyncio.Event()
    client = StubClient(gate=gate)
    session = PhotoSession(client)
    await session.upload(FakeUpload())

    running = asyncio.create_task(session.analyze())
    await asyncio.sleep(0)
    assert session.state == SessionState.ANALYZING

    session.reset()
    assert session.state == SessionState.EMPTY

    replacement = await session.upload(FakeUpload(filename="next.png"))
    assert session.state == SessionState.PHOTO_READY

    gate.set()
    assert await running is None

    assert session.result is None
    assert session.view() is None
    assert session.photo == replacement
    assert session.state == SessionState.PHOTO_READY


async def test_reset_discards_failure_of_abandoned_analysis():
    gate = asyncio.Event()
    error = AnalysisError(ErrorKind.NETWORK_FAILURE, "network down")
    session = PhotoSession(StubClient(error=error, gate=gate))
    await session.upload(FakeUpload())

    running = asyncio.create_task(session.analyze())
    await asyncio.sleep(0)
    session.reset()
    gate.set()

    assert await running is None
    assert session.error is None
    assert session.error_kind is None
