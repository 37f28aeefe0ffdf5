import asyncio
from pathlib import Path

import httpx
import pytest
from conftest import FakeProvider

from synesthesia.config.constants import DEMO_STEMS
from synesthesia.models.request import Credentials
from synesthesia.models.stems import StemSet
from synesthesia.services.orchestrator import StemSeparationService, owned_audio_file
from synesthesia.services.stem_extractor import StemExtractor

DEMO_PAYLOAD = {"success": True, "isDemo": True, "stems": DEMO_STEMS}


class CountingExtractor(StemExtractor):
    calls = 0

    @classmethod
    def extract(cls, result):
        cls.calls += 1
        return super().extract(result)


@pytest.fixture
def build_service(make_client, credentials):
    def _build(provider, creds=None, **kwargs):
        return StemSeparationService(creds or credentials, make_client(provider, **kwargs))

    return _build


def test_successful_separation(build_service, audio_file):
    provider = FakeProvider(
        statuses=["PENDING", "SUCCEEDED"],
        result={"Bateria": "urlA", "baixo": "urlB", "outros": "urlC"},
    )

    result = asyncio.run(build_service(provider).separate(audio_file))

    assert result.to_payload() == {
        "success": True,
        "isDemo": False,
        "stems": {
            "drums": "urlA",
            "bass": "urlB",
            "vocals": None,
            "guitar": "urlC",
            "piano": "urlC",
        },
    }
    assert not audio_file.exists()


def test_nested_result_is_resolved(build_service, audio_file):
    provider = FakeProvider(
        result={"outputs": {"Drums": {"url": "d.wav"}, "stems": [{"vocals": "v.wav"}]}}
    )

    result = asyncio.run(build_service(provider).separate(audio_file))

    assert not result.is_demo
    assert result.stems.vocals == "v.wav"
    assert result.stems.drums == "d.wav"


@pytest.mark.parametrize(
    "creds",
    [
        Credentials(api_key="", workflow_id="wf"),
        Credentials(api_key="short", workflow_id="wf"),
        Credentials(api_key="   123456789   ", workflow_id="wf"),
        Credentials(api_key="long-enough-key", workflow_id="  "),
    ],
)
def test_invalid_credentials_never_call_provider(build_service, audio_file, creds):
    provider = FakeProvider()

    result = asyncio.run(build_service(provider, creds=creds).separate(audio_file))

    assert result.to_payload() == DEMO_PAYLOAD
    assert result.reason == "missing/invalid credentials"
    assert provider.requests == []
    assert not audio_file.exists()


def test_empty_result_degrades(build_service, audio_file):
    result = asyncio.run(build_service(FakeProvider(result={})).separate(audio_file))

    assert result.is_demo
    assert result.reason == "no recognizable output"
    assert result.to_payload() == DEMO_PAYLOAD


def test_only_other_label_degrades(build_service, audio_file):
    provider = FakeProvider(result={"accompaniment": "acc.wav"})

    result = asyncio.run(build_service(provider).separate(audio_file))

    assert result.is_demo


def test_failed_job_degrades_without_extraction(make_client, credentials, audio_file):
    CountingExtractor.calls = 0
    provider = FakeProvider(statuses=["PENDING", "PENDING", "FAILED"])
    service = StemSeparationService(
        credentials, make_client(provider), extractor=CountingExtractor
    )

    result = asyncio.run(service.separate(audio_file))

    assert result.to_payload() == DEMO_PAYLOAD
    assert result.reason == "job processing failure"
    assert CountingExtractor.calls == 0
    assert provider.polls == 3
    assert not audio_file.exists()


def test_polling_timeout_degrades(build_service, audio_file):
    provider = FakeProvider(statuses=["PENDING"])

    result = asyncio.run(build_service(provider, max_poll_attempts=3).separate(audio_file))

    assert result.to_payload() == DEMO_PAYLOAD
    assert result.reason == "polling timeout"
    assert provider.polls == 3
    assert not audio_file.exists()


@pytest.mark.parametrize(
    "provider, reason",
    [
        (FakeProvider(slot_status=401), "auth or connection failure"),
        (FakeProvider(upload_status=500), "upload failure"),
        (FakeProvider(job_status=422), "job creation failure"),
    ],
)
def test_classified_failures_carry_reason(build_service, audio_file, provider, reason):
    result = asyncio.run(build_service(provider).separate(audio_file))

    assert result.is_demo
    assert result.reason == reason


def test_file_removed_once_when_upload_throws(build_service, audio_file, monkeypatch):
    provider = FakeProvider(upload_error=httpx.ConnectError("connection reset mid-upload"))
    unlinked = []
    real_unlink = Path.unlink

    def tracking_unlink(self, missing_ok=False):
        unlinked.append(self)
        return real_unlink(self, missing_ok=missing_ok)

    monkeypatch.setattr(Path, "unlink", tracking_unlink)

    result = asyncio.run(build_service(provider).separate(audio_file))

    assert result.to_payload() == DEMO_PAYLOAD
    assert unlinked == [audio_file]
    assert not audio_file.exists()


def test_unexpected_exception_degrades(credentials, audio_file):
    class ExplodingClient:
        async def submit(self, _credentials, _path):
            raise KeyError("surprise")

    service = StemSeparationService(credentials, ExplodingClient())

    result = asyncio.run(service.separate(audio_file))

    assert result.to_payload() == DEMO_PAYLOAD
    assert result.reason == "unexpected failure"
    assert not audio_file.exists()


def test_missing_local_file_degrades(build_service, tmp_path):
    result = asyncio.run(build_service(FakeProvider()).separate(tmp_path / "gone.mp3"))

    assert result.is_demo
    assert result.reason == "unexpected failure"


def test_owned_audio_file_removes_on_exception(audio_file):
    with pytest.raises(RuntimeError):
        with owned_audio_file(str(audio_file)) as path:
            assert path == audio_file
            raise RuntimeError("boom")

    assert not audio_file.exists()


def test_owned_audio_file_tolerates_missing_file(tmp_path):
    with owned_audio_file(tmp_path / "never-created.mp3"):
        pass


def test_concurrent_requests_interleave(make_client, credentials, tmp_path):
    files = []
    for i in range(5):
        path = tmp_path / f"song-{i}.mp3"
        path.write_bytes(b"audio")
        files.append(path)

    provider = FakeProvider(statuses=["PENDING", "PENDING", "SUCCEEDED"], result={"bass": "b"})
    service = StemSeparationService(credentials, make_client(provider))

    async def run_all():
        return await asyncio.gather(*(service.separate(f) for f in files))

    results = asyncio.run(run_all())

    assert all(not r.is_demo for r in results)
    assert all(r.stems == StemSet(bass="b") for r in results)
    assert not any(f.exists() for f in files)


def test_status_endpoint_error_degrades(build_service, audio_file):
    provider = FakeProvider()
    healthy = provider.handler

    def bad_gateway_on_status(request):
        if request.method == "GET" and "/job/" in str(request.url):
            return httpx.Response(502, text="bad gateway")
        return healthy(request)

    provider.handler = bad_gateway_on_status

    result = asyncio.run(build_service(provider).separate(audio_file))

    assert result.to_payload() == DEMO_PAYLOAD
    assert result.reason == "unexpected failure"
    assert not audio_file.exists()
