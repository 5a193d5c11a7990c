"""Tests for the async API client and stale-response guard"""

import asyncio

import aiohttp
import pytest

from leasedocs.errors import TransportError
from leasedocs.models.document import DocumentStatus, DownloadFormat
from leasedocs.services.client import DocumentListLoader, LeasedocsClient, RequestEpoch

TEMPLATE = {
    "id": "t-1",
    "name": "Standard Lease",
    "type": "lease",
    "description": "Residential lease",
    "body": "Hi {{NAME}}",
    "variables": ["NAME"],
}


class FakeResponse:
    def __init__(self, status=200, body=None, raw=b""):
        self.status = status
        self._body = body
        self._raw = raw

    async def json(self):
        if self._body is None:
            raise ValueError("not json")
        return self._body

    async def read(self):
        return self._raw

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        return False


class FakeSession:
    """Replays queued responses and records every request"""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.requests = []

    def request(self, method, url, **kwargs):
        self.requests.append((method, url, kwargs))
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


def _client(credential, *responses):
    session = FakeSession(*responses)
    return LeasedocsClient(credential, base_url="http://api.test/", session=session), session


class TestLeasedocsClient:
    def test_sends_credential_and_parses(self, credential):
        client, session = _client(credential, FakeResponse(body=[TEMPLATE]))
        templates = asyncio.run(client.list_templates())

        assert templates[0].name == "Standard Lease"
        method, url, kwargs = session.requests[0]
        assert (method, url) == ("GET", "http://api.test/api/templates")
        assert kwargs["headers"] == {"Authorization": "Bearer secret-token"}

    def test_server_detail_surfaces(self, credential):
        client, _ = _client(
            credential, FakeResponse(status=409, body={"detail": "Only draft contracts can be edited"})
        )
        with pytest.raises(TransportError) as exc:
            asyncio.run(client.edit_content("d-1", "<p>x</p>"))
        assert exc.value.message == "Only draft contracts can be edited"
        assert exc.value.status == 409

    def test_generic_message_without_detail(self, credential):
        client, _ = _client(credential, FakeResponse(status=500))
        with pytest.raises(TransportError) as exc:
            asyncio.run(client.list_documents())
        assert exc.value.message == TransportError.GENERIC_MESSAGE

    def test_network_failure(self, credential):
        client, _ = _client(credential, aiohttp.ClientConnectionError("refused"))
        with pytest.raises(TransportError) as exc:
            asyncio.run(client.send_for_signature("d-1"))
        assert exc.value.message == TransportError.GENERIC_MESSAGE
        assert exc.value.status is None

    def test_download_returns_bytes(self, credential):
        client, session = _client(credential, FakeResponse(raw=b"%PDF-1.4"))
        data = asyncio.run(client.download("d-1", DownloadFormat.PDF))
        assert data == b"%PDF-1.4"
        assert session.requests[0][2]["params"] == {"format": "pdf"}

    def test_generate_contract_posts_form(self, credential, manager_form):
        body = {"id": "d-1", "name": "Contract", "type": "contract", "status": "draft"}
        client, session = _client(credential, FakeResponse(body=body))
        document = asyncio.run(client.generate_contract(manager_form))

        assert document.status == DocumentStatus.DRAFT
        payload = session.requests[0][2]["json"]
        assert payload["form"]["compensation"] == {"kind": "fixed", "amount": "5000"}


class TestRequestEpoch:
    def test_only_latest_generation_is_current(self):
        epoch = RequestEpoch()
        first = epoch.begin()
        second = epoch.begin()
        assert not epoch.is_current(first)
        assert epoch.is_current(second)

    def test_stale_list_discarded(self):
        release = asyncio.Event()

        class SlowFirstClient:
            def __init__(self):
                self.calls = 0

            async def list_documents(self, filter=None):
                self.calls += 1
                if self.calls == 1:
                    await release.wait()
                    return ["old"]
                return ["new"]

        async def scenario():
            loader = DocumentListLoader(SlowFirstClient())
            first = asyncio.create_task(loader.load())
            await asyncio.sleep(0)
            latest = await loader.load()
            release.set()
            stale = await first
            return latest, stale, loader.documents

        latest, stale, documents = asyncio.run(scenario())
        assert latest == ["new"]
        assert stale is None
        assert documents == ["new"]
