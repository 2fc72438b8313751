# pylint: disable=redefined-outer-name
from io import BytesIO
import threading

import pytest
import requests
from PIL import Image

from thumbnail_service.clients import PipelineClients
from thumbnail_service.errors import ConflictError, FetchError


def make_image_bytes(size=(300, 200), color=(200, 30, 60), fmt="JPEG", mode="RGB") -> bytes:
    image = Image.new(mode, size, color)
    buf = BytesIO()
    image.save(buf, format=fmt)
    return buf.getvalue()


def make_noisy_jpeg(size=(256, 256)) -> bytes:
    buf = BytesIO()
    Image.effect_noise(size, 64).convert("RGB").save(buf, format="JPEG", quality=95)
    return buf.getvalue()


def make_response(status_code: int = 200, content: bytes = b"", url: str = "http://img.test/x") -> requests.Response:
    resp = requests.Response()
    resp.status_code = status_code
    resp._content = content
    resp._content_consumed = True
    resp.url = url
    return resp


class FakeFetcher:
    def __init__(self, calls, payloads):
        self.calls = calls
        self.payloads = payloads

    def fetch(self, url):
        self.calls.append(("fetch", url))
        payload = self.payloads.get(url)
        if payload is None:
            raise FetchError(f"404 Client Error for url: {url}")
        if isinstance(payload, Exception):
            raise payload
        return payload


class FakeStore:
    def __init__(self, calls):
        self.calls = calls
        self.objects = {}
        self.error = None
        self._lock = threading.Lock()

    def store(self, jpeg_bytes):
        self.calls.append(("store", len(self.objects)))
        if self.error is not None:
            raise self.error
        with self._lock:
            url = f"http://thumbs.test/{len(self.objects)}-thumbnail.jpg"
            self.objects[url] = jpeg_bytes
        return url


class FakeCatalog:
    def __init__(self, calls, store):
        self.calls = calls
        self.store = store
        self.records = {}
        self.error = None
        self._lock = threading.Lock()

    def create(self, record):
        # Capture whether the referenced artifact already exists at write time.
        self.calls.append(("catalog", record.image_url in self.store.objects))
        if self.error is not None:
            raise self.error
        key = (record.partition_key, record.row_key)
        with self._lock:
            if key in self.records:
                raise ConflictError(f"{key} already exists")
            self.records[key] = record


class FakePublisher:
    def __init__(self, calls):
        self.calls = calls
        self.events = []
        self.error = None

    def publish(self, event):
        self.calls.append(("publish", event.subject))
        if self.error is not None:
            raise self.error
        self.events.append(event)


class FakeEnvironment:
    """Bundle of in-memory collaborators sharing one call log."""

    def __init__(self):
        self.calls = []
        self.payloads = {}
        self.fetcher = FakeFetcher(self.calls, self.payloads)
        self.store = FakeStore(self.calls)
        self.catalog = FakeCatalog(self.calls, self.store)
        self.publisher = FakePublisher(self.calls)
        self.clients = PipelineClients(
            fetcher=self.fetcher,
            store=self.store,
            catalog=self.catalog,
            publisher=self.publisher,
        )

    def stages_called(self):
        return [name for name, _ in self.calls]


@pytest.fixture
def jpeg_bytes():
    return make_image_bytes()


@pytest.fixture
def env(jpeg_bytes):
    fake = FakeEnvironment()
    fake.payloads["http://img.test/truffle.jpg"] = jpeg_bytes
    fake.payloads["http://img.test/page.html"] = b"<!doctype html><html><body>nope</body></html>"
    return fake


@pytest.fixture
def truffle_event():
    return {
        "name": "TruffleBar",
        "brand": "Meltique",
        "price": "4.50",
        "quantityAvailable": "10",
        "blobUrl": "http://img.test/truffle.jpg",
    }
