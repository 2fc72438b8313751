from pydantic import ValidationError
import pytest

from thumbnail_service import clients as clients_module
from thumbnail_service import config
from thumbnail_service.catalog import CatalogWriter
from thumbnail_service.publisher import NotificationPublisher
from thumbnail_service.storage import ArtifactStore


def _settings(**overrides):
    values = dict(
        s3_endpoint="http://minio.test",
        aws_access_key_id="key",
        aws_secret_access_key="secret",
        aws_region="us-east-1",
        thumbnail_bucket="thumbs",
        catalog_table="products",
        dynamodb_endpoint="http://dynamo.test",
        notification_endpoint="http://topic.test/api/events",
        notification_access_key="topic-key",
    )
    values.update(overrides)
    return config.Settings(_env_file=None, **values)


def test_defaults_match_thumbnail_contract():
    settings = config.Settings(_env_file=None)
    assert (settings.thumbnail_width, settings.thumbnail_height) == (150, 150)
    assert settings.max_concurrency >= 1
    assert settings.timeout == (5.0, 30.0)


def test_settings_read_environment(monkeypatch):
    monkeypatch.setenv("MAX_CONCURRENCY", "8")
    monkeypatch.setenv("THUMBNAIL_BUCKET", "from-env")
    settings = config.Settings(_env_file=None)
    assert settings.max_concurrency == 8
    assert settings.thumbnail_bucket == "from-env"


@pytest.mark.parametrize(
    "field, value",
    [("max_concurrency", 0), ("jpeg_quality", 100), ("thumbnail_width", 0)],
)
def test_settings_reject_out_of_range_values(field, value):
    with pytest.raises(ValidationError):
        config.Settings(_env_file=None, **{field: value})


def test_build_clients_wires_every_collaborator():
    bundle = clients_module.build_clients(_settings(thumbnail_width=64, jpeg_quality=70))
    assert isinstance(bundle.store, ArtifactStore)
    assert isinstance(bundle.catalog, CatalogWriter)
    assert isinstance(bundle.publisher, NotificationPublisher)
    assert (bundle.width, bundle.height, bundle.quality) == (64, 150, 70)


def test_build_clients_requires_notification_endpoint():
    with pytest.raises(RuntimeError, match="Notification"):
        clients_module.build_clients(_settings(notification_endpoint=None))


def test_build_clients_requires_catalog_table():
    with pytest.raises(RuntimeError, match="Catalog"):
        clients_module.build_clients(_settings(catalog_table=None))


def test_get_clients_builds_once(monkeypatch):
    built = []

    def fake_build(settings):
        built.append(settings)
        return object()

    monkeypatch.setattr(clients_module, "_CLIENTS", None)
    monkeypatch.setattr(clients_module, "build_clients", fake_build)
    monkeypatch.setattr(config, "get_settings", lambda: _settings())

    first = clients_module.get_clients()
    assert clients_module.get_clients() is first
    assert len(built) == 1
