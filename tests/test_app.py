from clipstore.app import build_services
from clipstore.config import DatabaseSettings, StoreSettings
from clipstore.hashing import blob_name, content_hash
from clipstore.preferences import Preferences, dump_preferences


def test_build_services_defaults_database_into_data_dir(tmp_path):
    services = build_services(StoreSettings(data_dir=tmp_path), DatabaseSettings())
    try:
        assert (tmp_path / "clipstore.db").exists()
        assert (tmp_path / "preferences.json").exists()
        assert services.store.max_records == 200
        assert services.commands.store is services.store
        assert services.collector.store is services.store
    finally:
        services.close()


def test_persisted_bound_wins(tmp_path):
    settings = StoreSettings(data_dir=tmp_path, max_records=50)
    dump_preferences(settings.preferences_path, Preferences(max_records=3))

    services = build_services(settings, DatabaseSettings())
    try:
        assert services.store.max_records == 3
        assert services.commands.get_config().max_records == 3
    finally:
        services.close()


def test_startup_repairs_orphans(tmp_path):
    settings = StoreSettings(data_dir=tmp_path)
    settings.image_dir.mkdir(parents=True)
    orphan = blob_name(content_hash(b"left behind"), "png")
    (settings.image_dir / orphan).write_bytes(b"left behind")

    services = build_services(settings, DatabaseSettings())
    try:
        assert services.startup_report.removed == [orphan]
    finally:
        services.close()


def test_history_survives_restart(tmp_path, png_bytes):
    settings = StoreSettings(data_dir=tmp_path)
    services = build_services(settings, DatabaseSettings())
    text = services.ingestion.ingest_text("persisted").record
    image = services.ingestion.ingest_image(png_bytes).record
    services.commands.pin_record(text.id)
    services.close()

    restarted = build_services(settings, DatabaseSettings())
    try:
        records = restarted.commands.filter_records()
        assert [r.id for r in records] == [text.id, image.id]
        assert records[0].pinned
        assert restarted.startup_report.removed == []
        assert restarted.store.blob_path(image).read_bytes() == png_bytes
    finally:
        restarted.close()


def test_watcher_uses_shared_ingestion(tmp_path):
    services = build_services(StoreSettings(data_dir=tmp_path), DatabaseSettings())
    try:
        watcher = services.watcher(lambda: None)
        assert watcher.ingestion is services.ingestion
        assert watcher.settings.poll_interval == 1.0
    finally:
        services.close()
