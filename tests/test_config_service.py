import json

from holemark.services.config_service import DEFAULT_CONFIG, ConfigService


def test_missing_file_is_created_with_defaults(tmp_path):
    path = tmp_path / "nested" / "config.json"
    config = ConfigService(path)
    assert path.exists()
    assert config.theme == "dark"
    assert config.jpeg_quality == 92
    assert config.log_level == "INFO"
    assert config.max_buffer_dimension == 4096
    assert config.measurement == DEFAULT_CONFIG["measurement"]


def test_partial_file_is_merged_with_defaults(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({
        "theme": "light",
        "measurement": {"reference_unit": "cm"},
    }))

    config = ConfigService(path)

    assert config.theme == "light"
    assert config.measurement["reference_unit"] == "cm"
    assert config.measurement["target_distance"] == 100.0
    # Missing keys are written back
    assert "jpeg_quality" in json.loads(path.read_text())


def test_corrupted_file_is_recreated(tmp_path):
    path = tmp_path / "config.json"
    path.write_text("{not json")

    config = ConfigService(path)

    assert config.theme == "dark"
    assert json.loads(path.read_text()) == DEFAULT_CONFIG


def test_non_object_file_is_recreated(tmp_path):
    path = tmp_path / "config.json"
    path.write_text("[1, 2, 3]")
    ConfigService(path)
    assert json.loads(path.read_text())["theme"] == "dark"


def test_measurement_round_trips_through_disk(config_service):
    values = dict(config_service.measurement, target_distance=300.0, angular_unit="mrad")
    config_service.set_measurement(values)
    config_service.save()

    reloaded = ConfigService(config_service.path)
    assert reloaded.measurement["target_distance"] == 300.0
    assert reloaded.measurement["angular_unit"] == "mrad"


def test_set_is_in_memory_until_saved(config_service):
    config_service.set("jpeg_quality", 50)
    assert config_service.jpeg_quality == 50
    assert ConfigService(config_service.path).jpeg_quality == 92
