import logging
from datetime import datetime, timedelta
from types import SimpleNamespace

import pytest

from attendance_engine.common.datetime_utils import format_hms, minutes_since_midnight, round_hours
from attendance_engine.common.devices import scoped_device
from attendance_engine.common.logging_utils import LOG_FORMAT, ROOT_LOGGER, configure_logging
from attendance_engine.common.validators import optional_bool, parse_detections, parse_position
from attendance_engine.container import EngineSettings
from attendance_engine.core.exceptions import ValidationError


class Camera:
    def __init__(self):
        self.events = []

    def open(self):
        self.events.append("open")

    def close(self):
        self.events.append("close")


def test_scoped_device_releases_on_error():
    camera = Camera()

    with pytest.raises(RuntimeError):
        with scoped_device(camera):
            raise RuntimeError("frame grab failed")

    assert camera.events == ["open", "close"]


def test_configure_logging_does_not_stack_handlers():
    configure_logging("DEBUG")
    logger = configure_logging("WARNING")

    assert logger.name == ROOT_LOGGER
    assert logger.level == logging.WARNING
    assert len(logger.handlers) == 1
    assert logger.handlers[0].formatter._fmt == LOG_FORMAT


def test_configure_logging_closes_replaced_file_handler(tmp_path):
    logger = configure_logging("INFO", log_file=str(tmp_path / "logs" / "engine.log"))
    old_file_handler = next(h for h in logger.handlers if isinstance(h, logging.FileHandler))
    logger.info("first run")

    logger = configure_logging("INFO")

    assert old_file_handler.stream is None
    assert old_file_handler not in logger.handlers
    assert (tmp_path / "logs" / "engine.log").read_text(encoding="utf-8").strip().endswith("first run")


@pytest.mark.parametrize(
    "seconds, expected",
    [(90, 0.03), (30, 0.01), (18, 0.01), (17, 0.0), (4 * 3600, 4.0)],
)
def test_round_hours_half_up(seconds, expected):
    assert round_hours(timedelta(seconds=seconds)) == expected


def test_time_helpers():
    assert minutes_since_midnight(datetime(2025, 1, 1, 9, 20, 59)) == 560
    assert format_hms(timedelta(hours=100, seconds=1)) == "100:00:01"


def test_parse_position():
    sample = parse_position({"latitude": "10.5", "longitude": 106.7, "captured_at": "2025-03-03T08:00:00"})

    assert (sample.latitude, sample.longitude, sample.accuracy) == (10.5, 106.7, None)
    assert sample.captured_at == datetime(2025, 3, 3, 8, 0)
    assert parse_position(None) is None
    with pytest.raises(ValidationError):
        parse_position({"latitude": 95, "longitude": 0})
    with pytest.raises(ValidationError):
        parse_position({"latitude": "north", "longitude": 0})


def test_parse_detections():
    faces = parse_detections([{"score": 0.9, "descriptor": [0.1, 0.2], "box": [1, 2, 3, 4]}])

    assert faces[0].embedding == (0.1, 0.2)
    assert faces[0].box == (1.0, 2.0, 3.0, 4.0)
    assert parse_detections(None) == []
    with pytest.raises(ValidationError):
        parse_detections([{"score": 0.9}])
    with pytest.raises(ValidationError):
        parse_detections("face")
    with pytest.raises(ValidationError):
        parse_detections([{"score": 0.9, "descriptor": []}])
    with pytest.raises(ValidationError):
        parse_detections([{"score": 0.9, "descriptor": [0.1, float("nan")]}])


def test_optional_bool_accepts_only_json_booleans():
    assert optional_bool(None, "skip_location_check") is False
    assert optional_bool(True, "skip_location_check") is True
    assert optional_bool(False, "skip_location_check") is False
    for value in ("false", "true", 0, 1):
        with pytest.raises(ValidationError):
            optional_bool(value, "skip_location_check")


def test_engine_settings_from_module():
    settings = EngineSettings.from_settings(SimpleNamespace(LATE_GRACE_MINUTES="5", REFRESH_FACE_TEMPLATE=False))

    assert settings.late_grace_minutes == 5
    assert settings.refresh_template is False
    assert settings.early_grace_minutes == 30
    assert settings.verify_threshold == 0.35
