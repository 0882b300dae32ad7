"""Settings file handling."""

import logging

from symcalc import config_manager


def test_save_and_load(isolated_config):
    settings = config_manager.load_setting_value("all")
    settings["significant_digits"] = 6
    assert config_manager.save_setting(settings) == settings
    assert config_manager.load_setting_value("significant_digits") == 6
    assert config_manager.load_setting_value("darkmode") is False


def test_missing_file_falls_back_to_defaults(isolated_config):
    isolated_config.unlink()
    assert config_manager.load_setting_value("significant_digits") == 12
    assert config_manager.load_setting_value("all") == config_manager.DEFAULT_SETTINGS
    assert config_manager.load_setting_value("no_such_key") == 0


def test_partial_file_is_completed_with_defaults(isolated_config):
    isolated_config.write_text('{"darkmode": true}', encoding="utf-8")
    settings = config_manager.load_setting_value("all")
    assert settings["darkmode"] is True
    assert settings["default_precision_bits"] == 128


def test_corrupt_file_logs_a_warning(isolated_config, caplog):
    isolated_config.write_text("{not json", encoding="utf-8")
    with caplog.at_level(logging.WARNING, logger="symcalc.config_manager"):
        assert config_manager.load_setting_value("backend_timeout") == 10
    assert "using defaults" in caplog.text


def test_descriptions():
    descriptions = config_manager.load_setting_description("all")
    assert "darkmode" in descriptions
    assert "default_precision_bits" in descriptions
    assert config_manager.load_setting_description("no_such_key") == 0


def test_unserializable_settings_are_not_saved(caplog):
    with caplog.at_level(logging.ERROR, logger="symcalc.config_manager"):
        assert config_manager.save_setting({"darkmode": object()}) == {}
    assert "failed" in caplog.text


def test_configure_logging():
    logger = config_manager.configure_logging(debug=True)
    try:
        assert logger.name == "symcalc"
        assert logger.level == logging.DEBUG
        handlers = list(logger.handlers)
        config_manager.configure_logging(debug=False)
        assert logger.level == logging.INFO
        assert logger.handlers == handlers
    finally:
        for handler in list(logger.handlers):
            logger.removeHandler(handler)
        logger.setLevel(logging.NOTSET)
