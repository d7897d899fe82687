"""
Tests for logging setup.
"""
import io
import logging

import pytest

from vesper_revenue import logging_config
from vesper_revenue.logging_config import (
    ConciseFormatter,
    NOISY_LOGGERS,
    PACKAGE_LOGGER,
    get_logger,
    setup_logging,
)


@pytest.fixture
def package_logger():
    app_logger = logging.getLogger(PACKAGE_LOGGER)
    handlers, level, propagate = list(app_logger.handlers), app_logger.level, app_logger.propagate
    yield app_logger
    app_logger.handlers[:] = handlers
    app_logger.setLevel(level)
    app_logger.propagate = propagate


@pytest.fixture
def debug_log(tmp_path, monkeypatch):
    path = tmp_path / "revenue_debug.log"
    monkeypatch.setattr(logging_config, "DEBUG_LOG_PATH", path)
    services_logger = logging.getLogger('vesper_revenue.services')
    yield path
    for handler in list(services_logger.handlers):
        if handler.name == 'revenue_debug_file':
            handler.close()
            services_logger.removeHandler(handler)


def make_record(name, level, message):
    return logging.LogRecord(name, level, __file__, 1, message, None, None)


class TestSetupLogging:

    def test_console_handler_on_package_logger_only(self, package_logger):
        root_handlers = list(logging.getLogger().handlers)
        stream = io.StringIO()

        app_logger = setup_logging(logging.DEBUG, stream=stream)
        logging.getLogger('vesper_revenue.services.handlers').info("pool ticked")

        assert app_logger is package_logger
        assert logging.getLogger().handlers == root_handlers
        assert stream.getvalue() == "[I] pool ticked\n"

    def test_repeated_setup_keeps_one_console_handler(self, package_logger):
        setup_logging(stream=io.StringIO())
        setup_logging(stream=io.StringIO())

        consoles = [h for h in package_logger.handlers if h.name == 'revenue_console']
        assert len(consoles) == 1

    def test_request_loggers_are_quieted(self, package_logger):
        setup_logging(stream=io.StringIO())

        for name in NOISY_LOGGERS:
            assert logging.getLogger(name).level == logging.WARNING


class TestConciseFormatter:

    def test_plain_tags_without_color(self):
        formatter = ConciseFormatter(use_color=False)
        record = make_record('vesper_revenue.services.price_oracle', logging.WARNING, "using 1:1")

        assert formatter.format(record) == "[W] using 1:1"

    def test_errors_carry_short_logger_name(self):
        formatter = ConciseFormatter(use_color=False)
        record = make_record('vesper_revenue.services.pool_ledger', logging.ERROR, "save failed")

        assert formatter.format(record) == "[E] pool_ledger: save failed"

    def test_color_codes_on_terminal(self):
        record = make_record('vesper_revenue', logging.INFO, "done")
        assert ConciseFormatter(use_color=True).format(record).startswith("\033[32m[I]")


class TestGetLogger:

    def test_foreign_names_are_namespaced(self):
        assert get_logger('replay').name == 'vesper_revenue.replay'
        assert get_logger('vesper_revenue.services.handlers').name == 'vesper_revenue.services.handlers'

    def test_script_module_maps_to_cli(self):
        assert get_logger('__main__').name == 'vesper_revenue.cli'


class TestDebugFile:

    def test_debug_file_handler_added_once(self, debug_log):
        logging_config.setup_handler_debug_logging()
        logging_config.setup_handler_debug_logging()

        services_logger = logging.getLogger('vesper_revenue.services')
        file_handlers = [h for h in services_logger.handlers if h.name == 'revenue_debug_file']
        assert len(file_handlers) == 1

        logging.getLogger('vesper_revenue.services.handlers').debug("tick handled")
        file_handlers[0].flush()
        assert "tick handled" in debug_log.read_text()
