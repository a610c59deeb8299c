import os
from pathlib import Path

import pytest


def pytest_addoption(parser):
    parser.addoption(
        "--env",
        action="store",
        default="test",
        help="Config environment to run tests on",
    )


def pytest_sessionstart(session):
    """Select the config overlay before any domain module is imported."""
    os.environ["PROTEAN_ENV"] = session.config.option.env


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their directory location."""
    for item in items:
        test_path = Path(item.fspath)

        if "/domain/" in str(test_path):
            item.add_marker(pytest.mark.domain)
        elif "/application/" in str(test_path):
            item.add_marker(pytest.mark.application)
        elif "/integration/" in str(test_path):
            item.add_marker(pytest.mark.integration)
            # Integration tests are often slower
            if not any(m.name == "fast" for m in item.iter_markers()):
                item.add_marker(pytest.mark.slow)


@pytest.fixture()
def notifier():
    """A recording notifier installed for the duration of one test."""
    from realtime import reset_notifier, set_notifier
    from realtime.fake_adapter import RecordingNotifier

    recording = RecordingNotifier()
    set_notifier(recording)
    yield recording
    reset_notifier()


@pytest.fixture(autouse=True)
def run_around_tests():
    """Reset process-wide adapters after every test."""
    yield

    from ordering.catalog import reset_catalog
    from realtime import reset_notifier

    reset_catalog()
    reset_notifier()
