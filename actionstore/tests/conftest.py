import logging

import pytest

from actionstore.config import StoreConfig
from actionstore.store import Store


@pytest.fixture
def store():
    """Fresh store with logging off, independent of the environment."""
    return Store(config=StoreConfig())


@pytest.fixture
def restore_root_logger():
    """Undo handler and level changes made by setup_logging()."""
    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    yield
    for handler in root.handlers[:]:
        root.removeHandler(handler)
    for handler in handlers:
        root.addHandler(handler)
    root.setLevel(level)
