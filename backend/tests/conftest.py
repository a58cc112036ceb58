import pytest
from loguru import logger


@pytest.fixture(autouse=True)
def _drop_log_sinks():
    # cli.main / create_app attach sinks to the captured stderr of the running test
    yield
    logger.remove()
