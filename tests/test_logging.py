from pathlib import Path

from loguru import logger

from yapara.core.expand.config import ExpandConfig
from yapara.core.expand.expand_declaration import expand
from yapara.logging import disable_logging, setup_logging


def test_library_is_silent_by_default():
    messages = []
    handler = logger.add(messages.append, level="DEBUG")
    try:
        expand("quiet", None, [{"a": 1}])
    finally:
        logger.remove(handler)
    assert messages == []


def test_setup_logging_writes_expansion_details(tmp_path: Path):
    log_file = tmp_path / "yapara.log"
    setup_logging(level="DEBUG", log_file=str(log_file))
    try:
        expand("loud", None, [{"a": "x" * 40}], config=ExpandConfig(max_name_bytes=16))
    finally:
        logger.remove()
        disable_logging()

    text = log_file.read_text(encoding="utf-8")
    assert "expanding 'loud': 1 parameter sets" in text
    assert "using 'loud[1]'" in text
