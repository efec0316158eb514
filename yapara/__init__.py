"""Parameterized tests for pytest.

`parameterized_test` expands one declaration into one individually named test
per parameter set, with the parameter values bound as locals of the body.
"""
from loguru import logger

from yapara.core.errors import (
    ArityMismatchError,
    BodySourceError,
    DeclarationError,
    DuplicateNameError,
    ParameterizeError,
    ParameterLoadError,
    ParameterNameError,
    UnsupportedContainerError,
)
from yapara.core.expand.config import ExpandConfig
from yapara.core.expand.expand_declaration import expand
from yapara.core.model import GeneratedTest, Named, named
from yapara.core.register.register_tests import TestContext
from yapara.decorators import parameterized_stub, parameterized_test, parameters_from_file

logger.disable("yapara")

__version__ = "0.1.0"

__all__ = [
    "ArityMismatchError",
    "BodySourceError",
    "DeclarationError",
    "DuplicateNameError",
    "ExpandConfig",
    "GeneratedTest",
    "Named",
    "ParameterLoadError",
    "ParameterNameError",
    "ParameterizeError",
    "TestContext",
    "UnsupportedContainerError",
    "expand",
    "named",
    "parameterized_stub",
    "parameterized_test",
    "parameters_from_file",
]
