"""calcexpr - editable calculator expressions with exact and arbitrary precision evaluation."""

import logging

from . import config_manager

logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())
if config_manager.load_setting_value("debug"):
    logger.setLevel(logging.DEBUG)

from .error import MathError, SyntaxError, CalculationError, FormatError  # noqa: E402
from .KeyMaps import Key  # noqa: E402
from .Expression import Expression  # noqa: E402
from .MathEngine import EvalResult  # noqa: E402
from .Evaluator import Evaluator  # noqa: E402
from . import Serializer  # noqa: E402

__version__ = "1.0.0"

__all__ = [
    "MathError",
    "SyntaxError",
    "CalculationError",
    "FormatError",
    "Key",
    "Expression",
    "EvalResult",
    "Evaluator",
    "Serializer",
]
