__version__ = "0.1.0"

from .heuristic import summarize  # noqa: E402
from .scoring import score  # noqa: E402
from .signals import SignalError, aggregate  # noqa: E402
from .signature import scan  # noqa: E402

__all__ = ["scan", "score", "aggregate", "summarize", "SignalError", "__version__"]
