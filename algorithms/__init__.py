from .math_tools import MathTools
from .session_metrics import SessionMetrics

__all__ = ["MathTools", "SessionMetrics"]
