"""Progress adapters - Implementations of the ProgressPort.

Available implementations:
- TqdmProgress: Terminal progress bars
- NullProgress: No-op reporter for testing
"""

from .null_progress import NullProgress
from .tqdm_progress import TqdmProgress

__all__ = ["NullProgress", "TqdmProgress"]
