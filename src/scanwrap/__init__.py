"""scanwrap — dispatch-and-supervision layer for the scanning CLI."""

__all__ = [
    "__version__",
    "dispatch",
    "load_config",
    "DispatchConfig",
]
__version__ = "2.0.0"

# Programmatic entrypoints — see core/runner.py.
from scanwrap.core.config import DispatchConfig, load_config  # noqa: E402, F401
from scanwrap.core.runner import dispatch  # noqa: E402, F401
