"""Child process supervision."""

from scanwrap.process.supervisor import launch

__all__ = ["launch"]
