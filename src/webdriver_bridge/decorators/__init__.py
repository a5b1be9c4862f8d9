# webdriver_bridge/decorators/__init__.py
#
# Re-exports decorators from their respective modules.

from .phase import in_phase

__all__ = [
    "in_phase",
]
