"""Configuration module for tagfields."""
from pydantic import ValidationError

from .loader import load_config
from .schemas import IntrospectionConfig, import_dotted

__all__ = [
    "IntrospectionConfig",
    "ValidationError",
    "import_dotted",
    "load_config",
]
