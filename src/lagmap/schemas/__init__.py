"""Pydantic configuration schemas for the lagmap pipeline.

Exports
-------
resolve_config : function
    Single entrypoint for configuration resolution
InternalConfig : class
    Fully validated, authoritative runtime configuration
ParamConfig : class
    Expert defaults (complete)
UserConfig : class
    User-facing configuration (forgiving, minimal)
"""

from lagmap.schemas.resolve import resolve_config
from lagmap.schemas.internal import InternalConfig
from lagmap.schemas.param import ParamConfig
from lagmap.schemas.user import UserConfig

__all__ = [
    'resolve_config',
    'InternalConfig',
    'ParamConfig',
    'UserConfig',
]
