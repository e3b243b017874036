"""Core types shared by every layer."""

from .config import ConfigError, RunConfig, config_from_mapping, load_config_table
from .errors import ErrorCode
from .result import Err, Ok, Result, collect, is_err, is_ok

__all__ = [
    # config
    "ConfigError",
    "RunConfig",
    "config_from_mapping",
    "load_config_table",
    # errors
    "ErrorCode",
    # result
    "Err",
    "Ok",
    "Result",
    "collect",
    "is_err",
    "is_ok",
]
