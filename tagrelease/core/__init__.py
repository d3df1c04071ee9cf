"""Core types: results, exit codes, run configuration."""

from .config import (
    AssetPolicy,
    AssetPolicyKind,
    ConfigError,
    RunConfig,
    TagStrategy,
    load_run_config,
)
from .errors import ErrorCode
from .result import Err, Ok, Result

__all__ = [
    # config
    "AssetPolicy",
    "AssetPolicyKind",
    "ConfigError",
    "RunConfig",
    "TagStrategy",
    "load_run_config",
    # errors
    "ErrorCode",
    # result
    "Err",
    "Ok",
    "Result",
]
