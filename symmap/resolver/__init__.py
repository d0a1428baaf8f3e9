"""宣言から最終的なバインディング名を求める名前解決モジュール。"""

from .errors import (
    SymbolMapError,
    DuplicateRawNameError,
    InvalidPatternError,
    ConfigError,
    UNKNOWN_RULE_TARGET,
)
from .rule_table import RuleTable
from .resolver import Resolver
from .disambiguator import Disambiguator

__all__ = [
    "SymbolMapError",
    "DuplicateRawNameError",
    "InvalidPatternError",
    "ConfigError",
    "UNKNOWN_RULE_TARGET",
    "RuleTable",
    "Resolver",
    "Disambiguator",
]
