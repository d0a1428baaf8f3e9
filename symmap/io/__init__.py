"""ルール入力とシンボルテーブル出力モジュール。"""

from .rules_loader import RulesLoader, RuleEntry, RuleSet
from .symbol_table_writer import SymbolTableWriter
from .excel_writer import ExcelWriter
from .library_symbols import LibrarySymbolReader, LibrarySymbolError

__all__ = [
    "RulesLoader",
    "RuleEntry",
    "RuleSet",
    "SymbolTableWriter",
    "ExcelWriter",
    "LibrarySymbolReader",
    "LibrarySymbolError",
]
