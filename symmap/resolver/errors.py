"""名前解決のエラー定義。"""

from typing import Optional

from ..models.declaration import FunctionDecl

# 致命的でない警告の種別
UNKNOWN_RULE_TARGET = "UnknownRuleTarget"


class SymbolMapError(Exception):
    """シンボルマッピング処理の基底エラー。"""
    pass


class DuplicateRawNameError(SymbolMapError):
    """同じシンボル名の関数宣言が複数存在する。"""

    def __init__(self, first: FunctionDecl, second: FunctionDecl):
        self.raw_name = first.symbol_name
        self.first = first
        self.second = second
        super().__init__(
            f"Duplicate symbol '{self.raw_name}': "
            f"declared at {self._where(first)} and {self._where(second)}"
        )

    @staticmethod
    def _where(decl: FunctionDecl) -> str:
        return str(decl.location) if decl.location else "<unknown>"


class InvalidPatternError(SymbolMapError):
    """ルールのパターンが空、または不正。"""

    def __init__(self, pattern: Optional[str], reason: str):
        self.pattern = pattern
        self.reason = reason
        super().__init__(f"Invalid rule pattern {pattern!r}: {reason}")


class ConfigError(SymbolMapError):
    """設定やルールソースの読み込みエラー。"""
    pass
