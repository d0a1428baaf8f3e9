"""命名ルールのモデル。"""

from dataclasses import dataclass
from typing import Optional
from enum import Enum


class Directive(Enum):
    """ルールが指示する処理。"""
    STRIP_PREFIX = "strip_prefix"
    KEEP_FUNCTION = "keep_function"
    KEEP_METHOD = "keep_method"
    RENAME = "rename"

    @property
    def is_role_directive(self) -> bool:
        """役割（関数/メソッド）を決めるディレクティブかを返す。"""
        return self is not Directive.RENAME


class MatchKind(Enum):
    """パターンの照合方法。"""
    EXACT = "exact"
    PREFIX = "prefix"


@dataclass(frozen=True)
class NamingRule:
    """シンボル名（または接頭辞）に対する命名ルール。"""
    pattern: str
    directive: Directive
    match: MatchKind = MatchKind.EXACT
    target_type: Optional[str] = None  # KEEP_METHOD / STRIP_PREFIX用
    new_name: Optional[str] = None  # RENAME用
    force_function_output: bool = False  # KEEP_METHOD用

    @classmethod
    def strip_prefix(
        cls,
        pattern: str,
        match: MatchKind = MatchKind.EXACT,
        target_type: Optional[str] = None
    ) -> "NamingRule":
        return cls(pattern, Directive.STRIP_PREFIX, match, target_type=target_type)

    @classmethod
    def keep_function(
        cls,
        pattern: str,
        match: MatchKind = MatchKind.EXACT
    ) -> "NamingRule":
        return cls(pattern, Directive.KEEP_FUNCTION, match)

    @classmethod
    def keep_method(
        cls,
        pattern: str,
        target_type: str,
        force_function_output: bool = False,
        match: MatchKind = MatchKind.EXACT
    ) -> "NamingRule":
        return cls(
            pattern,
            Directive.KEEP_METHOD,
            match,
            target_type=target_type,
            force_function_output=force_function_output
        )

    @classmethod
    def rename(
        cls,
        pattern: str,
        new_name: str,
        match: MatchKind = MatchKind.EXACT
    ) -> "NamingRule":
        return cls(pattern, Directive.RENAME, match, new_name=new_name)

    def matches(self, raw_name: str) -> bool:
        """シンボル名がこのルールに一致するかを判定する。"""
        if self.match is MatchKind.EXACT:
            return raw_name == self.pattern
        return raw_name.startswith(self.pattern)

    def __str__(self) -> str:
        pattern = self.pattern if self.match is MatchKind.EXACT else f"{self.pattern}*"
        detail = self.target_type or self.new_name or ""
        if detail:
            return f"{pattern} -> {self.directive.value}({detail})"
        return f"{pattern} -> {self.directive.value}"
