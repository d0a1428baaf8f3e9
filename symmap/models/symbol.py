"""名前解決結果のモデル。"""

from dataclasses import dataclass, field, replace
from typing import List, Optional, Tuple
from enum import Enum

from .declaration import FunctionDecl


class RoleKind(Enum):
    """解決後シンボルの概念上の役割。"""
    FUNCTION = "function"
    METHOD = "method"


@dataclass(frozen=True)
class Role:
    """関数、またはオーナー型に属するメソッド。"""
    kind: RoleKind
    owner_type: Optional[str] = None

    @classmethod
    def function(cls) -> "Role":
        return cls(RoleKind.FUNCTION)

    @classmethod
    def method(cls, owner_type: str) -> "Role":
        return cls(RoleKind.METHOD, owner_type)

    @property
    def is_method(self) -> bool:
        return self.kind is RoleKind.METHOD

    def __str__(self) -> str:
        if self.is_method:
            return f"Method({self.owner_type})"
        return "Function"


@dataclass(frozen=True)
class ResolvedSymbol:
    """1つの関数宣言に対する名前解決結果。

    final_nameはResolverではbase_nameと同じ値で生成され、
    Disambiguatorによって一度だけ書き換えられる。
    """
    source_decl: FunctionDecl
    base_name: str
    final_name: str
    role: Role
    emit_as_function: bool = False

    @property
    def raw_name(self) -> str:
        return self.source_decl.raw_name

    @property
    def symbol_name(self) -> str:
        return self.source_decl.symbol_name

    @property
    def emitted_as_method(self) -> bool:
        """出力上メソッドとして扱われるかを返す。"""
        return self.role.is_method and not self.emit_as_function

    def scope(self) -> Tuple[str, ...]:
        """重複排除のスコープキーを返す。"""
        if self.emitted_as_method:
            return ("method", self.role.owner_type)
        return ("function",)

    def with_final_name(self, final_name: str) -> "ResolvedSymbol":
        return replace(self, final_name=final_name)

    def __str__(self) -> str:
        suffix = " [emit as function]" if self.emit_as_function else ""
        return f"{self.raw_name} -> {self.final_name} ({self.role}){suffix}"


@dataclass(frozen=True)
class ResolutionWarning:
    """解決時に記録された致命的でない警告。"""
    kind: str
    raw_name: str
    message: str

    def __str__(self) -> str:
        return f"[{self.kind}] {self.raw_name}: {self.message}"


@dataclass
class ResolutionResult:
    """パイプライン全体の出力。"""
    symbols: List[ResolvedSymbol] = field(default_factory=list)
    warnings: List[ResolutionWarning] = field(default_factory=list)
