"""ヘッダーから抽出したC宣言のモデル。"""

from dataclasses import dataclass, field
from typing import Optional, Tuple
from enum import Enum
import os


@dataclass(frozen=True)
class SourceLocation:
    """ソースコードの位置情報。"""
    file_path: str
    line: int
    column: Optional[int] = None

    def __post_init__(self):
        # Windowsパスを正規化
        object.__setattr__(self, "file_path", os.path.normpath(self.file_path))

    def __str__(self) -> str:
        if self.column:
            return f"{self.file_path}:{self.line}:{self.column}"
        return f"{self.file_path}:{self.line}"


@dataclass(frozen=True)
class Parameter:
    """関数パラメータ。"""
    type_name: str
    name: Optional[str] = None
    size_hint: Optional[str] = None  # 長さを表す後続パラメータ名

    def names_type(self, type_name: str) -> bool:
        """パラメータ型が指定された型名を参照しているかを判定する。

        `const Foo *` や `struct Foo *` のような修飾付きの型も対象とする。

        Args:
            type_name: 判定する型名

        Returns:
            型名を参照していればTrue
        """
        tokens = self.type_name.replace("*", " ").replace("&", " ").split()
        return type_name in tokens

    def __str__(self) -> str:
        if self.name:
            return f"{self.type_name} {self.name}"
        return self.type_name


@dataclass(frozen=True)
class TypeDecl:
    """構造体などの型宣言。"""
    name: str
    fields_known: bool = False  # Falseの場合は不透明型
    location: Optional[SourceLocation] = None

    def __str__(self) -> str:
        kind = "struct" if self.fields_known else "opaque"
        return f"{kind} {self.name}"


class MemberKind(Enum):
    """C++クラスのメンバー関数の種別。"""
    METHOD = "method"
    CONSTRUCTOR = "constructor"
    DESTRUCTOR = "destructor"


@dataclass(frozen=True)
class FunctionDecl:
    """関数宣言。

    C++のメンバー関数はmember_ofに所属クラス名を持つ。mangled_nameは
    C++としてパースした場合のみ設定され、ライブラリのシンボル名と対応する。
    """
    raw_name: str
    parameters: Tuple[Parameter, ...] = field(default_factory=tuple)
    return_type: Optional[str] = None
    candidate_owner_type: Optional[TypeDecl] = None
    location: Optional[SourceLocation] = None
    mangled_name: Optional[str] = None
    member_of: Optional[str] = None
    member_kind: Optional[MemberKind] = None

    @property
    def symbol_name(self) -> str:
        """ライブラリ上のシンボル名（マングル名、なければCの名前）を返す。"""
        return self.mangled_name or self.raw_name

    @property
    def is_member(self) -> bool:
        return self.member_of is not None

    @property
    def has_known_parameters(self) -> bool:
        """パラメータ情報が存在するかを返す。"""
        return len(self.parameters) > 0

    def prototype(self) -> str:
        """C/C++形式のプロトタイプ文字列を返す。"""
        params = ", ".join(p.type_name for p in self.parameters)
        name = f"{self.member_of}::{self.raw_name}" if self.is_member else self.raw_name
        return f"{name}({params})"

    def __str__(self) -> str:
        if self.location:
            return f"{self.prototype()} ({self.location})"
        return self.prototype()
