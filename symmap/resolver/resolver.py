"""関数宣言に命名ルールを適用して候補名と役割を決定する。"""

from typing import Dict, Iterable, List, Optional, Sequence, Tuple
import logging

from ..models.declaration import FunctionDecl, MemberKind, TypeDecl
from ..models.rule import Directive, NamingRule
from ..models.symbol import ResolutionWarning, ResolvedSymbol, Role
from .errors import DuplicateRawNameError, UNKNOWN_RULE_TARGET
from .names import NAME_STYLES, apply_style, remove_prefixed_name
from .rule_table import RuleTable

logger = logging.getLogger(__name__)

ROLE_DIRECTIVES = {d for d in Directive if d.is_role_directive}
RENAME_DIRECTIVES = {d for d in Directive if not d.is_role_directive}

# C++の特殊メンバー関数の名前
CONSTRUCTOR_NAME = "Init"
DESTRUCTOR_NAME = "Dispose"


class Resolver:
    """関数宣言ごとに候補名と役割（関数/メソッド）を求める。

    宣言間の依存はなく、重複排除は行わない。名前の衝突は
    Disambiguatorが宣言順に解消する。
    """

    def __init__(
        self,
        types: Iterable[TypeDecl],
        rule_table: Optional[RuleTable] = None,
        trim_prefixes: Sequence[str] = (),
        name_style: str = "none",
        receiver_check: bool = False
    ):
        """Resolverを初期化する。

        Args:
            types: 既知の型宣言
            rule_table: 命名ルールテーブル（省略時は空）
            trim_prefixes: 通常関数から除去する接頭辞
            name_style: 導出名の表記スタイル（none, camel, export）
            receiver_check: 第1引数がオーナー型でないメソッドを関数として出力する
        """
        if name_style not in NAME_STYLES:
            raise ValueError(f"Unknown name style: {name_style}")

        self._types: Dict[str, TypeDecl] = {t.name: t for t in types}
        self.rule_table = rule_table if rule_table is not None else RuleTable()
        self.trim_prefixes = list(trim_prefixes)
        self.name_style = name_style
        self.receiver_check = receiver_check
        self.warnings: List[ResolutionWarning] = []

    def infer_owner(self, raw_name: str) -> Optional[TypeDecl]:
        """シンボル名の`<TypeName>_`接頭辞からオーナー型を推定する。

        複数の型名が一致する場合は最長のものを採用する。

        Args:
            raw_name: Cのシンボル名

        Returns:
            推定されたオーナー型、なければNone
        """
        best: Optional[TypeDecl] = None
        for name, type_decl in self._types.items():
            prefix = f"{name}_"
            if len(raw_name) > len(prefix) and raw_name.startswith(prefix):
                if best is None or len(name) > len(best.name):
                    best = type_decl
        return best

    def resolve(self, decl: FunctionDecl) -> ResolvedSymbol:
        """1つの関数宣言を解決する。

        Args:
            decl: 関数宣言

        Returns:
            final_nameがbase_nameと等しいResolvedSymbol
        """
        if decl.is_member:
            return self._resolve_member(decl)

        raw_name = decl.raw_name
        owner = decl.candidate_owner_type or self.infer_owner(raw_name)
        role_rule = self.rule_table.lookup(raw_name, ROLE_DIRECTIVES)
        rename_rule = self.rule_table.lookup(raw_name, RENAME_DIRECTIVES)

        base_name, role, emit_as_function, verbatim = self._apply_role_rule(
            decl, owner, role_rule
        )

        # メソッドにできない宣言は関数として出力する
        if (self.receiver_check and role.is_method and not emit_as_function
                and decl.has_known_parameters
                and not decl.parameters[0].names_type(role.owner_type)):
            logger.debug(
                f"{raw_name}: first parameter '{decl.parameters[0]}' "
                f"is not a {role.owner_type} receiver, emitting as function"
            )
            base_name, emit_as_function, verbatim = raw_name, True, True
            # 改名はメソッド名としての指定なので適用しない
            rename_rule = None

        if not verbatim:
            base_name = apply_style(base_name, self.name_style)

        if rename_rule is not None:
            base_name = rename_rule.new_name

        symbol = ResolvedSymbol(
            source_decl=decl,
            base_name=base_name,
            final_name=base_name,
            role=role,
            emit_as_function=emit_as_function
        )
        logger.debug(f"Resolved {symbol}")
        return symbol

    def _resolve_member(self, decl: FunctionDecl) -> ResolvedSymbol:
        """C++クラスのメンバー関数を所属クラスのメソッドとして解決する。

        コンストラクタはInit、デストラクタはDisposeになる。
        改名ルールはマングル名で検索する。
        """
        if decl.member_kind is MemberKind.CONSTRUCTOR:
            base_name = CONSTRUCTOR_NAME
        elif decl.member_kind is MemberKind.DESTRUCTOR:
            base_name = DESTRUCTOR_NAME
        else:
            base_name = apply_style(decl.raw_name, self.name_style)

        rename_rule = self.rule_table.lookup(decl.symbol_name, RENAME_DIRECTIVES)
        if rename_rule is not None:
            base_name = rename_rule.new_name

        symbol = ResolvedSymbol(
            source_decl=decl,
            base_name=base_name,
            final_name=base_name,
            role=Role.method(decl.member_of)
        )
        logger.debug(f"Resolved member {symbol}")
        return symbol

    def _apply_role_rule(
        self,
        decl: FunctionDecl,
        owner: Optional[TypeDecl],
        rule: Optional[NamingRule]
    ) -> Tuple[str, Role, bool, bool]:
        """役割ディレクティブを適用する。

        Returns:
            (base_name, role, emit_as_function, verbatim)のタプル。
            verbatimは名前をCのまま保持すべきかを示す。
        """
        raw_name = decl.raw_name

        if rule is None:
            if owner is not None:
                return self._strip(raw_name, owner.name), Role.method(owner.name), False, False
            trimmed = remove_prefixed_name(raw_name, self.trim_prefixes) or raw_name
            return trimmed, Role.function(), False, False

        if rule.directive is Directive.KEEP_FUNCTION:
            return raw_name, Role.function(), False, True

        if rule.directive is Directive.STRIP_PREFIX:
            target = rule.target_type or (owner.name if owner else None)
            if target is None or target not in self._types:
                self._warn_unknown_target(raw_name, rule, target)
                return raw_name, Role.function(), False, True
            return self._strip(raw_name, target), Role.method(target), False, False

        # KEEP_METHOD
        target = rule.target_type
        if target not in self._types:
            self._warn_unknown_target(raw_name, rule, target)
            return raw_name, Role.function(), False, True
        if rule.force_function_output:
            return raw_name, Role.method(target), True, True
        return self._strip(raw_name, target), Role.method(target), False, False

    @staticmethod
    def _strip(raw_name: str, type_name: str) -> str:
        prefix = f"{type_name}_"
        if len(raw_name) > len(prefix) and raw_name.startswith(prefix):
            return raw_name[len(prefix):]
        return raw_name

    def _warn_unknown_target(
        self,
        raw_name: str,
        rule: NamingRule,
        target: Optional[str]
    ) -> None:
        message = (
            f"rule '{rule}' references unknown type {target!r}, "
            "falling back to function"
        )
        self.warnings.append(ResolutionWarning(UNKNOWN_RULE_TARGET, raw_name, message))
        logger.warning(f"{raw_name}: {message}")

    def resolve_all(self, decls: Sequence[FunctionDecl]) -> List[ResolvedSymbol]:
        """宣言順にすべての関数宣言を解決する。

        Args:
            decls: 宣言順の関数宣言

        Returns:
            宣言と同じ順序のResolvedSymbolのリスト

        Raises:
            DuplicateRawNameError: 同名の宣言が含まれる場合
        """
        self.check_duplicates(decls)
        self.warnings = []
        return [self.resolve(decl) for decl in decls]

    @staticmethod
    def check_duplicates(decls: Sequence[FunctionDecl]) -> None:
        """同名の関数宣言がないことを確認する。

        Raises:
            DuplicateRawNameError: 同名の宣言が含まれる場合
        """
        seen: Dict[str, FunctionDecl] = {}
        for decl in decls:
            if decl.symbol_name in seen:
                raise DuplicateRawNameError(seen[decl.symbol_name], decl)
            seen[decl.symbol_name] = decl
