"""命名ルールテーブル。"""

from typing import Iterable, List, Optional, Set
import re
import logging

from ..models.rule import Directive, MatchKind, NamingRule
from .errors import InvalidPatternError

logger = logging.getLogger(__name__)

IDENTIFIER_PATTERN = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


class RuleTable:
    """シンボル名から命名ルールを引くための不変テーブル。

    完全一致ルールは接頭辞ルールより優先される。接頭辞ルール同士では
    最長一致が優先され、同じ長さの場合は先に登録されたルールが選ばれる。
    """

    def __init__(self, rules: Optional[Iterable[NamingRule]] = None):
        """ルールテーブルを構築する。

        Args:
            rules: 登録順のルール

        Raises:
            InvalidPatternError: 不正なルールが含まれる場合
        """
        self._rules: List[NamingRule] = []

        for rule in rules or []:
            self._validate(rule)
            self._rules.append(rule)

        logger.debug(f"RuleTable built with {len(self._rules)} rules")

    @staticmethod
    def _validate(rule: NamingRule) -> None:
        """ルールを検証する。

        Args:
            rule: 検証するルール

        Raises:
            InvalidPatternError: パターンまたは付随情報が不正な場合
        """
        if not rule.pattern:
            raise InvalidPatternError(rule.pattern, "pattern is empty")

        if not IDENTIFIER_PATTERN.match(rule.pattern):
            raise InvalidPatternError(
                rule.pattern, "pattern must be a C identifier or identifier prefix"
            )

        if rule.directive is Directive.KEEP_METHOD and not rule.target_type:
            raise InvalidPatternError(
                rule.pattern, "keep_method requires a target type"
            )

        if rule.directive is Directive.RENAME:
            if not rule.new_name or not IDENTIFIER_PATTERN.match(rule.new_name):
                raise InvalidPatternError(
                    rule.pattern, f"rename target {rule.new_name!r} is not an identifier"
                )

    def lookup(
        self,
        raw_name: str,
        directives: Optional[Set[Directive]] = None
    ) -> Optional[NamingRule]:
        """シンボル名に適用されるルールを検索する。

        Args:
            raw_name: Cのシンボル名
            directives: 対象とするディレクティブ（省略時はすべて）

        Returns:
            一致したルール、なければNone
        """
        best: Optional[NamingRule] = None

        for rule in self._rules:
            if directives is not None and rule.directive not in directives:
                continue
            if not rule.matches(raw_name):
                continue

            if rule.match is MatchKind.EXACT:
                # 完全一致は最初のものを即採用
                return rule

            if best is None or len(rule.pattern) > len(best.pattern):
                best = rule

        return best

    @property
    def rules(self) -> List[NamingRule]:
        return list(self._rules)

    def __len__(self) -> int:
        return len(self._rules)

    def __iter__(self):
        return iter(self._rules)
