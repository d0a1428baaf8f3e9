"""Naming rule loader for YAML, CSV, Excel and llcppg symMap sources."""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Set
from enum import Enum
from pathlib import Path
import logging

import pandas as pd
import yaml
from pydantic import BaseModel, Field, ValidationError

from ..models.rule import MatchKind, NamingRule
from ..resolver.errors import ConfigError

logger = logging.getLogger(__name__)

# symMapで無視を表す値
SYM_MAP_IGNORE = "-"


class DirectiveName(str, Enum):
    """ルールエントリで指定するディレクティブ名。"""
    STRIP_PREFIX = "strip_prefix"
    KEEP_FUNCTION = "keep_function"
    KEEP_METHOD = "keep_method"
    RENAME = "rename"


class RuleEntry(BaseModel):
    """外部ソースから読み込む1件のルール定義。"""

    match: str = Field(description="シンボル名、またはprefix=trueの場合は接頭辞")
    prefix: bool = Field(default=False, description="接頭辞として照合するかどうか")
    directive: DirectiveName = Field(description="適用するディレクティブ")
    target: Optional[str] = Field(default=None, description="keep_method / strip_prefixのオーナー型")
    name: Optional[str] = Field(default=None, description="renameの新しい名前")
    force_function_output: bool = Field(
        default=False,
        description="メソッド扱いでも関数として出力する（keep_method用）"
    )

    def to_rule(self) -> NamingRule:
        match = MatchKind.PREFIX if self.prefix else MatchKind.EXACT
        if self.directive is DirectiveName.STRIP_PREFIX:
            return NamingRule.strip_prefix(self.match, match, self.target)
        if self.directive is DirectiveName.KEEP_FUNCTION:
            return NamingRule.keep_function(self.match, match)
        if self.directive is DirectiveName.KEEP_METHOD:
            return NamingRule.keep_method(
                self.match, self.target, self.force_function_output, match
            )
        return NamingRule.rename(self.match, self.name, match)


@dataclass
class RuleSet:
    """読み込んだルールと無視するシンボルの集合。"""
    rules: List[NamingRule] = field(default_factory=list)
    ignored: Set[str] = field(default_factory=set)

    def extend(self, other: "RuleSet") -> None:
        self.rules.extend(other.rules)
        self.ignored.update(other.ignored)


class RulesLoader:
    """Load naming rules from various sources (YAML, CSV, Excel, symMap)."""

    DEFAULT_COLUMNS: Dict[str, str] = {
        "match": "match",
        "prefix": "prefix",
        "directive": "directive",
        "target": "target",
        "name": "name",
        "force_function_output": "force_function_output",
    }

    def load(self, config: dict) -> RuleSet:
        """Load rules based on configuration.

        Args:
            config: Rules source configuration with keys:
                - type: "yaml", "csv" or "excel"
                - path: Path to the rules file
                - sheet: Sheet name for Excel (optional)
                - columns: Column mapping (optional)

        Returns:
            Loaded RuleSet

        Raises:
            ConfigError: If the source is missing or malformed
        """
        source_type = config.get("type", "yaml").lower()
        path = config.get("path")

        if not path:
            raise ConfigError("No rules source path specified")

        path = Path(path)
        if not path.exists():
            raise ConfigError(f"Rules file not found: {path}")

        if source_type == "excel":
            return self.load_from_excel(
                str(path),
                sheet=config.get("sheet"),
                columns=config.get("columns", {})
            )
        elif source_type == "csv":
            return self.load_from_csv(
                str(path),
                columns=config.get("columns", {})
            )
        elif source_type == "yaml":
            return self.load_from_yaml(str(path))
        else:
            raise ConfigError(f"Unsupported rules source type: {source_type}")

    def load_from_yaml(self, path: str) -> RuleSet:
        """Load rules from a YAML (or JSON) file.

        The file holds either a list of rule entries, or a mapping with
        ``rules`` (list of entries) and/or ``symMap`` keys.

        Args:
            path: Path to the YAML file

        Returns:
            Loaded RuleSet
        """
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or []

        if isinstance(data, list):
            rule_set = self.load_from_entries(data)
        elif isinstance(data, dict):
            rule_set = self.load_from_entries(data.get("rules", []))
            rule_set.extend(self.from_sym_map(data.get("symMap", data.get("sym_map", {}))))
        else:
            raise ConfigError(f"Unexpected rules format in {path}")

        logger.info(f"Loaded {len(rule_set.rules)} rules from YAML: {path}")
        return rule_set

    def load_from_csv(
        self,
        path: str,
        columns: Optional[Dict[str, str]] = None,
        encoding: str = "utf-8"
    ) -> RuleSet:
        """Load rules from a CSV file.

        Args:
            path: Path to the CSV file
            columns: Column name mapping
            encoding: File encoding

        Returns:
            Loaded RuleSet
        """
        df = pd.read_csv(path, encoding=encoding, dtype=str)
        rule_set = self.load_from_entries(self._frame_to_entries(df, columns))
        logger.info(f"Loaded {len(rule_set.rules)} rules from CSV: {path}")
        return rule_set

    def load_from_excel(
        self,
        path: str,
        sheet: Optional[str] = None,
        columns: Optional[Dict[str, str]] = None
    ) -> RuleSet:
        """Load rules from an Excel file.

        Args:
            path: Path to the Excel file
            sheet: Sheet name (None for first sheet)
            columns: Column name mapping

        Returns:
            Loaded RuleSet
        """
        df = pd.read_excel(path, sheet_name=sheet or 0, dtype=str, engine="openpyxl")
        rule_set = self.load_from_entries(self._frame_to_entries(df, columns))
        logger.info(f"Loaded {len(rule_set.rules)} rules from Excel: {path}")
        return rule_set

    def _frame_to_entries(
        self,
        df: "pd.DataFrame",
        columns: Optional[Dict[str, str]] = None
    ) -> List[Dict[str, Any]]:
        """Convert a DataFrame into raw rule entries, skipping empty cells."""
        mapping = dict(self.DEFAULT_COLUMNS)
        mapping.update(columns or {})

        entries = []
        for _, row in df.iterrows():
            entry = {}
            for key, column in mapping.items():
                value = row.get(column)
                if value is None or pd.isna(value):
                    continue
                value = str(value).strip()
                if value:
                    entry[key] = value
            if entry.get("match"):
                entries.append(entry)
        return entries

    def load_from_entries(self, entries: Iterable[Dict[str, Any]]) -> RuleSet:
        """Validate raw rule entries and convert them to NamingRules.

        Args:
            entries: Raw entries (dicts)

        Returns:
            RuleSet in entry order

        Raises:
            ConfigError: If an entry is invalid
        """
        rule_set = RuleSet()
        for index, raw in enumerate(entries):
            try:
                entry = RuleEntry.model_validate(raw)
            except ValidationError as e:
                raise ConfigError(f"Invalid rule entry #{index + 1} {raw!r}: {e}")
            rule_set.rules.append(entry.to_rule())
        return rule_set

    def from_sym_map(self, sym_map: Dict[str, str]) -> RuleSet:
        """Convert an llcppg symMap into rules.

        - ``"-"``: the symbol is ignored
        - ``".Name"``: method of the inferred owner, renamed to Name
        - ``"Name"``: plain function, renamed to Name

        Args:
            sym_map: Mapping from C symbol to target name

        Returns:
            RuleSet
        """
        rule_set = RuleSet()

        for raw_name, value in (sym_map or {}).items():
            value = (value or "").strip()

            if value == SYM_MAP_IGNORE:
                rule_set.ignored.add(raw_name)
                continue

            if value.startswith("."):
                rule_set.rules.append(NamingRule.strip_prefix(raw_name))
                method_name = value[1:]
                if method_name:
                    rule_set.rules.append(NamingRule.rename(raw_name, method_name))
                continue

            rule_set.rules.append(NamingRule.keep_function(raw_name))
            if value and value != raw_name:
                rule_set.rules.append(NamingRule.rename(raw_name, value))

        logger.debug(
            f"symMap converted: {len(rule_set.rules)} rules, "
            f"{len(rule_set.ignored)} ignored symbols"
        )
        return rule_set
