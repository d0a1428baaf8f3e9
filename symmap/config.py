"""設定管理モジュール。"""

from dataclasses import dataclass, field, fields
from typing import List, Dict, Optional, Any
from pathlib import Path
import logging

import yaml

from .resolver.names import NAME_STYLES

logger = logging.getLogger(__name__)


@dataclass
class Config:
    """アプリケーション設定。

    llcppg.cfg（JSON）とYAMLの両方を読み込める。llcppg形式のキー
    （include, cflags, trimPrefixes, symMap）も受け付ける。
    """

    # パッケージ名
    name: str = ""

    # 解析対象ヘッダー
    headers: List[str] = field(default_factory=list)

    # ヘッダーパース用インクルードパス
    include_paths: List[str] = field(default_factory=list)

    # 追加のコンパイラ引数
    compiler_args: List[str] = field(default_factory=list)
    cplusplus: bool = False
    libclang_path: Optional[str] = None

    # リンク対象ライブラリ（設定時はエクスポートされたシンボルのみ出力）
    libs: str = ""

    # 名前解決設定
    trim_prefixes: List[str] = field(default_factory=list)
    sym_map: Dict[str, str] = field(default_factory=dict)
    rules_source: Dict[str, Any] = field(default_factory=dict)
    rules: List[Dict[str, Any]] = field(default_factory=list)
    name_style: str = "none"
    receiver_check: bool = False

    # 出力設定
    output: str = "llcppg.symb.json"
    report: Optional[str] = None

    # ロギング設定
    log_level: str = "INFO"
    log_file: Optional[str] = None

    # 相対パスの基準ディレクトリ
    base_dir: str = "."

    # llcppg.cfgのキー名 -> 属性名
    KEY_ALIASES = {
        "include": "headers",
        "trimPrefixes": "trim_prefixes",
        "symMap": "sym_map",
        "rulesSource": "rules_source",
        "nameStyle": "name_style",
        "receiverCheck": "receiver_check",
        "libclangPath": "libclang_path",
        "logLevel": "log_level",
        "logFile": "log_file",
    }

    @classmethod
    def from_yaml(cls, file_path: str) -> "Config":
        """YAML（またはJSON）ファイルから設定を読み込む。

        Args:
            file_path: 設定ファイルのパス

        Returns:
            Configインスタンス
        """
        with open(file_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}

        if not isinstance(data, dict):
            raise ValueError(f"Configuration root must be a mapping: {file_path}")

        config = cls.from_dict(data)
        config.base_dir = str(Path(file_path).resolve().parent)

        logger.info(f"Configuration loaded from {file_path}")
        return config

    @classmethod
    def from_dict(cls, data: dict) -> "Config":
        """辞書から設定を作成する。

        Args:
            data: 設定辞書

        Returns:
            Configインスタンス
        """
        config = cls()
        field_names = {f.name for f in fields(cls)}

        for key, value in data.items():
            if key == "cflags":
                continue

            attr = cls.KEY_ALIASES.get(key, key)
            if attr not in field_names:
                logger.debug(f"Ignoring unknown configuration key: {key}")
                continue
            setattr(config, attr, value)

        # llcppg.cfgのincludeはスペース区切り文字列の場合がある
        if isinstance(config.headers, str):
            config.headers = config.headers.split()

        # 呼び出し元のリストを変更しないようにコピーしてからcflagsを追加する
        config.include_paths = list(config.include_paths or [])
        config.compiler_args = list(config.compiler_args or [])
        if "cflags" in data:
            config._apply_cflags(data["cflags"])

        config.sym_map = dict(config.sym_map or {})
        return config

    def _apply_cflags(self, cflags) -> None:
        """cflagsをインクルードパスとコンパイラ引数に振り分ける。"""
        args = cflags.split() if isinstance(cflags, str) else list(cflags or [])
        i = 0
        while i < len(args):
            arg = args[i]
            if arg == "-I" and i + 1 < len(args):
                self.include_paths.append(args[i + 1])
                i += 2
                continue
            if arg.startswith("-I"):
                self.include_paths.append(arg[2:])
            else:
                self.compiler_args.append(arg)
            i += 1

    def validate(self) -> List[str]:
        """設定を検証する。

        Returns:
            検証エラーのリスト（有効な場合は空）
        """
        errors = []

        if not self.headers:
            errors.append("headers (include) is required")

        if self.name_style not in NAME_STYLES:
            errors.append(
                f"name_style must be one of {', '.join(NAME_STYLES)}: {self.name_style}"
            )

        for path in self.include_paths:
            if not self._resolve_path(path).exists():
                logger.warning(f"Include path does not exist: {path}")

        for header in self.headers:
            if self.find_header(header) is None:
                errors.append(f"Header not found: {header}")

        rules_path = self.rules_source.get("path") if self.rules_source else None
        if rules_path and not self._resolve_path(rules_path).exists():
            errors.append(f"Rules source not found: {rules_path}")

        return errors

    def _resolve_path(self, path: str) -> Path:
        p = Path(path)
        if p.is_absolute():
            return p
        return Path(self.base_dir) / p

    def find_header(self, header: str) -> Optional[Path]:
        """ヘッダーを設定ディレクトリとインクルードパスから検索する。

        Args:
            header: ヘッダー名またはパス

        Returns:
            見つかったパス、なければNone
        """
        candidate = self._resolve_path(header)
        if candidate.exists():
            return candidate

        for inc_path in self.include_paths:
            candidate = self._resolve_path(inc_path) / header
            if candidate.exists():
                return candidate

        return None

    def get_header_files(self) -> List[str]:
        """解析対象ヘッダーの絶対パスを宣言順に取得する。

        Returns:
            ヘッダーファイルパスのリスト
        """
        header_files = []
        for header in self.headers:
            path = self.find_header(header)
            if path is None:
                logger.warning(f"Header not found: {header}")
                continue
            header_files.append(str(path.resolve()))

        logger.debug(f"Found {len(header_files)} header files")
        return header_files

    def get_include_paths(self) -> List[str]:
        """基準ディレクトリで解決したインクルードパスを取得する。"""
        return [str(self._resolve_path(p)) for p in self.include_paths]

    def get_rules_source(self) -> Dict[str, Any]:
        """基準ディレクトリで解決したルールソース設定を取得する。"""
        if not self.rules_source:
            return {}
        source = dict(self.rules_source)
        if source.get("path"):
            source["path"] = str(self._resolve_path(source["path"]))
        return source

    def to_dict(self) -> dict:
        """設定を辞書に変換する。

        Returns:
            辞書形式の設定
        """
        return {
            "name": self.name,
            "headers": self.headers,
            "include_paths": self.include_paths,
            "compiler_args": self.compiler_args,
            "cplusplus": self.cplusplus,
            "libclang_path": self.libclang_path,
            "libs": self.libs,
            "trim_prefixes": self.trim_prefixes,
            "sym_map": self.sym_map,
            "rules_source": self.rules_source,
            "rules": self.rules,
            "name_style": self.name_style,
            "receiver_check": self.receiver_check,
            "output": self.output,
            "report": self.report,
            "log_level": self.log_level,
            "log_file": self.log_file,
        }

    def save_yaml(self, file_path: str) -> None:
        """設定をYAMLファイルに保存。

        Args:
            file_path: 保存先パス
        """
        output_path = Path(file_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)

        data = {k: v for k, v in self.to_dict().items() if v is not None}

        with open(output_path, "w", encoding="utf-8") as f:
            yaml.dump(
                data,
                f,
                default_flow_style=False,
                allow_unicode=True,
                sort_keys=False
            )

        logger.info(f"Configuration saved to {file_path}")
