"""シンボルマッパーのメインエントリーポイント。"""

import argparse
import sys
from pathlib import Path
from typing import List, Optional, Sequence, Set, Tuple
from dataclasses import dataclass
import logging

from .config import Config
from .analyzer.clang_analyzer import ClangAnalyzer, ClangParseError
from .analyzer.declaration_extractor import DeclarationExtractor
from .io.rules_loader import RulesLoader, RuleSet
from .io.symbol_table_writer import SymbolTableWriter
from .io.excel_writer import ExcelWriter
from .io.library_symbols import LibrarySymbolReader
from .models.declaration import FunctionDecl, TypeDecl
from .models.symbol import ResolutionResult, ResolvedSymbol
from .resolver.disambiguator import Disambiguator
from .resolver.errors import SymbolMapError
from .resolver.resolver import Resolver
from .resolver.rule_table import RuleTable
from .utils.logger import setup_logging, ProgressLogger

logger = logging.getLogger(__name__)


@dataclass
class ProcessingStats:
    """処理統計情報。"""
    types: int = 0
    functions: int = 0
    ignored: int = 0
    methods: int = 0
    methods_as_functions: int = 0
    suffixed: int = 0
    warnings: int = 0
    not_exported: int = 0


class SymbolMapper:
    """ヘッダー解析から名前解決、出力までを実行するメインクラス。"""

    def __init__(self, config: Config):
        """シンボルマッパーを初期化する。

        Args:
            config: アプリケーション設定

        Raises:
            ConfigError: ルールソースが不正な場合
            InvalidPatternError: ルールのパターンが不正な場合
        """
        self.config = config
        self.stats = ProcessingStats()

        rule_set = self._load_rules()
        self.rule_table = RuleTable(rule_set.rules)
        self.ignored: Set[str] = rule_set.ignored

        logger.info(
            f"{len(self.rule_table)} naming rules loaded, "
            f"{len(self.ignored)} symbols ignored"
        )

    def _load_rules(self) -> RuleSet:
        """ルールソース、インラインルール、symMapの順にルールを読み込む。"""
        loader = RulesLoader()
        rule_set = RuleSet()

        rules_source = self.config.get_rules_source()
        if rules_source:
            rule_set.extend(loader.load(rules_source))

        if self.config.rules:
            rule_set.extend(loader.load_from_entries(self.config.rules))

        if self.config.sym_map:
            rule_set.extend(loader.from_sym_map(self.config.sym_map))

        return rule_set

    def resolve(
        self,
        types: Sequence[TypeDecl],
        functions: Sequence[FunctionDecl]
    ) -> ResolutionResult:
        """宣言に名前解決と重複排除を適用する。

        Args:
            types: 型宣言
            functions: 宣言順の関数宣言

        Returns:
            ResolutionResult

        Raises:
            DuplicateRawNameError: 同名の関数宣言が含まれる場合
        """
        resolver = Resolver(
            types,
            self.rule_table,
            trim_prefixes=self.config.trim_prefixes,
            name_style=self.config.name_style,
            receiver_check=self.config.receiver_check
        )

        # 出力前に重複を検出する
        resolver.check_duplicates(functions)

        targets = [f for f in functions if f.symbol_name not in self.ignored]
        self.stats.types = len(types)
        self.stats.functions = len(targets)
        self.stats.ignored = len(functions) - len(targets)

        candidates = []
        progress = ProgressLogger(len(targets), logger)
        for decl in targets:
            candidates.append(resolver.resolve(decl))
            progress.update()
        progress.complete()

        symbols = Disambiguator().disambiguate(candidates)

        self.stats.methods = sum(1 for s in symbols if s.emitted_as_method)
        self.stats.methods_as_functions = sum(
            1 for s in symbols if s.role.is_method and s.emit_as_function
        )
        self.stats.suffixed = sum(1 for s in symbols if s.final_name != s.base_name)
        self.stats.warnings = len(resolver.warnings)

        return ResolutionResult(symbols=symbols, warnings=list(resolver.warnings))

    def filter_exported(
        self,
        symbols: Sequence[ResolvedSymbol],
        exported: Set[str]
    ) -> List[ResolvedSymbol]:
        """ライブラリがエクスポートするシンボルだけを残す。

        名前の重複排除は全宣言に対して済んでいるため、最終名は変わらない。

        Args:
            symbols: 解決済みシンボル
            exported: ライブラリのエクスポートシンボル名

        Returns:
            宣言順を保ったシンボルのリスト
        """
        kept = []
        for symbol in symbols:
            if symbol.symbol_name in exported:
                kept.append(symbol)
            else:
                logger.debug(f"{symbol.symbol_name} is not exported by libs, skipping")

        self.stats.not_exported = len(symbols) - len(kept)
        return kept

    def extract(self) -> Tuple[List[TypeDecl], List[FunctionDecl]]:
        """設定されたヘッダーから宣言を抽出する。

        Raises:
            ClangParseError: ヘッダーのパースに失敗した場合
        """
        analyzer = ClangAnalyzer(
            include_paths=self.config.get_include_paths(),
            additional_args=self.config.compiler_args,
            cplusplus=self.config.cplusplus,
            library_path=self.config.libclang_path
        )
        extractor = DeclarationExtractor(analyzer)
        return extractor.extract(self.config.get_header_files())

    def run(self, output: Optional[str] = None, report: Optional[str] = None) -> ResolutionResult:
        """ヘッダーを解析し、結果をファイルに出力する。

        Args:
            output: シンボルテーブルの出力先（省略時は設定値）
            report: Excelレポートの出力先（省略時は設定値）

        Returns:
            ResolutionResult
        """
        types, functions = self.extract()
        result = self.resolve(types, functions)

        symbols = result.symbols
        if self.config.libs:
            reader = LibrarySymbolReader(self.config.libs, self.config.base_dir)
            symbols = self.filter_exported(symbols, reader.read())

        SymbolTableWriter().write(symbols, output or self.config.output)

        report_path = report or self.config.report
        if report_path:
            ExcelWriter(report_path).write(symbols, result.warnings)

        self._log_statistics()
        return result

    def _log_statistics(self) -> None:
        """処理統計をログ出力する。"""
        logger.info("=" * 50)
        logger.info("Resolution Statistics:")
        logger.info(f"  Types: {self.stats.types}")
        logger.info(f"  Functions: {self.stats.functions}")
        logger.info(f"  Ignored: {self.stats.ignored}")
        logger.info(f"  Methods: {self.stats.methods}")
        logger.info(f"  Methods emitted as functions: {self.stats.methods_as_functions}")
        logger.info(f"  Suffixed names: {self.stats.suffixed}")
        logger.info(f"  Warnings: {self.stats.warnings}")
        if self.config.libs:
            logger.info(f"  Not exported by libs: {self.stats.not_exported}")
        logger.info("=" * 50)


def main(argv: Optional[List[str]] = None) -> int:
    """メインエントリーポイント。

    Returns:
        終了コード
    """
    parser = argparse.ArgumentParser(
        description="Cヘッダーのシンボルをバインディング名に解決するツール"
    )
    parser.add_argument(
        "-c", "--config",
        default="llcppg.cfg",
        help="設定ファイルパス（llcppg.cfgまたはYAML）"
    )
    parser.add_argument(
        "-o", "--output",
        help="シンボルテーブルの出力先"
    )
    parser.add_argument(
        "--report",
        help="Excelレポートの出力先"
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="詳細ログを有効にする"
    )
    parser.add_argument(
        "--dump-config",
        metavar="PATH",
        help="有効な設定をYAMLで保存して終了する"
    )

    args = parser.parse_args(argv)

    config_path = Path(args.config)
    if not config_path.exists():
        print(f"Error: 設定ファイルが見つかりません: {args.config}", file=sys.stderr)
        return 1

    try:
        config = Config.from_yaml(str(config_path))
    except Exception as e:
        print(f"Error: 設定ファイルを読み込めません: {e}", file=sys.stderr)
        return 1

    if args.verbose:
        config.log_level = "DEBUG"

    setup_logging(level=config.log_level, log_file=config.log_file)

    if args.dump_config:
        config.save_yaml(args.dump_config)
        return 0

    errors = config.validate()
    if errors:
        for error in errors:
            logger.error(f"Configuration error: {error}")
        return 1

    try:
        mapper = SymbolMapper(config)
        mapper.run(output=args.output, report=args.report)
        return 0
    except (SymbolMapError, ClangParseError) as e:
        logger.error(f"Symbol mapping failed: {e}")
        return 1
    except Exception as e:
        logger.exception(f"Fatal error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
