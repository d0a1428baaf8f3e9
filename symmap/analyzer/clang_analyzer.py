"""libclangを使用したCヘッダー解析のラッパー。"""

from typing import List, Optional, Dict
from pathlib import Path
import os
import logging

logger = logging.getLogger(__name__)


class ClangParseError(Exception):
    """Clangパース時のエラー。"""
    pass


class ClangAnalyzer:
    """libclangを使用したヘッダー解析のメインクラス。

    libclangをラップしてTranslationUnitを生成する。
    同じヘッダーの再パースを避けるためにキャッシュを提供する。
    """

    def __init__(
        self,
        include_paths: Optional[List[str]] = None,
        additional_args: Optional[List[str]] = None,
        cplusplus: bool = False,
        library_path: Optional[str] = None
    ):
        """Clangアナライザーを初期化する。

        Args:
            include_paths: インクルードディレクトリのリスト
            additional_args: 追加のコンパイラ引数（cflags）
            cplusplus: ヘッダーをC++としてパースするかどうか
            library_path: libclangライブラリのパス（任意、未指定時は自動検出）
        """
        self._setup_libclang(library_path)

        import clang.cindex as ci
        self._ci = ci

        self.include_paths = include_paths or []
        self.additional_args = additional_args or []
        self.cplusplus = cplusplus
        self.index = ci.Index.create()

        self._translation_units: Dict[str, "ci.TranslationUnit"] = {}

        logger.info(f"ClangAnalyzer initialized with {len(self.include_paths)} include paths")

    def _setup_libclang(self, library_path: Optional[str] = None) -> None:
        """libclangライブラリパスを設定する。

        Args:
            library_path: libclangへの明示的なパス（任意）
        """
        import clang.cindex as ci

        if library_path:
            ci.Config.set_library_path(library_path)
            return

        # pip install libclangでインストールされたライブラリを使用
        try:
            ci.Index.create()
            logger.debug("libclang loaded successfully from pip package")
        except Exception as e:
            common_paths = [
                "/usr/lib/llvm-18/lib",
                "/usr/lib/llvm-17/lib",
                "/usr/local/opt/llvm/lib",
                r"C:\Program Files\LLVM\bin",
            ]

            for path in common_paths:
                if any(Path(path).glob("libclang*")):
                    ci.Config.set_library_path(path)
                    logger.info(f"Using libclang from: {path}")
                    return

            raise ClangParseError(
                f"Failed to load libclang: {e}. "
                "Please install libclang with 'pip install libclang' or install LLVM."
            )

    def _build_compiler_args(self) -> List[str]:
        """パース用のコンパイラ引数を構築する。

        Returns:
            コンパイラ引数のリスト
        """
        if self.cplusplus:
            args = ["-x", "c++", "-std=c++11"]
        else:
            args = ["-x", "c"]

        for inc_path in self.include_paths:
            args.extend(["-I", inc_path])

        args.extend(self.additional_args)
        return args

    def get_translation_unit(self, file_path: str, force_reparse: bool = False):
        """ファイルのTranslationUnitを取得する。

        Args:
            file_path: ヘッダーファイルのパス
            force_reparse: キャッシュがあっても強制的に再パース

        Returns:
            clang.cindex.TranslationUnit

        Raises:
            ClangParseError: パースに失敗した場合
        """
        abs_path = os.path.abspath(file_path)

        if not force_reparse and abs_path in self._translation_units:
            return self._translation_units[abs_path]

        options = (
            self._ci.TranslationUnit.PARSE_SKIP_FUNCTION_BODIES
            | self._ci.TranslationUnit.PARSE_INCOMPLETE
        )

        try:
            tu = self.index.parse(abs_path, args=self._build_compiler_args(), options=options)
        except Exception as e:
            raise ClangParseError(f"Failed to parse {abs_path}: {e}")

        if tu is None:
            raise ClangParseError(f"Failed to parse {abs_path}: returned None")

        self._log_diagnostics(tu, abs_path)
        self._translation_units[abs_path] = tu
        return tu

    def parse_string(self, source_code: str, filename: str = "temp.h"):
        """文字列からヘッダーをパースする。

        Args:
            source_code: ヘッダーのソースコード
            filename: ソースの仮想ファイル名

        Returns:
            clang.cindex.TranslationUnit
        """
        try:
            tu = self.index.parse(
                filename,
                args=self._build_compiler_args(),
                unsaved_files=[(filename, source_code)],
                options=self._ci.TranslationUnit.PARSE_SKIP_FUNCTION_BODIES
            )
        except Exception as e:
            raise ClangParseError(f"Failed to parse source string: {e}")

        self._log_diagnostics(tu, filename)
        return tu

    def _log_diagnostics(self, tu, path: str) -> None:
        for diag in tu.diagnostics:
            if diag.severity >= self._ci.Diagnostic.Error:
                logger.warning(f"Parse error in {path}: {diag.spelling}")

    @property
    def ci(self):
        """clang.cindexモジュールを取得する。"""
        return self._ci
