"""リンク対象ライブラリのエクスポートシンボル読み込みモジュール。

llcppg.cfgの`libs`（例: `-L/opt/lib -lfoo`）からライブラリファイルを探し、
`nm`で定義済みの外部シンボルを列挙する。ヘッダーの関数のうち
ライブラリが実際にエクスポートするものだけをシンボルテーブルに出力するために使う。
"""

from typing import List, Optional, Sequence, Set
from pathlib import Path
import logging
import re
import shlex
import shutil
import subprocess
import sys

from ..resolver.errors import SymbolMapError

logger = logging.getLogger(__name__)

# `$(pkg-config --libs foo)`形式のコマンド置換
COMMAND_SUBSTITUTION = re.compile(r"\$\(([^)]*)\)")


class LibrarySymbolError(SymbolMapError):
    """ライブラリシンボルの読み込みエラー。"""
    pass


def normalize_symbol(name: str, platform: Optional[str] = None) -> str:
    """プラットフォーム固有の先頭アンダースコアを除去する。

    macOSではCのシンボルに`_`が付くため、1文字だけ取り除く。

    Args:
        name: nmやlibclangが返すシンボル名
        platform: 対象プラットフォーム（省略時は実行環境）

    Returns:
        正規化されたシンボル名
    """
    platform = platform or sys.platform
    if platform == "darwin" and name.startswith("_"):
        return name[1:]
    return name


def parse_nm_output(output: str) -> List[str]:
    """nmの出力から定義済みの外部シンボルを取り出す。

    Args:
        output: `nm`の標準出力

    Returns:
        ソート済みのシンボル名リスト
    """
    exports: Set[str] = set()
    for raw_line in output.splitlines():
        line = raw_line.strip()
        # アーカイブのメンバー見出し（"foo.o:"）
        if not line or line.endswith(":"):
            continue
        parts = line.split()
        if len(parts) < 2:
            continue
        type_code = parts[-2]
        symbol = parts[-1]
        if len(type_code) != 1 or type_code == "U":
            continue
        # 小文字はローカルシンボル（GNU uniqueの"u"を除く）
        if not (type_code.isupper() or type_code == "u"):
            continue
        exports.add(symbol)
    return sorted(exports)


class LibrarySymbolReader:
    """`libs`設定からライブラリのエクスポートシンボルを読み込む。"""

    LIBRARY_SUFFIXES = (".so", ".dylib", ".a")

    def __init__(self, libs: str, base_dir: str = "."):
        """リーダーを初期化する。

        Args:
            libs: リンカフラグ形式のライブラリ指定
            base_dir: 相対パスの基準ディレクトリ
        """
        self.libs = libs
        self.base_dir = Path(base_dir)

    def expand(self) -> List[str]:
        """コマンド置換を展開してリンカフラグのリストを返す。

        Raises:
            LibrarySymbolError: 置換コマンドが失敗した場合
        """
        def run(match) -> str:
            command = match.group(1).strip()
            try:
                proc = subprocess.run(
                    shlex.split(command), check=True, capture_output=True, text=True
                )
            except (OSError, subprocess.CalledProcessError) as e:
                raise LibrarySymbolError(f"Failed to expand '$({command})': {e}")
            return proc.stdout.strip()

        return shlex.split(COMMAND_SUBSTITUTION.sub(run, self.libs or ""))

    def library_files(self, flags: Optional[Sequence[str]] = None) -> List[Path]:
        """リンカフラグからライブラリファイルを探す。

        `-l`で指定されたライブラリが`-L`のどのディレクトリにもない場合は
        システムライブラリ（-lmなど）とみなして警告のみ出す。

        Args:
            flags: リンカフラグ（省略時はlibsを展開して使う）

        Returns:
            見つかったライブラリファイルのリスト
        """
        if flags is None:
            flags = self.expand()

        search_dirs: List[Path] = []
        names: List[str] = []
        files: List[Path] = []

        i = 0
        while i < len(flags):
            flag = flags[i]
            if flag == "-L" and i + 1 < len(flags):
                search_dirs.append(self._resolve(flags[i + 1]))
                i += 2
                continue
            if flag.startswith("-L"):
                search_dirs.append(self._resolve(flag[2:]))
            elif flag.startswith("-l"):
                names.append(flag[2:])
            elif flag.endswith(self.LIBRARY_SUFFIXES):
                files.append(self._resolve(flag))
            i += 1

        for name in names:
            found = self._find_library(name, search_dirs)
            if found is None:
                logger.warning(f"Library not found in -L paths, skipping: -l{name}")
                continue
            files.append(found)

        return files

    def _resolve(self, path: str) -> Path:
        p = Path(path)
        return p if p.is_absolute() else self.base_dir / p

    def _find_library(self, name: str, search_dirs: Sequence[Path]) -> Optional[Path]:
        for directory in search_dirs:
            for suffix in self.LIBRARY_SUFFIXES:
                candidate = directory / f"lib{name}{suffix}"
                if candidate.exists():
                    return candidate
        return None

    @staticmethod
    def nm_command(library: Path) -> List[str]:
        """ライブラリの外部シンボルを列挙するnmコマンドを返す。"""
        if sys.platform == "darwin":
            return ["nm", "-gU", str(library)]
        if library.suffix == ".so":
            return ["nm", "-D", "--defined-only", str(library)]
        return ["nm", "-g", "--defined-only", str(library)]

    def read(self) -> Set[str]:
        """すべてのライブラリのエクスポートシンボルを読み込む。

        Returns:
            正規化されたシンボル名の集合

        Raises:
            LibrarySymbolError: ライブラリがない、またはnmが失敗した場合
        """
        libraries = self.library_files()
        if not libraries:
            raise LibrarySymbolError(f"No library files found for libs: {self.libs}")
        if shutil.which("nm") is None:
            raise LibrarySymbolError("nm not found; install binutils or LLVM")

        symbols: Set[str] = set()
        for library in libraries:
            command = self.nm_command(library)
            try:
                proc = subprocess.run(command, check=True, capture_output=True, text=True)
            except subprocess.CalledProcessError as e:
                message = e.stderr.strip() or e.stdout.strip() or "unknown failure"
                raise LibrarySymbolError(f"{' '.join(command)}: {message}")

            exports = parse_nm_output(proc.stdout)
            logger.info(f"{len(exports)} exported symbols in {library}")
            symbols.update(normalize_symbol(name) for name in exports)

        return symbols
