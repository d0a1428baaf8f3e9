"""シンボルテーブル（llcppg.symb.json形式）の出力モジュール。"""

from typing import Dict, List, Sequence
from pathlib import Path
import json
import logging

from ..models.symbol import ResolvedSymbol

logger = logging.getLogger(__name__)


class SymbolTableWriter:
    """解決済みシンボルをJSONのシンボルテーブルとして書き出す。"""

    def __init__(self, pointer_receiver: bool = True):
        """ライターを初期化する。

        Args:
            pointer_receiver: メソッドをポインタレシーバ`(*Owner).Name`で表記する
        """
        self.pointer_receiver = pointer_receiver

    def go_name(self, symbol: ResolvedSymbol) -> str:
        """出力先での名前を返す。

        Args:
            symbol: 解決済みシンボル

        Returns:
            メソッドなら`(*Owner).Name`、関数なら最終名
        """
        if not symbol.emitted_as_method:
            return symbol.final_name

        owner = symbol.role.owner_type
        if self.pointer_receiver:
            return f"(*{owner}).{symbol.final_name}"
        return f"{owner}.{symbol.final_name}"

    def build(self, symbols: Sequence[ResolvedSymbol]) -> List[Dict[str, str]]:
        """シンボルテーブルのエントリを作成する。

        Args:
            symbols: 解決済みシンボル

        Returns:
            mangle順にソートされたエントリのリスト
        """
        entries = [
            {
                "mangle": symbol.symbol_name,
                "c++": symbol.source_decl.prototype(),
                "go": self.go_name(symbol),
            }
            for symbol in symbols
        ]
        entries.sort(key=lambda e: e["mangle"])
        return entries

    def write(self, symbols: Sequence[ResolvedSymbol], file_path: str) -> None:
        """シンボルテーブルをJSONファイルに書き出す。

        Args:
            symbols: 解決済みシンボル
            file_path: 出力先パス
        """
        output_path = Path(file_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)

        with open(output_path, "w", encoding="utf-8") as f:
            json.dump(self.build(symbols), f, indent=2, ensure_ascii=False)
            f.write("\n")

        logger.info(f"Symbol table written to {file_path} ({len(symbols)} symbols)")
