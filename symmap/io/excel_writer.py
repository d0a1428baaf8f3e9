"""名前解決結果のExcelレポート出力モジュール。"""

from typing import Dict, List, Sequence
from pathlib import Path
from datetime import datetime
import logging

from openpyxl import Workbook
from openpyxl.styles import PatternFill, Font, Alignment, Border, Side

from ..models.symbol import ResolutionWarning, ResolvedSymbol

logger = logging.getLogger(__name__)


class ExcelWriter:
    """解決済みシンボルと警告をExcelレポートに書き込む。"""

    # 出力形態ごとの色（RGB hex、#なし）
    KIND_COLORS: Dict[str, str] = {
        "method": "C6EFCE",            # 緑 - メソッド
        "function": "DDEBF7",          # 青 - 関数
        "method as function": "FFEB9C",  # 黄 - 設定上はメソッド、出力は関数
    }

    SYMBOL_HEADERS = ["Cシンボル", "最終名", "基本名", "役割", "オーナー型", "出力形態", "位置"]
    SYMBOL_WIDTHS = [32, 28, 28, 12, 16, 20, 40]

    def __init__(self, output_file: str):
        """Excelライターを初期化する。

        Args:
            output_file: 出力Excelファイルのパス
        """
        self.output_file = Path(output_file)

    @staticmethod
    def emitted_kind(symbol: ResolvedSymbol) -> str:
        """出力形態を表す文字列を返す。"""
        if symbol.emitted_as_method:
            return "method"
        if symbol.role.is_method:
            return "method as function"
        return "function"

    def write(
        self,
        symbols: Sequence[ResolvedSymbol],
        warnings: Sequence[ResolutionWarning] = ()
    ) -> None:
        """シンボルシートとサマリーシートを作成して保存する。

        Args:
            symbols: 宣言順の解決済みシンボル
            warnings: 解決時の警告
        """
        wb = Workbook()
        ws = wb.active
        ws.title = "Symbols"

        self._write_symbols(ws, symbols)
        self._write_summary(wb.create_sheet("Summary"), symbols, warnings)

        self.output_file.parent.mkdir(parents=True, exist_ok=True)
        wb.save(self.output_file)
        logger.info(f"Report written to {self.output_file}")

    def _thin_border(self) -> Border:
        return Border(
            left=Side(style="thin"),
            right=Side(style="thin"),
            top=Side(style="thin"),
            bottom=Side(style="thin")
        )

    def _write_symbols(self, ws, symbols: Sequence[ResolvedSymbol]) -> None:
        """シンボル一覧を書き込む。

        Args:
            ws: ワークシートオブジェクト
            symbols: 解決済みシンボル
        """
        thin_border = self._thin_border()
        header_fill = PatternFill(start_color="4472C4", end_color="4472C4", fill_type="solid")

        for col, header in enumerate(self.SYMBOL_HEADERS, 1):
            cell = ws.cell(row=1, column=col)
            cell.value = header
            cell.font = Font(bold=True, color="FFFFFF")
            cell.fill = header_fill
            cell.alignment = Alignment(horizontal="center", vertical="center")
            cell.border = thin_border

        for row, symbol in enumerate(symbols, 2):
            kind = self.emitted_kind(symbol)
            location = symbol.source_decl.location
            values = [
                symbol.raw_name,
                symbol.final_name,
                symbol.base_name,
                symbol.role.kind.value,
                symbol.role.owner_type or "",
                kind,
                str(location) if location else "",
            ]
            for col, value in enumerate(values, 1):
                cell = ws.cell(row=row, column=col)
                cell.value = value
                cell.border = thin_border

            # 出力形態の列を色付け
            kind_cell = ws.cell(row=row, column=6)
            kind_cell.fill = PatternFill(
                start_color=self.KIND_COLORS[kind],
                end_color=self.KIND_COLORS[kind],
                fill_type="solid"
            )
            kind_cell.alignment = Alignment(horizontal="center")

            # 接尾辞で名前が変わったシンボルを強調
            if symbol.final_name != symbol.base_name:
                ws.cell(row=row, column=2).font = Font(bold=True)

        for col, width in enumerate(self.SYMBOL_WIDTHS, 1):
            col_letter = ws.cell(row=1, column=col).column_letter
            ws.column_dimensions[col_letter].width = width

        ws.freeze_panes = "A2"

    def _write_summary(
        self,
        ws,
        symbols: Sequence[ResolvedSymbol],
        warnings: Sequence[ResolutionWarning]
    ) -> None:
        """統計と警告を含むサマリーシートを書き込む。

        Args:
            ws: ワークシートオブジェクト
            symbols: 解決済みシンボル
            warnings: 解決時の警告
        """
        thin_border = self._thin_border()

        ws["A1"] = "名前解決サマリー"
        ws["A1"].font = Font(bold=True, size=14)
        ws.merge_cells("A1:C1")
        ws["A2"] = f"生成日時: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}"
        ws.merge_cells("A2:C2")

        counts: Dict[str, int] = {kind: 0 for kind in self.KIND_COLORS}
        for symbol in symbols:
            counts[self.emitted_kind(symbol)] += 1
        renamed = sum(1 for s in symbols if s.final_name != s.base_name)

        rows: List[List] = [["出力形態", "件数"]]
        rows.extend([kind, count] for kind, count in counts.items())
        rows.append(["接尾辞付与", renamed])
        rows.append(["合計", len(symbols)])

        for offset, values in enumerate(rows):
            for col, value in enumerate(values, 1):
                cell = ws.cell(row=4 + offset, column=col)
                cell.value = value
                cell.border = thin_border
                if offset == 0 or values[0] == "合計":
                    cell.font = Font(bold=True)

        row = 4 + len(rows) + 1
        ws.cell(row=row, column=1).value = f"警告 ({len(warnings)})"
        ws.cell(row=row, column=1).font = Font(bold=True)
        for warning in warnings:
            row += 1
            ws.cell(row=row, column=1).value = warning.kind
            ws.cell(row=row, column=2).value = warning.raw_name
            ws.cell(row=row, column=3).value = warning.message

        ws.column_dimensions["A"].width = 22
        ws.column_dimensions["B"].width = 28
        ws.column_dimensions["C"].width = 80
