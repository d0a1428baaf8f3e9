"""libclangを使用したCヘッダー解析モジュール。"""

from .clang_analyzer import ClangAnalyzer, ClangParseError
from .declaration_extractor import DeclarationExtractor

__all__ = [
    "ClangAnalyzer",
    "ClangParseError",
    "DeclarationExtractor",
]
