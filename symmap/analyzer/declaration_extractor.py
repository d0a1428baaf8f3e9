"""Declaration extraction from C headers using libclang."""

from typing import Dict, List, Optional, Set, Tuple
import os
import logging

from ..io.library_symbols import normalize_symbol
from ..models.declaration import FunctionDecl, MemberKind, Parameter, SourceLocation, TypeDecl
from ..resolver.rule_table import IDENTIFIER_PATTERN
from .clang_analyzer import ClangAnalyzer

logger = logging.getLogger(__name__)


class DeclarationExtractor:
    """Extract type and function declarations from header files.

    Top-level declarations located in the requested headers are kept, along
    with those nested in ``extern "C"`` blocks and namespaces; declarations
    pulled in from other includes are skipped. In C++ mode the public
    member functions of classes and structs are extracted as members of
    their record. Source order is preserved across all headers.
    """

    # Parameter name endings that mark a buffer length
    LENGTH_SUFFIXES: Tuple[str, ...] = ("length", "len", "size", "count")

    def __init__(self, clang_analyzer: ClangAnalyzer):
        """Initialize the declaration extractor.

        Args:
            clang_analyzer: ClangAnalyzer instance for parsing
        """
        self.analyzer = clang_analyzer
        self._ci = clang_analyzer.ci
        self._record_kinds = {
            self._ci.CursorKind.STRUCT_DECL,
            self._ci.CursorKind.UNION_DECL,
            self._ci.CursorKind.CLASS_DECL,
        }

    def extract(
        self,
        header_files: List[str]
    ) -> Tuple[List[TypeDecl], List[FunctionDecl]]:
        """Extract declarations from header files.

        Args:
            header_files: Paths of the headers that belong to the package

        Returns:
            Tuple of (types, functions) in declaration order
        """
        wanted = {os.path.abspath(h) for h in header_files}
        types: Dict[str, TypeDecl] = {}
        functions: List[FunctionDecl] = []
        seen_functions: Set[Tuple[str, str]] = set()

        for header in header_files:
            tu = self.analyzer.get_translation_unit(header)
            self._collect(tu.cursor, wanted, types, functions, seen_functions)

        logger.info(
            f"Extracted {len(types)} types and {len(functions)} functions "
            f"from {len(header_files)} headers"
        )
        return list(types.values()), functions

    def extract_from_string(
        self,
        source_code: str,
        filename: str = "temp.h"
    ) -> Tuple[List[TypeDecl], List[FunctionDecl]]:
        """Extract declarations from in-memory header source.

        Args:
            source_code: Header source
            filename: Virtual file name

        Returns:
            Tuple of (types, functions) in declaration order
        """
        tu = self.analyzer.parse_string(source_code, filename)
        types: Dict[str, TypeDecl] = {}
        functions: List[FunctionDecl] = []
        self._collect(tu.cursor, {filename}, types, functions, set())
        return list(types.values()), functions

    def _collect(
        self,
        root,
        wanted: Set[str],
        types: Dict[str, TypeDecl],
        functions: List[FunctionDecl],
        seen_functions: Set[Tuple[str, str]]
    ) -> None:
        CursorKind = self._ci.CursorKind

        for cursor in root.get_children():
            if not self._in_wanted_file(cursor, wanted):
                continue

            if cursor.kind in (CursorKind.LINKAGE_SPEC, CursorKind.NAMESPACE):
                # extern "C" { ... } と名前空間の中も走査する
                self._collect(cursor, wanted, types, functions, seen_functions)

            elif cursor.kind in self._record_kinds:
                # 無名構造体は"struct (unnamed at ...)"のように綴られる
                if IDENTIFIER_PATTERN.match(cursor.spelling or ""):
                    self._add_type(types, cursor.spelling, cursor.is_definition(), cursor)
                    if cursor.is_definition():
                        self._collect_members(cursor, functions, seen_functions)

            elif cursor.kind == CursorKind.TYPEDEF_DECL:
                underlying = self._typedef_record(cursor)
                if underlying is not None:
                    self._add_type(types, cursor.spelling, underlying.is_definition(), cursor)

            elif cursor.kind == CursorKind.FUNCTION_DECL:
                self._add_function(self._cursor_to_function(cursor), cursor, functions, seen_functions)

    def _collect_members(
        self,
        record,
        functions: List[FunctionDecl],
        seen_functions: Set[Tuple[str, str]]
    ) -> None:
        """Collect public non-static member functions of a C++ record."""
        CursorKind = self._ci.CursorKind
        member_kinds = {
            CursorKind.CXX_METHOD: MemberKind.METHOD,
            CursorKind.CONSTRUCTOR: MemberKind.CONSTRUCTOR,
            CursorKind.DESTRUCTOR: MemberKind.DESTRUCTOR,
        }

        for cursor in record.get_children():
            member_kind = member_kinds.get(cursor.kind)
            if member_kind is None:
                continue
            if cursor.access_specifier != self._ci.AccessSpecifier.PUBLIC:
                continue
            if cursor.kind == CursorKind.CXX_METHOD and cursor.is_static_method():
                logger.debug(f"Skipping static member {record.spelling}::{cursor.spelling}")
                continue

            decl = self._cursor_to_function(
                cursor, member_of=record.spelling, member_kind=member_kind
            )
            self._add_function(decl, cursor, functions, seen_functions)

    def _add_function(
        self,
        decl: FunctionDecl,
        cursor,
        functions: List[FunctionDecl],
        seen_functions: Set[Tuple[str, str]]
    ) -> None:
        # 同じヘッダーを複数回インクルードした場合の同一シグネチャの再宣言
        key = (decl.symbol_name, cursor.type.spelling)
        if key in seen_functions:
            return
        seen_functions.add(key)
        functions.append(decl)

    def _in_wanted_file(self, cursor, wanted: Set[str]) -> bool:
        location = cursor.location
        if location.file is None:
            return False
        name = location.file.name
        return name in wanted or os.path.abspath(name) in wanted

    def _typedef_record(self, cursor):
        """Return the struct/union/class cursor a typedef names, if any."""
        declaration = cursor.underlying_typedef_type.get_canonical().get_declaration()
        if declaration.kind in self._record_kinds:
            definition = declaration.get_definition()
            return definition if definition is not None else declaration
        return None

    def _add_type(self, types: Dict[str, TypeDecl], name: str, fields_known: bool, cursor) -> None:
        existing = types.get(name)
        if existing is not None:
            # 前方宣言の後に定義が来た場合は情報を更新する
            if fields_known and not existing.fields_known:
                types[name] = TypeDecl(name, True, existing.location)
            return
        types[name] = TypeDecl(name, fields_known, self._location(cursor))

    def _cursor_to_function(
        self,
        cursor,
        member_of: Optional[str] = None,
        member_kind: Optional[MemberKind] = None
    ) -> FunctionDecl:
        args = list(cursor.get_arguments())
        parameters = []
        for i, arg in enumerate(args):
            size_hint: Optional[str] = None
            following = args[i + 1] if i + 1 < len(args) else None
            if (arg.type.kind == self._ci.TypeKind.POINTER and following is not None
                    and self._is_length_parameter(following)):
                size_hint = following.spelling
            parameters.append(Parameter(
                type_name=arg.type.spelling,
                name=arg.spelling or None,
                size_hint=size_hint
            ))

        return FunctionDecl(
            raw_name=cursor.spelling,
            parameters=tuple(parameters),
            return_type=cursor.result_type.spelling,
            location=self._location(cursor),
            mangled_name=self._mangled_name(cursor),
            member_of=member_of,
            member_kind=member_kind
        )

    def _mangled_name(self, cursor) -> Optional[str]:
        """C++モードのときだけライブラリ上のシンボル名を返す。"""
        if not self.analyzer.cplusplus:
            return None
        mangled = cursor.mangled_name
        if not mangled:
            return None
        return normalize_symbol(mangled)

    def _is_length_parameter(self, cursor) -> bool:
        """`size_t buffer_length`のような長さパラメータかを判定する。"""
        name = (cursor.spelling or "").lower()
        if not name.endswith(self.LENGTH_SUFFIXES):
            return False
        canonical = cursor.type.get_canonical().kind
        return canonical in (
            self._ci.TypeKind.INT,
            self._ci.TypeKind.UINT,
            self._ci.TypeKind.LONG,
            self._ci.TypeKind.ULONG,
            self._ci.TypeKind.LONGLONG,
            self._ci.TypeKind.ULONGLONG,
        )

    @staticmethod
    def _location(cursor) -> Optional[SourceLocation]:
        if cursor.location.file is None:
            return None
        return SourceLocation(
            file_path=cursor.location.file.name,
            line=cursor.location.line,
            column=cursor.location.column
        )
