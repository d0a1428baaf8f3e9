"""Resolverのテスト。"""

import pytest

from symmap.models.declaration import FunctionDecl, MemberKind, Parameter, TypeDecl
from symmap.models.rule import MatchKind, NamingRule
from symmap.models.symbol import Role
from symmap.resolver.errors import DuplicateRawNameError, UNKNOWN_RULE_TARGET
from symmap.resolver.resolver import Resolver
from symmap.resolver.rule_table import RuleTable


def make_resolver(rules=(), types=(TypeDecl("Foo"),), **kwargs):
    return Resolver(list(types), RuleTable(list(rules)), **kwargs)


class TestDefaultResolution:
    """ルールがない場合の既定動作のテスト。"""

    def test_prefix_strip_becomes_method(self):
        """型名の接頭辞を持つ関数はメソッドになる。"""
        symbol = make_resolver().resolve(FunctionDecl("Foo_Print"))

        assert symbol.base_name == "Print"
        assert symbol.final_name == "Print"
        assert symbol.role == Role.method("Foo")
        assert not symbol.emit_as_function

    def test_no_prefix_stays_function(self):
        """接頭辞が一致しない関数はそのまま関数になる。"""
        symbol = make_resolver().resolve(FunctionDecl("init_library"))

        assert symbol.base_name == "init_library"
        assert symbol.role == Role.function()

    def test_prefix_alone_is_not_owner(self):
        """接頭辞だけの名前はメソッドにならない。"""
        symbol = make_resolver().resolve(FunctionDecl("Foo_"))
        assert symbol.role == Role.function()

    def test_longest_type_prefix_wins(self):
        """複数の型名が一致する場合は最長の型が選ばれる。"""
        resolver = make_resolver(types=[TypeDecl("Foo"), TypeDecl("Foo_Node")])
        symbol = resolver.resolve(FunctionDecl("Foo_Node_Free"))

        assert symbol.role == Role.method("Foo_Node")
        assert symbol.base_name == "Free"

    def test_explicit_candidate_owner(self):
        """宣言にオーナー型が指定されていれば推定より優先される。"""
        bar = TypeDecl("Bar")
        resolver = make_resolver(types=[TypeDecl("Foo"), bar])
        symbol = resolver.resolve(FunctionDecl("Foo_Attach", candidate_owner_type=bar))

        assert symbol.role == Role.method("Bar")
        assert symbol.base_name == "Foo_Attach"

    def test_trim_prefixes_only_for_plain_functions(self):
        """trim_prefixesは通常関数だけに適用される。"""
        resolver = make_resolver(trim_prefixes=["lua_"])

        assert resolver.resolve(FunctionDecl("lua_close")).base_name == "close"
        assert resolver.resolve(FunctionDecl("Foo_Print")).base_name == "Print"

    def test_camel_name_style(self):
        """camelスタイルでは導出名がCamelCaseになる。"""
        resolver = make_resolver(name_style="camel")

        assert resolver.resolve(FunctionDecl("Foo_get_value")).base_name == "GetValue"
        assert resolver.resolve(FunctionDecl("get_value")).base_name == "GetValue"

    def test_unknown_name_style_rejected(self):
        """未知のスタイルはValueErrorになる。"""
        with pytest.raises(ValueError):
            make_resolver(name_style="snake")


class TestDirectives:
    """各ディレクティブのテスト。"""

    def test_strip_prefix_is_idempotent_with_default(self):
        """strip_prefixは既定動作と同じ結果になる。"""
        plain = make_resolver().resolve(FunctionDecl("Foo_Print"))
        ruled = make_resolver([NamingRule.strip_prefix("Foo_Print")]).resolve(FunctionDecl("Foo_Print"))

        assert (ruled.base_name, ruled.role) == (plain.base_name, plain.role)

    def test_keep_function_overrides_prefix(self):
        """keep_functionは接頭辞が一致しても関数のまま保持する。"""
        resolver = make_resolver([NamingRule.keep_function("Foo_ParseWithLength")])
        symbol = resolver.resolve(FunctionDecl("Foo_ParseWithLength"))

        assert symbol.base_name == "Foo_ParseWithLength"
        assert symbol.role == Role.function()
        assert not symbol.emit_as_function

    def test_keep_method_with_forced_function_output(self):
        """概念上はメソッドだが関数として出力されるケース。"""
        rule = NamingRule.keep_method("Foo_ParseWithSize", "Foo", force_function_output=True)
        symbol = make_resolver([rule]).resolve(FunctionDecl("Foo_ParseWithSize"))

        assert symbol.role == Role.method("Foo")
        assert symbol.emit_as_function
        assert symbol.base_name == "Foo_ParseWithSize"
        assert symbol.scope() == ("function",)

    def test_keep_method_forces_method(self):
        """keep_methodは既定で関数になる宣言もメソッドにする。"""
        resolver = make_resolver([NamingRule.keep_method("create_foo", "Foo")])
        symbol = resolver.resolve(FunctionDecl("create_foo"))

        assert symbol.role == Role.method("Foo")
        assert symbol.base_name == "create_foo"

    def test_rename_combines_with_role(self):
        """renameは役割ディレクティブと組み合わせられる。"""
        rules = [
            NamingRule.keep_function("Foo_Delete"),
            NamingRule.rename("Foo_Delete", "Delete"),
        ]
        symbol = make_resolver(rules).resolve(FunctionDecl("Foo_Delete"))

        assert symbol.base_name == "Delete"
        assert symbol.role == Role.function()

    def test_rename_keeps_default_method_role(self):
        """renameだけの場合は既定の役割が維持される。"""
        resolver = make_resolver([NamingRule.rename("Foo_ForBar", "Bar")])
        symbol = resolver.resolve(FunctionDecl("Foo_ForBar"))

        assert symbol.base_name == "Bar"
        assert symbol.role == Role.method("Foo")

    def test_prefix_rule_applies_to_all_matches(self):
        """接頭辞ルールは一致するすべての宣言に適用される。"""
        resolver = make_resolver([NamingRule.keep_function("Foo_Parse", MatchKind.PREFIX)])

        assert resolver.resolve(FunctionDecl("Foo_ParseA")).role == Role.function()
        assert resolver.resolve(FunctionDecl("Foo_Print")).role == Role.method("Foo")


class TestUnknownRuleTarget:
    """存在しない型を参照するルールのテスト。"""

    def test_keep_method_unknown_type_falls_back(self):
        """未知の型はwarningを記録して関数にフォールバックする。"""
        resolver = make_resolver([NamingRule.keep_method("Foo_Print", "Missing")])
        symbol = resolver.resolve(FunctionDecl("Foo_Print"))

        assert symbol.role == Role.function()
        assert symbol.base_name == "Foo_Print"
        assert len(resolver.warnings) == 1
        assert resolver.warnings[0].kind == UNKNOWN_RULE_TARGET
        assert resolver.warnings[0].raw_name == "Foo_Print"

    def test_strip_prefix_without_owner_falls_back(self):
        """オーナー型のないstrip_prefixも関数にフォールバックする。"""
        resolver = make_resolver([NamingRule.strip_prefix("Bar_Print")])
        symbol = resolver.resolve(FunctionDecl("Bar_Print"))

        assert symbol.role == Role.function()
        assert resolver.warnings[0].kind == UNKNOWN_RULE_TARGET

    def test_other_declarations_unaffected(self):
        """フォールバックは他の宣言に影響しない。"""
        resolver = make_resolver([NamingRule.keep_method("Foo_Print", "Missing")])
        symbols = resolver.resolve_all([FunctionDecl("Foo_Print"), FunctionDecl("Foo_Delete")])

        assert symbols[1].role == Role.method("Foo")
        assert symbols[1].base_name == "Delete"


class TestReceiverCheck:
    """receiver_checkのテスト。"""

    def test_non_receiver_first_parameter_emits_function(self, foo_functions):
        """第1引数がオーナー型でないメソッドは関数として出力される。"""
        resolver = make_resolver(
            [NamingRule.strip_prefix("Foo_ParseWithSize"), NamingRule.rename("Foo_ParseWithSize", "ParseWithSize")],
            receiver_check=True
        )
        symbol = resolver.resolve(foo_functions[3])

        assert symbol.role == Role.method("Foo")
        assert symbol.emit_as_function
        assert symbol.base_name == "Foo_ParseWithSize"

    def test_receiver_parameter_keeps_method(self, foo_functions):
        """const修飾されたポインタでもレシーバとして扱われる。"""
        symbol = make_resolver(receiver_check=True).resolve(foo_functions[0])

        assert symbol.emitted_as_method
        assert symbol.base_name == "Print"

    def test_unknown_parameters_are_not_checked(self):
        """パラメータ情報のない宣言はチェックしない。"""
        symbol = make_resolver(receiver_check=True).resolve(FunctionDecl("Foo_Bar"))
        assert symbol.emitted_as_method

    def test_parameter_names_type(self):
        """型名の判定は修飾子やポインタを無視する。"""
        assert Parameter("const struct Foo *").names_type("Foo")
        assert not Parameter("const char *").names_type("Foo")
        assert not Parameter("FooBar *").names_type("Foo")


class TestResolveAll:
    """resolve_allのテスト。"""

    def test_one_symbol_per_declaration_in_order(self, foo_functions):
        """宣言ごとに1つのシンボルが宣言順に生成される。"""
        symbols = make_resolver().resolve_all(foo_functions)

        assert [s.raw_name for s in symbols] == [f.raw_name for f in foo_functions]

    def test_resolver_does_not_deduplicate(self):
        """Resolverは重複排除を行わない。"""
        rules = [NamingRule.rename("Foo_Bar", "Bar"), NamingRule.rename("Foo_ForBar", "Bar")]
        symbols = make_resolver(rules).resolve_all([FunctionDecl("Foo_Bar"), FunctionDecl("Foo_ForBar")])

        assert [s.final_name for s in symbols] == ["Bar", "Bar"]

    def test_duplicate_raw_name_is_fatal(self, foo_functions):
        """同名の宣言があるとDuplicateRawNameErrorになる。"""
        decls = foo_functions + [FunctionDecl("Foo_Print")]

        with pytest.raises(DuplicateRawNameError) as exc_info:
            make_resolver().resolve_all(decls)

        assert exc_info.value.raw_name == "Foo_Print"
        assert "c.h:6" in str(exc_info.value)
        assert "<unknown>" in str(exc_info.value)


def make_member(name, kind, mangled, *params):
    return FunctionDecl(
        name,
        tuple(Parameter(p) for p in params),
        mangled_name=mangled,
        member_of="INIReader",
        member_kind=kind,
    )


class TestCppMembers:
    """C++クラスのメンバー関数のテスト。"""

    def test_special_members_and_methods(self):
        """コンストラクタはInit、デストラクタはDispose、メソッドはそのままの名前になる。"""
        resolver = make_resolver(types=[TypeDecl("INIReader", fields_known=True)])
        decls = [
            make_member("INIReader", MemberKind.CONSTRUCTOR, "_ZN9INIReaderC1EPKc", "const char *"),
            make_member("~INIReader", MemberKind.DESTRUCTOR, "_ZN9INIReaderD1Ev"),
            make_member("ParseError", MemberKind.METHOD, "_ZNK9INIReader10ParseErrorEv"),
        ]

        symbols = resolver.resolve_all(decls)

        assert [s.base_name for s in symbols] == ["Init", "Dispose", "ParseError"]
        assert all(s.role == Role.method("INIReader") for s in symbols)
        assert not any(s.emit_as_function for s in symbols)

    def test_overloads_are_not_duplicates(self):
        """オーバーロードはマングル名が異なるため重複扱いされない。"""
        decls = [
            make_member("INIReader", MemberKind.CONSTRUCTOR, "_ZN9INIReaderC1EPKc", "const char *"),
            make_member("INIReader", MemberKind.CONSTRUCTOR, "_ZN9INIReaderC1EPKcm",
                        "const char *", "size_t"),
        ]

        symbols = make_resolver().resolve_all(decls)

        assert [s.base_name for s in symbols] == ["Init", "Init"]
        assert [s.symbol_name for s in symbols] == ["_ZN9INIReaderC1EPKc", "_ZN9INIReaderC1EPKcm"]

    def test_same_mangled_name_is_duplicate(self):
        """同じマングル名の宣言はDuplicateRawNameErrorになる。"""
        decl = make_member("ParseError", MemberKind.METHOD, "_ZNK9INIReader10ParseErrorEv")

        with pytest.raises(DuplicateRawNameError) as exc_info:
            make_resolver().resolve_all([decl, decl])

        assert exc_info.value.raw_name == "_ZNK9INIReader10ParseErrorEv"

    def test_rename_by_mangled_name(self):
        """改名ルールはマングル名で指定する。"""
        rules = [NamingRule.rename("_ZNK9INIReader10ParseErrorEv", "Error")]
        decl = make_member("ParseError", MemberKind.METHOD, "_ZNK9INIReader10ParseErrorEv")

        assert make_resolver(rules).resolve(decl).base_name == "Error"

    def test_member_name_style(self):
        """メソッド名には表記スタイルが適用される。"""
        decl = make_member("get_value", MemberKind.METHOD, "_ZN9INIReader9get_valueEv")
        assert make_resolver(name_style="camel").resolve(decl).base_name == "GetValue"
