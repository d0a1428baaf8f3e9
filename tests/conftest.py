"""テスト共通のフィクスチャ。"""

from pathlib import Path

import pytest

from symmap.models.declaration import FunctionDecl, Parameter, SourceLocation, TypeDecl

FIXTURES_DIR = Path(__file__).parent / "fixtures"


@pytest.fixture
def foo_type():
    return TypeDecl("Foo", fields_known=True)


@pytest.fixture
def foo_functions():
    """c.hと同じ宣言順の関数宣言。"""
    foo_ptr = Parameter("Foo *", "item")
    const_foo_ptr = Parameter("const Foo *", "item")
    value = Parameter("const char *", "value", size_hint="buffer_length")
    length = Parameter("size_t", "buffer_length")

    return [
        FunctionDecl("Foo_Print", (const_foo_ptr,), "char *", location=SourceLocation("c.h", 6)),
        FunctionDecl("Foo_Delete", (foo_ptr,), "void", location=SourceLocation("c.h", 8)),
        FunctionDecl("Foo_ParseWithLength", (value, length), "Foo *", location=SourceLocation("c.h", 10)),
        FunctionDecl("Foo_ParseWithSize", (value, length), "Foo *", location=SourceLocation("c.h", 12)),
        FunctionDecl("Foo_Bar", (), "void", location=SourceLocation("c.h", 14)),
        FunctionDecl("Foo_ForBar", (), "void", location=SourceLocation("c.h", 15)),
    ]


@pytest.fixture
def fixtures_dir():
    return FIXTURES_DIR
