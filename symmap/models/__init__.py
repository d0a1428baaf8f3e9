"""Data models for symbol name resolution."""

from .declaration import SourceLocation, Parameter, TypeDecl, MemberKind, FunctionDecl
from .rule import Directive, MatchKind, NamingRule
from .symbol import (
    RoleKind,
    Role,
    ResolvedSymbol,
    ResolutionWarning,
    ResolutionResult,
)

__all__ = [
    "SourceLocation",
    "Parameter",
    "TypeDecl",
    "MemberKind",
    "FunctionDecl",
    "Directive",
    "MatchKind",
    "NamingRule",
    "RoleKind",
    "Role",
    "ResolvedSymbol",
    "ResolutionWarning",
    "ResolutionResult",
]
