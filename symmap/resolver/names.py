"""Name style helpers for exported binding names."""

from typing import Sequence

NAME_STYLES = ("none", "camel", "export")


def remove_prefixed_name(name: str, trim_prefixes: Sequence[str]) -> str:
    """Remove the first matching prefix from a name."""
    for prefix in trim_prefixes:
        if prefix and name.startswith(prefix):
            return name[len(prefix):]
    return name


def to_camel_case(name: str, first_part_upper: bool) -> str:
    parts = name.split("_")
    result = []
    for i, part in enumerate(parts):
        if i == 0 and not first_part_upper:
            result.append(part)
            continue
        if part:
            result.append(part[:1].upper() + part[1:])
    return "".join(result)


def pub_name(name: str) -> str:
    """Convert a C name to a public CamelCase name.

    Leading underscores or a leading digit produce an ``X`` prefix, trailing
    underscores are kept.
    """
    if not name:
        return name

    base = name.strip("_")
    if not base:
        return "X" + name

    prefix = "_" * (len(name) - len(name.lstrip("_")))
    suffix = "_" * (len(name) - len(name.rstrip("_")))

    if prefix or base[0].isdigit():
        return "X" + prefix + to_camel_case(base, False) + suffix
    return to_camel_case(base, True) + suffix


def export_name(name: str) -> str:
    """Make a name public without changing its casing otherwise."""
    if not name:
        return name
    if name[0] == "_" or name[0].isdigit():
        return "X" + name
    return name[:1].upper() + name[1:]


def apply_style(name: str, style: str) -> str:
    if style == "camel":
        return pub_name(name)
    if style == "export":
        return export_name(name)
    if style == "none":
        return name
    raise ValueError(f"Unknown name style: {style}")
