"""Collision disambiguation of resolved names."""

from typing import Dict, List, Sequence, Set, Tuple
import logging

from ..models.symbol import ResolvedSymbol

logger = logging.getLogger(__name__)


class Disambiguator:
    """Assign unique final names within each scope, in declaration order.

    Methods are scoped by owner type, functions (including methods emitted
    as functions) share the global scope. The first occurrence of a base
    name keeps it; the Nth later occurrence becomes ``<base>__N``.
    """

    SUFFIX_SEPARATOR = "__"

    def disambiguate(self, symbols: Sequence[ResolvedSymbol]) -> List[ResolvedSymbol]:
        """Return the symbols with collision-free final names.

        Args:
            symbols: Resolved symbols in declaration order

        Returns:
            New symbols in the same order
        """
        counts: Dict[Tuple[str, ...], Dict[str, int]] = {}
        taken: Dict[Tuple[str, ...], Set[str]] = {}
        result: List[ResolvedSymbol] = []

        for symbol in symbols:
            scope = symbol.scope()
            scope_counts = counts.setdefault(scope, {})
            scope_taken = taken.setdefault(scope, set())

            base = symbol.base_name
            seen = scope_counts.get(base, 0)
            scope_counts[base] = seen + 1

            if seen == 0 and base not in scope_taken:
                final_name = base
            else:
                # 既に使われている接尾辞付きの名前は飛ばす
                index = max(seen, 1)
                while self._suffixed(base, index) in scope_taken:
                    index += 1
                final_name = self._suffixed(base, index)

            scope_taken.add(final_name)

            if final_name != base:
                logger.debug(f"Renamed {symbol.raw_name}: {base} -> {final_name}")
            result.append(symbol.with_final_name(final_name))

        return result

    def _suffixed(self, base: str, index: int) -> str:
        return f"{base}{self.SUFFIX_SEPARATOR}{index}"
