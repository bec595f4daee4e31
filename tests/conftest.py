"""Shared fixtures for the shielding tests."""

from typing import Callable, List

import pytest

from mdshield.structure import ELEMENT, StructuralNode


@pytest.fixture
def identity_renderer() -> Callable[[str], str]:
    """A renderer that hands its input back unchanged."""
    return lambda text: text


@pytest.fixture
def make_node() -> Callable[..., StructuralNode]:
    """Build a StructuralNode for a span of ``text`` without parsing it."""

    def _make(text: str, start: int, end: int, kind: str = ELEMENT) -> StructuralNode:
        line_start = text.rfind("\n", 0, start) + 1
        start_line = text.count("\n", 0, start) + 1
        return StructuralNode(
            kind=kind,
            start=start,
            end=end,
            start_line=start_line,
            end_line=start_line + text.count("\n", start, end),
            start_col=start - line_start + 1,
        )

    return _make


@pytest.fixture
def static_parser() -> Callable[[List[StructuralNode]], Callable[[str], List[StructuralNode]]]:
    """Wrap a fixed node list as a structural parser."""

    def _parser(nodes: List[StructuralNode]):
        return lambda text: list(nodes)

    return _parser
