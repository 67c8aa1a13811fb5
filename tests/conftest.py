"""Shared pytest fixtures."""

from __future__ import annotations

from dataclasses import dataclass

import pytest

from docselect.core import (
    AttributeElement,
    ContainerElement,
    Element,
    RootEditableElement,
    Text,
    UIElement,
)


@dataclass(slots=True)
class SampleTree:
    """``<div><p>foo<b>bar</b>baz</p><p>x<img/><ui/>y</p></div>`` with handles on every node."""

    root: RootEditableElement
    first: ContainerElement
    foo: Text
    bold: AttributeElement
    bar: Text
    baz: Text
    second: ContainerElement
    x: Text
    img: Element
    ui: UIElement
    y: Text


@pytest.fixture
def tree() -> SampleTree:
    foo, bar, baz = Text("foo"), Text("bar"), Text("baz")
    bold = AttributeElement("b", children=[bar])
    first = ContainerElement("p", children=[foo, bold, baz])

    x, y = Text("x"), Text("y")
    img = Element("img", {"src": "cat.png"})
    ui = UIElement("span", {"class": "marker"})
    second = ContainerElement("p", children=[x, img, ui, y])

    root = RootEditableElement("div", children=[first, second])
    return SampleTree(
        root=root,
        first=first,
        foo=foo,
        bold=bold,
        bar=bar,
        baz=baz,
        second=second,
        x=x,
        img=img,
        ui=ui,
        y=y,
    )
