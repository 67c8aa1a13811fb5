"""Minimal view tree used as the document model behind selections."""

from __future__ import annotations

from typing import Any, ClassVar, Iterable, Iterator, Mapping

from ..errors import TreeError


class Node:
    """Base class for every item that can live inside a view tree."""

    _types: ClassVar[frozenset[str]] = frozenset({"node"})

    def __init__(self) -> None:
        self._parent: Element | None = None

    @property
    def parent(self) -> Element | None:
        return self._parent

    @property
    def index(self) -> int | None:
        """Return the offset of the node inside its parent, or ``None`` when detached."""

        if self._parent is None:
            return None
        return self._parent.get_child_index(self)

    @property
    def root(self) -> Node:
        node: Node = self
        while node._parent is not None:
            node = node._parent
        return node

    @property
    def next_sibling(self) -> Node | None:
        index = self.index
        if index is None or self._parent is None:
            return None
        return self._parent.get_child(index + 1)

    @property
    def previous_sibling(self) -> Node | None:
        index = self.index
        if index is None or self._parent is None or index == 0:
            return None
        return self._parent.get_child(index - 1)

    def is_(self, type_name: str) -> bool:
        """Return ``True`` when the node has the given capability name."""

        return type_name in self._types

    def get_ancestors(self, *, include_self: bool = False, parent_first: bool = False) -> list[Node]:
        ancestors: list[Node] = []
        node: Node | None = self if include_self else self._parent
        while node is not None:
            ancestors.append(node)
            node = node._parent
        if not parent_first:
            ancestors.reverse()
        return ancestors

    def get_path(self) -> list[int]:
        """Return the offsets leading from the root down to this node."""

        path: list[int] = []
        node: Node = self
        while node._parent is not None:
            path.append(node._parent.get_child_index(node))
            node = node._parent
        path.reverse()
        return path

    def remove(self) -> None:
        """Detach the node from its parent."""

        if self._parent is not None:
            self._parent.remove_children(self._parent.get_child_index(self))


class Text(Node):
    """Leaf node holding character data; positions inside it count characters."""

    _types = frozenset({"node", "text"})

    def __init__(self, data: str = "") -> None:
        super().__init__()
        self._data = str(data)

    @property
    def data(self) -> str:
        return self._data

    @data.setter
    def data(self, value: str) -> None:
        self._data = str(value)

    def __repr__(self) -> str:
        return f"Text({self._data!r})"


class Element(Node):
    """Node that owns an ordered list of children."""

    _types = frozenset({"node", "element"})

    def __init__(
        self,
        name: str,
        attrs: Mapping[str, Any] | None = None,
        children: Iterable[Node | str] | Node | str | None = None,
    ) -> None:
        super().__init__()
        self.name = name
        self._attrs: dict[str, Any] = dict(attrs or {})
        self._children: list[Node] = []
        if children is not None:
            self.insert_child(0, children)

    @property
    def child_count(self) -> int:
        return len(self._children)

    @property
    def is_empty(self) -> bool:
        return not self._children

    def get_child(self, index: int) -> Node | None:
        if 0 <= index < len(self._children):
            return self._children[index]
        return None

    def get_child_index(self, node: Node) -> int:
        for index, child in enumerate(self._children):
            if child is node:
                return index
        raise TreeError(message="Node is not a child of this element")

    def get_children(self) -> Iterator[Node]:
        return iter(tuple(self._children))

    def get_attribute(self, key: str, default: Any = None) -> Any:
        return self._attrs.get(key, default)

    def has_attribute(self, key: str) -> bool:
        return key in self._attrs

    def set_attribute(self, key: str, value: Any) -> None:
        self._attrs[key] = value

    def insert_child(self, index: int, items: Iterable[Node | str] | Node | str) -> int:
        """Insert ``items`` at ``index`` and return how many nodes were inserted."""

        if not 0 <= index <= len(self._children):
            raise TreeError(
                message="Child index out of bounds",
                details={"index": index, "child_count": len(self._children)},
            )
        nodes = list(_normalize_nodes(items))
        for offset, node in enumerate(nodes):
            if node is self or node in self.get_ancestors(include_self=True):
                raise TreeError(message="Cannot insert an element into itself")
            node.remove()
            node._parent = self
            self._children.insert(index + offset, node)
        return len(nodes)

    def append_child(self, items: Iterable[Node | str] | Node | str) -> int:
        return self.insert_child(len(self._children), items)

    def remove_children(self, index: int, count: int = 1) -> list[Node]:
        removed = self._children[index:index + count]
        del self._children[index:index + count]
        for node in removed:
            node._parent = None
        return removed

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name}>"


class ContainerElement(Element):
    """Block-level element such as a paragraph or heading."""

    _types = frozenset({"node", "element", "containerElement"})


class AttributeElement(Element):
    """Inline formatting wrapper (bold, links); transparent for trimming."""

    _types = frozenset({"node", "element", "attributeElement"})
    DEFAULT_PRIORITY: ClassVar[int] = 10

    def __init__(
        self,
        name: str,
        attrs: Mapping[str, Any] | None = None,
        children: Iterable[Node | str] | Node | str | None = None,
        *,
        priority: int = DEFAULT_PRIORITY,
    ) -> None:
        super().__init__(name, attrs, children)
        self.priority = priority


class EditableElement(ContainerElement):
    """Container whose contents can be edited by the user."""

    _types = frozenset({"node", "element", "containerElement", "editableElement"})

    def __init__(
        self,
        name: str,
        attrs: Mapping[str, Any] | None = None,
        children: Iterable[Node | str] | Node | str | None = None,
        *,
        is_read_only: bool = False,
    ) -> None:
        super().__init__(name, attrs, children)
        self.is_read_only = is_read_only


class RootEditableElement(EditableElement):
    """Top-level editable element of a document."""

    _types = frozenset(
        {"node", "element", "containerElement", "editableElement", "rootElement"}
    )

    def __init__(
        self,
        name: str = "div",
        attrs: Mapping[str, Any] | None = None,
        children: Iterable[Node | str] | Node | str | None = None,
        *,
        root_name: str = "main",
    ) -> None:
        super().__init__(name, attrs, children)
        self.root_name = root_name


class UIElement(Element):
    """Element rendered by the UI only; it never holds children."""

    _types = frozenset({"node", "element", "uiElement"})

    def insert_child(self, index: int, items: Iterable[Node | str] | Node | str) -> int:
        if list(_normalize_nodes(items)):
            raise TreeError(message="Cannot insert a child into UIElement")
        return 0


def max_offset(parent: Node) -> int:
    """Return the last valid offset inside ``parent``."""

    if isinstance(parent, Text):
        return len(parent.data)
    if isinstance(parent, Element):
        return parent.child_count
    raise TreeError(message=f"{type(parent).__name__} cannot contain positions")


def _normalize_nodes(items: Iterable[Node | str] | Node | str) -> Iterator[Node]:
    if isinstance(items, (Node, str)):
        items = (items,)
    for item in items:
        if isinstance(item, str):
            yield Text(item)
        elif isinstance(item, Node):
            yield item
        else:
            raise TreeError(message=f"Cannot insert {type(item).__name__} into the tree")


__all__ = [
    "Node",
    "Text",
    "Element",
    "ContainerElement",
    "AttributeElement",
    "EditableElement",
    "RootEditableElement",
    "UIElement",
    "max_offset",
]
