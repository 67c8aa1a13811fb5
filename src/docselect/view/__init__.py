"""Selection model over the view tree."""

from .comparison import is_equal, is_similar
from .selectable import SelectionOptions
from .selection import Selection

__all__ = ["Selection", "SelectionOptions", "is_equal", "is_similar"]
