"""Shared builders for outline-sync tests."""

from outline_sync.models import OutlineNode


def node(uid, text, *children, view_type=None):
    return OutlineNode(uid=uid, text=text, children=list(children), view_type=view_type)


def sample_nodes():
    """
    A small page:

        - A **one**
          - B
            - C [link](x)
          - D
        - E
    """
    return [
        node("a", "A **one**",
             node("b", "B",
                  node("c", "C [link](x)")),
             node("d", "D")),
        node("e", "E"),
    ]
