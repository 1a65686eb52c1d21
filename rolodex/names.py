"""Display-name helpers shared by the graph view, exports, and reminder emails."""


def _clean(value):
    return (value or "").strip()


def format_full_name(person) -> str:
    """First, middle, last and second last name, skipping blanks."""
    parts = [_clean(getattr(person, attr, None))
             for attr in ("name", "middle_name", "surname", "second_last_name")]
    return " ".join(p for p in parts if p)


def format_graph_name(person) -> str:
    """Short label for graph nodes: nickname (or first name) plus surname."""
    first = _clean(getattr(person, "nickname", None)) or _clean(getattr(person, "name", None))
    surname = _clean(getattr(person, "surname", None))
    return f"{first} {surname}" if first and surname else first or surname
