"""Identifier case conversion used for table names and URL segments."""


def to_snake_case(name: str) -> str:
    """Convert a PascalCase or camelCase identifier to snake_case.

    An underscore goes before an uppercase letter when the previous letter
    is lowercase, or when the previous letter is uppercase and the next one
    is lowercase (acronym followed by a word). Existing underscores pass
    through and never get a duplicate next to them.

    Examples:
        UserName   -> user_name
        ID         -> id
        HTTPServer -> http_server
    """
    result: list[str] = []
    for i, char in enumerate(name):
        if i > 0 and char.isupper():
            prev = name[i - 1]
            nxt = name[i + 1] if i + 1 < len(name) else ""
            if prev != "_" and (
                prev.islower() or (prev.isupper() and nxt.islower())
            ):
                result.append("_")
        result.append(char)
    return "".join(result).lower()


def pluralize(name: str) -> str:
    """Naive pluralization: append an "s"."""
    return name + "s"


def default_table_name(entity_name: str) -> str:
    """Default table for an entity, e.g. "OrderLine" -> "order_lines"."""
    return pluralize(to_snake_case(entity_name))


def resource_name(entity_name: str) -> str:
    """URL resource segment for an entity: its lowercased name."""
    return entity_name.lower()
