from typing import Final

ROLE_GRANTS: Final[dict[str, frozenset[str]]] = {
    "admin": frozenset({"*"}),
    "support": frozenset(
        {
            "tickets:update",
            "tickets:removeAttachment",
        }
    ),
    "user": frozenset(),
}


def can_this(role: str | None, action: str) -> bool:
    grants = ROLE_GRANTS.get(role or "", frozenset())
    return "*" in grants or action in grants
