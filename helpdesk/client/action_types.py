from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class ActionType:
    """A family of action type strings sharing one base name.

    ``FETCH_ACCOUNTS.ACTION`` is dispatched by the caller; the client answers
    with ``FETCH_ACCOUNTS.SUCCESS`` or ``FETCH_ACCOUNTS.ERROR``.
    """

    name: str

    @property
    def ACTION(self) -> str:  # noqa: N802
        return self.name

    @property
    def PENDING(self) -> str:  # noqa: N802
        return f"{self.name}_PENDING"

    @property
    def SUCCESS(self) -> str:  # noqa: N802
        return f"{self.name}_SUCCESS"

    @property
    def ERROR(self) -> str:  # noqa: N802
        return f"{self.name}_ERROR"


FETCH_ACCOUNTS = ActionType("FETCH_ACCOUNTS")
SAVE_EDIT_ACCOUNT = ActionType("SAVE_EDIT_ACCOUNT")
UNLOAD_ACCOUNTS = ActionType("UNLOAD_ACCOUNTS")

FETCH_TICKETS = ActionType("FETCH_TICKETS")
FETCH_TICKET = ActionType("FETCH_TICKET")
CREATE_TICKET = ActionType("CREATE_TICKET")
UPDATE_TICKET = ActionType("UPDATE_TICKET")
DELETE_TICKET = ActionType("DELETE_TICKET")
POST_COMMENT = ActionType("POST_COMMENT")
SUBSCRIBE_TICKET = ActionType("SUBSCRIBE_TICKET")
