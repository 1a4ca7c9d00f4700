from dataclasses import dataclass
from enum import Enum


class TokenKind(Enum):
    PLAIN = "plain"
    LINE_ROW = "line_row"
    LINE_COL = "line_col"
    AREA = "area"
    WILDCARD = "wildcard"

    @property
    def is_special(self) -> bool:
        return self is not TokenKind.PLAIN

    @property
    def is_blast(self) -> bool:
        return self in (TokenKind.LINE_ROW, TokenKind.LINE_COL, TokenKind.AREA)

    @property
    def is_line(self) -> bool:
        return self in (TokenKind.LINE_ROW, TokenKind.LINE_COL)


@dataclass(slots=True)
class Token:
    """Matchable token occupying a cell.

    The component stays on its cell entity; when a token moves (swap, gravity)
    its fields are copied to the destination cell, token_id included, so the
    id follows the token rather than the cell.
    """
    token_id: int
    color: int
    kind: TokenKind = TokenKind.PLAIN
    frozen: bool = False

    def copy_from(self, other: "Token") -> None:
        self.token_id = other.token_id
        self.color = other.color
        self.kind = other.kind
        self.frozen = other.frozen
