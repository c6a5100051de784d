"""Boolean query language for the search index.

Grammar, loosely::

    query   := expr
    expr    := expr OR expr | expr AND expr | NOT expr | '(' expr ')'
             | TERM | '"' PHRASE '"'

Adjacent operands are joined by an implicit AND, so ``quick brown`` means
``quick AND brown``. Precedence is NOT > AND > OR; parentheses override it.
Queries are lexed into tokens, rewritten to reverse Polish notation with a
shunting-yard pass, and evaluated against postings bitsets.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Iterator, Sequence, Union

from .errors import QueryError

if TYPE_CHECKING:
    from .index import Index


class Operator(Enum):
    """Operator and grouping tokens."""
    AND = "AND"
    OR = "OR"
    NOT = "NOT"
    LPAREN = "("
    RPAREN = ")"


@dataclass(frozen=True)
class Term:
    """A single lowercased word."""
    value: str


@dataclass(frozen=True)
class Phrase:
    """A lowercased quoted phrase, matched as a substring of the line."""
    value: str


Token = Union[Term, Phrase, Operator]

KEYWORDS = {
    "and": Operator.AND,
    "or": Operator.OR,
    "not": Operator.NOT,
}

PRECEDENCE = {
    Operator.NOT: 3,
    Operator.AND: 2,
    Operator.OR: 1,
}


# ========== Lexing ==========

def _read_phrase(query: str, start: int) -> tuple[str, int]:
    end = query.find('"', start)
    if end < 0:
        raise QueryError("invalid query: unterminated phrase")
    return query[start:end], end + 1


def _read_word(query: str, start: int) -> tuple[str, int]:
    i = start
    while i < len(query):
        ch = query[i]
        if ch.isspace() or ch in "()":
            break
        i += 1
    return query[start:i], i


def lex(query: str) -> list[Token]:
    """Split a query string into tokens.

    Raises:
        QueryError: On an unterminated or empty phrase
    """
    tokens: list[Token] = []
    query = query.strip()
    i = 0
    while i < len(query):
        ch = query[i]
        if ch.isspace():
            i += 1
        elif ch == "(":
            tokens.append(Operator.LPAREN)
            i += 1
        elif ch == ")":
            tokens.append(Operator.RPAREN)
            i += 1
        elif ch == '"':
            phrase, i = _read_phrase(query, i + 1)
            if not phrase.strip():
                raise QueryError("invalid query: empty phrase")
            tokens.append(Phrase(phrase.lower()))
        else:
            word, i = _read_word(query, i)
            lower = word.lower()
            tokens.append(KEYWORDS.get(lower) or Term(lower))
    return tokens


# ========== Parsing ==========

def _ends_operand(tok: Token) -> bool:
    return isinstance(tok, (Term, Phrase)) or tok is Operator.RPAREN


def _starts_operand(tok: Token) -> bool:
    return isinstance(tok, (Term, Phrase)) or tok in (Operator.LPAREN, Operator.NOT)


def insert_implicit_and(tokens: Sequence[Token]) -> list[Token]:
    """Join adjacent operands with AND.

    ``x NOT y`` becomes ``x AND NOT y``: NOT opens a new operand.
    """
    result: list[Token] = []
    for tok in tokens:
        if result and _ends_operand(result[-1]) and _starts_operand(tok):
            result.append(Operator.AND)
        result.append(tok)
    return result


def parse_query(query: str) -> list[Token]:
    """Lex a query and insert implicit conjunctions.

    Raises:
        QueryError: If the query is empty or cannot be lexed
    """
    if not query.strip():
        raise QueryError("empty query")
    tokens = lex(query)
    if not tokens:
        raise QueryError("empty query")
    return insert_implicit_and(tokens)


def to_rpn(tokens: Sequence[Token]) -> list[Token]:
    """Reorder infix tokens into reverse Polish notation (shunting-yard).

    AND and OR are left-associative. NOT is a unary prefix operator, so a
    NOT never pops a pending NOT; ``NOT NOT x`` stacks both and evaluates
    to ``x``.

    Raises:
        QueryError: On unbalanced parentheses
    """
    output: list[Token] = []
    stack: list[Operator] = []

    for tok in tokens:
        if isinstance(tok, (Term, Phrase)):
            output.append(tok)
        elif tok in PRECEDENCE:
            if tok is not Operator.NOT:
                while stack and stack[-1] is not Operator.LPAREN:
                    if PRECEDENCE[stack[-1]] < PRECEDENCE[tok]:
                        break
                    output.append(stack.pop())
            stack.append(tok)
        elif tok is Operator.LPAREN:
            stack.append(tok)
        elif tok is Operator.RPAREN:
            while stack and stack[-1] is not Operator.LPAREN:
                output.append(stack.pop())
            if not stack:
                raise QueryError("invalid query: unbalanced parentheses")
            stack.pop()
        else:
            raise QueryError(f"invalid query: unsupported token {tok!r}")

    while stack:
        top = stack.pop()
        if top is Operator.LPAREN:
            raise QueryError("invalid query: unbalanced parentheses")
        output.append(top)

    return output


def compile_query(query: str) -> list[Token]:
    """Parse a query string all the way to RPN."""
    return to_rpn(parse_query(query))


# ========== Evaluation ==========

class Postings:
    """A set of 0-based entry positions stored as an integer bitset.

    Bit ``i`` is set when entry ``i`` matches. AND/OR/NOT map onto integer
    bit operations, and iteration is always in ascending position order.
    """

    __slots__ = ("bits",)

    def __init__(self, bits: int = 0):
        self.bits = bits

    @classmethod
    def from_positions(cls, positions: Sequence[int]) -> "Postings":
        bits = 0
        for pos in positions:
            bits |= 1 << pos
        return cls(bits)

    @classmethod
    def all(cls, size: int) -> "Postings":
        return cls((1 << size) - 1)

    def __and__(self, other: "Postings") -> "Postings":
        return Postings(self.bits & other.bits)

    def __or__(self, other: "Postings") -> "Postings":
        return Postings(self.bits | other.bits)

    def complement(self, universe: "Postings") -> "Postings":
        return Postings(universe.bits & ~self.bits)

    def __contains__(self, pos: int) -> bool:
        return pos >= 0 and bool(self.bits >> pos & 1)

    def __iter__(self) -> Iterator[int]:
        bits = self.bits
        while bits:
            low = bits & -bits
            yield low.bit_length() - 1
            bits ^= low

    def __len__(self) -> int:
        return bin(self.bits).count("1")

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Postings):
            return NotImplemented
        return self.bits == other.bits

    def __repr__(self) -> str:
        return f"Postings({list(self)})"


def term_postings(index: "Index", term: str) -> Postings:
    return Postings.from_positions(index.terms.get(term, ()))


def phrase_postings(index: "Index", phrase: str) -> Postings:
    bits = 0
    for pos, entry in enumerate(index.entries):
        if phrase in entry.normalized:
            bits |= 1 << pos
    return Postings(bits)


def evaluate(rpn: Sequence[Token], index: "Index") -> Postings:
    """Evaluate an RPN token stream against an index.

    Raises:
        QueryError: On stack underflow or leftover operands
    """
    universe = Postings.all(len(index.entries))
    stack: list[Postings] = []

    for tok in rpn:
        if isinstance(tok, Term):
            stack.append(term_postings(index, tok.value))
        elif isinstance(tok, Phrase):
            stack.append(phrase_postings(index, tok.value))
        elif tok is Operator.NOT:
            if not stack:
                raise QueryError("invalid query")
            stack.append(stack.pop().complement(universe))
        elif tok is Operator.AND or tok is Operator.OR:
            if len(stack) < 2:
                raise QueryError("invalid query")
            right = stack.pop()
            left = stack.pop()
            stack.append(left & right if tok is Operator.AND else left | right)
        else:
            raise QueryError("invalid query")

    if len(stack) != 1:
        raise QueryError("invalid query")

    return stack[0]
