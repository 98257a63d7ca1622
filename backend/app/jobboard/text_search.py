"""
Full-text search over weighted searchable documents

A searchable document maps each lexeme to the highest weight it appears with
and the positions where it appears:

    {"backend": {"w": "A", "p": [1, 7]}, "rust": {"w": "B", "p": [3]}}

Queries use a web-search style syntax: terms are ANDed, ``or`` between two
terms is a disjunction, ``-term`` negates and a quoted string is a phrase.
Before matching, the final lexeme of the query is rewritten to
``exact OR prefix`` so results keep up while the user is still typing.
"""
import re
from typing import Dict, Iterable, List, Optional, Sequence, Set, Tuple

SearchDocument = Dict[str, Dict]

# Relative value of each weight when ranking matches
WEIGHT_VALUES = {"A": 1.0, "B": 0.4, "C": 0.2, "D": 0.1}

_LEXEME_RE = re.compile(r"[^\W_]+")
_QUERY_TOKEN_RE = re.compile(r'(-?)"([^"]*)"?|(\S+)')


def tokenize(text: Optional[str]) -> List[str]:
    """Split text into lowercase lexemes (no stemming, no stop words)"""
    if not text:
        return []
    return _LEXEME_RE.findall(text.lower())


def build_document(parts: Iterable[Tuple[Optional[str], str]]) -> SearchDocument:
    """
    Build a searchable document from (text, weight) parts.
    Positions keep increasing across parts, like concatenated tsvectors.
    """
    document: SearchDocument = {}
    position = 0
    for text, weight in parts:
        for lexeme in tokenize(text):
            position += 1
            entry = document.setdefault(lexeme, {"w": weight, "p": []})
            if weight < entry["w"]:  # "A" sorts before "B": keep the strongest
                entry["w"] = weight
            entry["p"].append(position)
    return document


class Node:
    """Base class of the parsed query tree"""

    def matches(self, document: SearchDocument) -> bool:
        raise NotImplementedError

    def rank(self, document: SearchDocument) -> float:
        return 0.0


class Lexeme(Node):
    """Whole-word match"""

    def __init__(self, value: str):
        self.value = value

    def matching_keys(self, document: SearchDocument) -> List[str]:
        return [self.value] if self.value in document else []

    def positions(self, document: SearchDocument) -> Set[int]:
        found: Set[int] = set()
        for key in self.matching_keys(document):
            found.update(document[key]["p"])
        return found

    def matches(self, document: SearchDocument) -> bool:
        return bool(self.matching_keys(document))

    def rank(self, document: SearchDocument) -> float:
        values = [WEIGHT_VALUES.get(document[key]["w"], 0.0) for key in self.matching_keys(document)]
        return max(values, default=0.0)

    def __repr__(self):
        return f"'{self.value}'"


class Prefix(Lexeme):
    """Matches any lexeme starting with the value"""

    def matching_keys(self, document: SearchDocument) -> List[str]:
        return [key for key in document if key.startswith(self.value)]

    def __repr__(self):
        return f"'{self.value}':*"


class AnyOf(Node):
    """Alternatives for a single word position"""

    def __init__(self, alternatives: Sequence[Lexeme]):
        self.alternatives = list(alternatives)

    def positions(self, document: SearchDocument) -> Set[int]:
        found: Set[int] = set()
        for alternative in self.alternatives:
            found |= alternative.positions(document)
        return found

    def matches(self, document: SearchDocument) -> bool:
        return any(a.matches(document) for a in self.alternatives)

    def rank(self, document: SearchDocument) -> float:
        return max((a.rank(document) for a in self.alternatives), default=0.0)

    def __repr__(self):
        return "( " + " | ".join(repr(a) for a in self.alternatives) + " )"


class Phrase(Node):
    """Words that must appear at consecutive positions"""

    def __init__(self, items: Sequence[Node]):
        self.items = list(items)

    def matches(self, document: SearchDocument) -> bool:
        positions = [item.positions(document) for item in self.items]
        if not all(positions):
            return False
        return any(
            all(start + offset in item_positions for offset, item_positions in enumerate(positions))
            for start in positions[0]
        )

    def rank(self, document: SearchDocument) -> float:
        if not self.matches(document):
            return 0.0
        return sum(item.rank(document) for item in self.items)

    def __repr__(self):
        return " <-> ".join(repr(i) for i in self.items)


class Not(Node):
    def __init__(self, child: Node):
        self.child = child

    def matches(self, document: SearchDocument) -> bool:
        return not self.child.matches(document)

    def __repr__(self):
        return f"!{self.child!r}"


class And(Node):
    def __init__(self, children: Sequence[Node]):
        self.children = list(children)

    def matches(self, document: SearchDocument) -> bool:
        return all(c.matches(document) for c in self.children)

    def rank(self, document: SearchDocument) -> float:
        return sum(c.rank(document) for c in self.children)

    def __repr__(self):
        return " & ".join(repr(c) for c in self.children)


class Or(Node):
    def __init__(self, children: Sequence[Node]):
        self.children = list(children)

    def matches(self, document: SearchDocument) -> bool:
        return any(c.matches(document) for c in self.children)

    def rank(self, document: SearchDocument) -> float:
        return sum(c.rank(document) for c in self.children if c.matches(document))

    def __repr__(self):
        return "( " + " | ".join(repr(c) for c in self.children) + " )"


def _words_node(lexemes: List[str]) -> Node:
    if len(lexemes) == 1:
        return Lexeme(lexemes[0])
    return Phrase([Lexeme(value) for value in lexemes])


def parse_query(text: Optional[str]) -> Optional[Node]:
    """Parse a web-search style query, returns None when it has no lexemes"""
    if not text:
        return None

    groups: List[List[Node]] = []
    pending_or = False
    for match in _QUERY_TOKEN_RE.finditer(text):
        negate, quoted, word = match.groups()
        if quoted is not None:
            lexemes = tokenize(quoted)
            negate = bool(negate)
        else:
            negate = word.startswith("-") and len(word) > 1
            if negate:
                word = word[1:]
            if word.lower() == "or" and not negate:
                pending_or = bool(groups)
                continue
            lexemes = tokenize(word)
        if not lexemes:
            continue

        node = _words_node(lexemes)
        if negate:
            node = Not(node)
        if pending_or:
            groups[-1].append(node)
        else:
            groups.append([node])
        pending_or = False

    if not groups:
        return None
    clauses = [group[0] if len(group) == 1 else Or(group) for group in groups]
    return clauses[0] if len(clauses) == 1 else And(clauses)


def expand_last_lexeme(node: Node) -> Node:
    """Rewrite the rightmost lexeme of the tree into exact OR prefix"""
    if isinstance(node, Lexeme):
        return AnyOf([Lexeme(node.value), Prefix(node.value)])
    if isinstance(node, Not):
        return Not(expand_last_lexeme(node.child))
    if isinstance(node, Phrase):
        return Phrase(node.items[:-1] + [expand_last_lexeme(node.items[-1])])
    if isinstance(node, (And, Or)):
        return type(node)(node.children[:-1] + [expand_last_lexeme(node.children[-1])])
    return node


class SearchQuery:
    """Parsed and prefix-expanded free-text query"""

    def __init__(self, text: str, root: Node):
        self.text = text
        self.root = root

    def matches(self, document: Optional[SearchDocument]) -> bool:
        return self.root.matches(document or {})

    def rank(self, document: Optional[SearchDocument]) -> float:
        return self.root.rank(document or {})

    def __repr__(self):
        return f"SearchQuery({self.root!r})"


def build_search_query(text: Optional[str]) -> Optional[SearchQuery]:
    """Parse and expand a user query, None means no text constraint"""
    root = parse_query(text)
    if root is None:
        return None
    return SearchQuery(text, expand_last_lexeme(root))
