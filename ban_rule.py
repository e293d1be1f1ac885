from clang.cindex import CursorKind, TokenKind

from ban_list import BanList
from finding import Finding


FAILURE_STRING_PART = "function invocation disallowed: "

RULE_METADATA = {
    "name": "ban",
    "description": "Bans the use of specific functions.",
    "options": {
        "type": "list",
        "description": "Contains ['object', 'function'] pairs so that object.function() is banned.",
        "list_type": {
            "type": "array",
            "array_members": [
                {"description": "Object to ban", "type": "string"},
                {"description": "Method name to ban", "type": "string"},
            ],
        },
    },
    "option_examples": ['[true, ["console", "log"], ["someObject", "someFunction"]]'],
    "type": "readability",
}


def _extent_offsets(cursor):
    extent = cursor.extent
    return extent.start.offset, extent.end.offset


def _tokens_within(cursor):
    """
    Tokens of a cursor, clipped to its extent. Some libclang versions
    hand back one token past the end of the range.
    """
    start, end = _extent_offsets(cursor)
    return [
        tok
        for tok in cursor.get_tokens()
        if tok.kind != TokenKind.COMMENT and start <= tok.extent.start.offset < end
    ]


def _callee(node):
    children = node.get("children", [])
    if not children:
        return None

    cur = children[0]
    # Implicit casts show up as UNEXPOSED_EXPR over the same text.
    while cur.get("kind") == CursorKind.UNEXPOSED_EXPR:
        inner = cur.get("children", [])
        if len(inner) != 1:
            return None
        if _extent_offsets(inner[0]["cursor"]) != _extent_offsets(cur["cursor"]):
            return None
        cur = inner[0]
    return cur


def _opens_argument_list(call_cursor, callee_cursor):
    _, callee_end = _extent_offsets(callee_cursor)
    for tok in _tokens_within(call_cursor):
        if tok.extent.start.offset >= callee_end:
            return tok.spelling == "("
    return False


def call_shape(node):
    """
    Decompose a CALL_EXPR node shaped `receiver.member(...)`.

    Returns (receiver_text, member_text, callee_node), or None when the
    callee is anything other than exactly `Identifier . Identifier`.
    """
    callee = _callee(node)
    if callee is None or callee.get("kind") != CursorKind.MEMBER_REF_EXPR:
        return None

    tokens = _tokens_within(callee["cursor"])
    if len(tokens) != 3:
        return None

    receiver, dot, member = tokens
    if receiver.kind != TokenKind.IDENTIFIER or member.kind != TokenKind.IDENTIFIER:
        return None
    if dot.spelling != ".":
        return None

    if not _opens_argument_list(node["cursor"], callee["cursor"]):
        return None

    return receiver.spelling, member.spelling, callee


def make_finding(callee_node, receiver_text, member_text):
    extent = callee_node["cursor"].extent
    start = extent.start
    return Finding(
        start_offset=start.offset,
        width=extent.end.offset - start.offset,
        message=f"{FAILURE_STRING_PART}{receiver_text}.{member_text}",
        line=start.line,
        column=start.column,
        rule=RULE_METADATA["name"],
    )


class BanFunctionRule:
    """
    Reports calls of the form `receiver.member(...)` whose names match
    an entry of the ban list.
    """

    def __init__(self, ban_list=None):
        self.ban_list = ban_list if ban_list is not None else BanList()

    def on_call_expression(self, node):
        shape = call_shape(node)
        if shape is None:
            return []

        receiver_text, member_text, callee = shape
        findings = []
        for pair in self.ban_list.entries():
            if receiver_text == pair.receiver_name and member_text == pair.member_name:
                findings.append(make_finding(callee, receiver_text, member_text))
        return findings
