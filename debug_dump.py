import sys

from clang.cindex import CursorKind

from ast_parser import parse_cpp_file
from ast_walker import walk_ast
from ban_rule import call_shape


def _tokens(node):
    cursor = node.get("cursor")
    if cursor is None:
        return []
    return [t.spelling for t in cursor.get_tokens()]


def _parent_chain(node, limit=3):
    chain = []
    cur = node.get("parent")
    while cur is not None and len(chain) < limit:
        chain.append(str(cur.get("kind")))
        cur = cur.get("parent")
    return " -> ".join(chain)


def describe_calls(nodes, line_start=None, line_end=None):
    """
    One line per call expression: where it is, its callee tokens, and
    the (receiver, member) pair the ban rule would compare, or '-'.
    """
    lines = []
    for n in nodes:
        if n.get("kind") != CursorKind.CALL_EXPR:
            continue

        line = n.get("line")
        if line_start is not None and line_end is not None:
            if line is None or line < line_start or line > line_end:
                continue

        children = n.get("children", [])
        callee_tokens = _tokens(children[0]) if children else []
        shape = call_shape(n)
        pair = f"{shape[0]}.{shape[1]}" if shape else "-"

        lines.append(
            f"line={line} column={n.get('column')} name={n.get('name')} "
            f"callee={' '.join(callee_tokens)} shape={pair} parents={_parent_chain(n)}"
        )
    return lines


def main():
    if len(sys.argv) < 2:
        print("Usage: python3 debug_dump.py <file> [line_start] [line_end]")
        sys.exit(1)

    filename = sys.argv[1]
    line_start = int(sys.argv[2]) if len(sys.argv) > 2 else None
    line_end = int(sys.argv[3]) if len(sys.argv) > 3 else None

    tu = parse_cpp_file(filename)
    nodes = []
    walk_ast(tu.cursor, nodes)

    for text in describe_calls(nodes, line_start, line_end):
        print(text)


if __name__ == "__main__":
    main()
