from clang.cindex import CursorKind

from base_rule import CallExpressionVisitor


class RuleEngine:
    """
    Drives a flat, pre-ordered list of AST nodes through a collection
    of call-expression visitors and collects their findings.
    """

    def __init__(self, visitors):
        self.visitors = list(visitors)
        for visitor in self.visitors:
            if not isinstance(visitor, CallExpressionVisitor):
                raise TypeError(f"{type(visitor).__name__} has no on_call_expression() hook")

    def run(self, nodes):
        findings = []

        # Nodes already include every descendant, so nested calls
        # (arguments, receivers) get their own visit.
        for node in nodes:
            if node.get("kind") != CursorKind.CALL_EXPR:
                continue
            for visitor in self.visitors:
                findings.extend(visitor.on_call_expression(node) or [])

        return findings
