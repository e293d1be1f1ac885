from typing import Protocol, runtime_checkable


@runtime_checkable
class CallExpressionVisitor(Protocol):
    """
    Capability the rule engine looks for on a rule.

    The engine calls `on_call_expression` once for every CALL_EXPR node
    it reaches and collects whatever findings come back. Rules keep no
    reference to the engine and never write into shared results.
    """

    def on_call_expression(self, node: dict) -> list:
        ...
