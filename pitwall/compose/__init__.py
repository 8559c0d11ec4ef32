"""Query composition: parameters, the Query value and template folding."""
from pitwall.compose.builder import QueryComposer, query
from pitwall.compose.helpers import comment, cond, cond_fn
from pitwall.compose.parameter import Parameter, param
from pitwall.compose.query import Query
from pitwall.compose.text import canonicalize

__all__ = [
    "Parameter",
    "Query",
    "QueryComposer",
    "canonicalize",
    "comment",
    "cond",
    "cond_fn",
    "param",
    "query",
]
