"""Connection pool adapters for concrete database clients.

Adapters import their client libraries lazily; install the matching extra
(``pitwall[postgres]``) before use.
"""
