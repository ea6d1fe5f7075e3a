"""Conditional field-level writes.

``update_where`` issues one ``UPDATE ... SET <values> WHERE <criteria>``
through the DAO's bulk path and returns the number of rows it matched.
Zero means the row is gone or another writer moved it first.
"""

from protean.utils.query import Q


def update_where(dao, criteria: dict, **values) -> int:
    return dao._update_all(Q(**criteria), **values) or 0
