"""
IDSC Player Registry
Registration backend for the IDSC cricket community: sequential player ids,
validated player records, and a small read API over them.
"""

__version__ = "2.0.0"
