"""
HTTP surface of the analytics read-models.
"""
