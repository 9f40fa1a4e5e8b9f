"""
HTTP control surface for a single decoder instance.
"""
