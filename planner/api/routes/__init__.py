"""
HTTP routes. Thin layer that delegates to the service layer.
"""
