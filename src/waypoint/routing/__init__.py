"""Routing — ordered route table with first-match dispatch.

Routes are registered during setup, grouped under shared prefixes and
middleware, and frozen before the first request.
"""
