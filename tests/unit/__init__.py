"""
Unit tests. The MongoDB driver is replaced by unittest.mock doubles so these
run without a server.
"""
