"""
docdb_demo Integration Tests

These tests start a single-node MongoDB replica set in a Docker container
(transactions need a replica set) and run the demo operations against it.

Port: 27100 (to avoid conflicts with local MongoDB)
"""
