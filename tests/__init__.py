"""Test suite for forestprep.

Unit tests cover formatting, column resolution and request building;
integration tests drive the readers and the command line end to end.
Run `pytest` from the project root.
"""
