"""Integration test package.

These tests read CSV and JSON fixtures written to a temporary directory
and exercise the command line through Typer's test runner.
"""
