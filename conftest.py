"""
Root conftest: puts the repository root on sys.path so tests can import
``tests.fixtures`` and the top-level packages without an install.
"""
