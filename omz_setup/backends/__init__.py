"""
Thin wrappers around the external tools the setup stages drive.

Each backend only builds argv lists and calls the shared CommandRunner, so tests
can swap the runner for a fake and assert on the commands.
"""

__all__ = []
