"""
Minimal Maven-compatible artifact repository server.

The repository engine discovers jar/war/pom files on a backing store, keeps an
in-memory index of them and answers the requests issued by ``mvn`` when it
resolves or deploys artifacts.
"""

__version__ = "0.1.0"
