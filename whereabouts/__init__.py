"""IP address management: range arithmetic, assignment, pool resources and consistency checks."""

__version__ = "0.1.0"
__all__ = ["allocate", "api", "entities", "retrievers", "poolconsistency", "testenvironment"]