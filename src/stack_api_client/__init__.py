"""Stack API Client.

Typed Python client for a stack management REST API: stacks, stack
components and service connectors, with pagination and structured errors.
"""

__version__ = "0.1.0"
