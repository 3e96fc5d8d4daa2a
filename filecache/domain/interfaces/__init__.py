"""Domain Interfaces (Ports):

Defines the contracts (Abstract Base Classes) that infrastructure components
must implement. The CLI and composition root depend on these interfaces, not
concrete implementations.
"""
