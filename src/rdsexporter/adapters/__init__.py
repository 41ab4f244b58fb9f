"""Adapters implementing the core ports: AWS, storage, logging and HTTP."""
