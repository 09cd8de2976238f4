"""Service layer — classification, retry, execution, and read services.

Services may import from domain, config and infrastructure layers.
They must never import from commands or output.
"""
