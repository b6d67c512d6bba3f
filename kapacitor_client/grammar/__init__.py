"""Request-body helpers — escaping and key case conversion."""

from kapacitor_client.grammar.escape import dash_to_snake, quoted, snake_to_dash, to_dash, to_snake

__all__ = ["dash_to_snake", "quoted", "snake_to_dash", "to_dash", "to_snake"]
