"""ASGI request handling: dispatch, error mapping, response sending."""
