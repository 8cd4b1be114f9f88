"""
Schemas module - Request schemas for API endpoints.

Responses are plain camelCase dicts wrapped in the {ok, data} envelope
by app.core.errors.ok.
"""
