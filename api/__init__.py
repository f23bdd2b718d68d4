"""REST API for the semantic mediator."""
