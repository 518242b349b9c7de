"""taskboard.client — HTTP API wrapper, data views and terminal front end."""
