"""taskboard — Project/task management REST backend and client.

Provides:
    - DynamoDB-backed document store adapter
    - Request validation and error-to-status mapping
    - Project and task resource handlers behind an API Gateway style router
    - Local HTTP server for development
    - HTTP API client, data views and a terminal front end
"""

__version__ = "1.0.0"
