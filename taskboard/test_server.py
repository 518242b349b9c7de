"""test_server.py — Local HTTP server wired to an in-memory store.

Binds an ephemeral port on 127.0.0.1; no external services are needed.
"""

from __future__ import annotations

import http.client
import json
import logging
import logging.handlers
import os
import tempfile
import threading
import unittest
from unittest.mock import patch

from taskboard import server as server_module
from taskboard.config import MAX_REQUEST_BODY_BYTES
from taskboard.server import configure_logging, create_server
from taskboard.test_lambda_function import InMemoryStore


class LocalServerTests(unittest.TestCase):
    def setUp(self):
        self.store = InMemoryStore()
        self.server = create_server("127.0.0.1", 0, store=self.store)
        self.port = self.server.server_address[1]
        self.thread = threading.Thread(target=self.server.serve_forever, daemon=True)
        self.thread.start()

    def tearDown(self):
        self.server.shutdown()
        self.server.server_close()
        self.thread.join(timeout=5)

    def request(self, method, path, body=None, headers=None):
        conn = http.client.HTTPConnection("127.0.0.1", self.port, timeout=5)
        try:
            payload = json.dumps(body) if body is not None else None
            hdrs = {"Content-Type": "application/json"} if payload else {}
            hdrs.update(headers or {})
            conn.request(method, path, body=payload, headers=hdrs)
            resp = conn.getresponse()
            raw = resp.read().decode("utf-8")
            return resp.status, dict(resp.getheaders()), json.loads(raw) if raw else None
        finally:
            conn.close()

    def test_create_and_list_over_http(self):
        status, headers, created = self.request("POST", "/api/projects", {"title": "Site", "description": "Relaunch"})
        self.assertEqual(status, 201)
        self.assertEqual(headers["Content-Type"], "application/json")
        self.assertIn("Access-Control-Allow-Origin", headers)

        status, _, listed = self.request("GET", "/api/projects")
        self.assertEqual(status, 200)
        self.assertEqual(listed, [created])

    def test_options_preflight(self):
        status, headers, body = self.request("OPTIONS", "/api/projects")
        self.assertEqual(status, 204)
        self.assertIsNone(body)
        self.assertIn("DELETE", headers["Access-Control-Allow-Methods"])

    def test_not_found_route(self):
        status, _, body = self.request("GET", "/nowhere")
        self.assertEqual(status, 404)
        self.assertEqual(body, {"error": "Not found: /nowhere"})

    def test_query_string_is_not_part_of_the_path(self):
        status, _, body = self.request("GET", "/api/projects?limit=5")
        self.assertEqual((status, body), (200, []))

    def test_oversized_body_is_rejected(self):
        conn = http.client.HTTPConnection("127.0.0.1", self.port, timeout=5)
        try:
            conn.putrequest("POST", "/api/projects")
            conn.putheader("Content-Type", "application/json")
            conn.putheader("Content-Length", str(MAX_REQUEST_BODY_BYTES + 1))
            conn.endheaders()
            resp = conn.getresponse()
            body = json.loads(resp.read().decode("utf-8"))
        finally:
            conn.close()
        self.assertEqual(resp.status, 413)
        self.assertIn("exceeds", body["error"])
        self.assertEqual(self.store.collections["projects"], {})

    def test_body_that_is_not_utf8_is_rejected(self):
        conn = http.client.HTTPConnection("127.0.0.1", self.port, timeout=5)
        try:
            conn.request(
                "POST",
                "/api/projects",
                body=b'{"title": "\xff\xfe", "description": "d"}',
                headers={"Content-Type": "application/json"},
            )
            resp = conn.getresponse()
            body = json.loads(resp.read().decode("utf-8"))
        finally:
            conn.close()
        self.assertEqual(resp.status, 400)
        self.assertEqual(body, {"error": "Invalid JSON body"})
        self.assertEqual(self.store.collections["projects"], {})


class ConfigureLoggingTests(unittest.TestCase):
    def setUp(self):
        self.root = logging.getLogger()
        self.saved_handlers = list(self.root.handlers)
        self.saved_level = self.root.level

    def tearDown(self):
        for handler in self.root.handlers:
            if handler not in self.saved_handlers:
                handler.close()
        self.root.handlers[:] = self.saved_handlers
        self.root.setLevel(self.saved_level)
        if hasattr(self.root, "_taskboard_configured"):
            del self.root._taskboard_configured

    def test_file_handler_created_once(self):
        with tempfile.TemporaryDirectory() as tmp:
            log_file = os.path.join(tmp, "logs", "server.log")
            configure_logging(log_file, "DEBUG")
            configure_logging(log_file, "DEBUG")

            added = [h for h in self.root.handlers if h not in self.saved_handlers]
            rotating = [h for h in added if isinstance(h, logging.handlers.RotatingFileHandler)]
            self.assertEqual(len(rotating), 1)
            self.assertEqual(len(added), 2)
            self.assertEqual(rotating[0].maxBytes, 5 * 1024 * 1024)
            self.assertEqual(rotating[0].backupCount, 3)
            self.assertTrue(os.path.isdir(os.path.join(tmp, "logs")))
            self.assertEqual(self.root.level, logging.DEBUG)
            for handler in added:
                handler.close()

    def test_empty_log_file_means_console_only(self):
        configure_logging("", "INFO")
        added = [h for h in self.root.handlers if h not in self.saved_handlers]
        self.assertEqual(len(added), 1)
        self.assertNotIsInstance(added[0], logging.handlers.RotatingFileHandler)


class MainTests(unittest.TestCase):
    def test_main_parses_host_and_port(self):
        with patch.object(server_module, "serve") as mock_serve, patch.object(
            server_module, "configure_logging"
        ) as mock_logging:
            rc = server_module.main(["--host", "127.0.0.1", "--port", "8080", "--log-file", ""])
        self.assertEqual(rc, 0)
        mock_logging.assert_called_once_with("")
        mock_serve.assert_called_once_with("127.0.0.1", 8080)


if __name__ == "__main__":
    unittest.main()
