import base64
import unittest

import support  # noqa: F401

from pydantic import ValidationError

from schemas import InboundRequest, OutboundResponse, ServiceDescriptor, TaskInstance


class TestSchemas(unittest.TestCase):
    def test_pairs_flatten_last_value_wins(self):
        inbound = InboundRequest(
            method="get",
            headers=[("X-Tag", "a"), ("X-Tag", "b")],
            query=[("k", "1"), ("other", "x"), ("k", "2")],
        )

        self.assertEqual(inbound.method, "GET")
        self.assertEqual(inbound.headers, {"X-Tag": "b"})
        self.assertEqual(inbound.query, {"k": "2", "other": "x"})

    def test_header_case_is_preserved(self):
        inbound = InboundRequest(method="GET", headers={"X-Mixed-Case": "v"})

        self.assertIn("X-Mixed-Case", inbound.headers)

    def test_task_running_requires_both_statuses(self):
        self.assertTrue(TaskInstance(task_id="t", last_status="RUNNING", desired_status="RUNNING").is_running)
        self.assertFalse(TaskInstance(task_id="t", last_status="RUNNING", desired_status="STOPPED").is_running)
        self.assertFalse(TaskInstance(task_id="t", last_status="PENDING", desired_status="RUNNING").is_running)
        self.assertFalse(TaskInstance(task_id="t").is_running)

    def test_outbound_always_base64(self):
        response = OutboundResponse.from_raw(200, {"content-type": "text/html"}, b"<p>hi</p>")

        self.assertEqual(response.body_encoding, "base64")
        self.assertEqual(base64.b64decode(response.body), b"<p>hi</p>")

    def test_descriptor_is_immutable(self):
        descriptor = ServiceDescriptor(cluster_id="c", service_id="s")

        with self.assertRaises(ValidationError):
            descriptor.cluster_id = "other"


if __name__ == "__main__":
    unittest.main()
