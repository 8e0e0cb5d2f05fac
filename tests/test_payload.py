import hashlib
import time
import unittest

from payload import build_custom_data, build_event, build_user_data, client_ip_address
from schemas import EventData, InboundEvent, UserData


def sha256(value):
    return hashlib.sha256(value.encode()).hexdigest()


class TestClientIp(unittest.TestCase):
    def test_forwarded_for_first(self):
        headers = {"x-forwarded-for": "203.0.113.7, 10.0.0.1"}
        self.assertEqual(client_ip_address(headers, "10.0.0.2"), "203.0.113.7")

    def test_peer_fallback(self):
        self.assertEqual(client_ip_address({}, "10.0.0.2"), "10.0.0.2")


class TestBuildUserData(unittest.TestCase):
    def test_absent_fields_omitted(self):
        result = build_user_data(UserData(email="a@b.com"), "1.2.3.4", "UA")
        self.assertEqual(result["em"], sha256("a@b.com"))
        self.assertNotIn("ph", result)
        self.assertNotIn("fn", result)
        self.assertEqual(result["client_ip_address"], "1.2.3.4")
        self.assertEqual(result["client_user_agent"], "UA")

    def test_all_fields_mapped(self):
        user = UserData(
            phone="0812-3456",
            email="a@b.com",
            first_name="Budi",
            last_name="Santoso",
            city="Jakarta",
            state="JK",
            zip="10110",
            country="ID",
            external_id="cust-1",
            fbc="fb.1.1700000000.abc",
            fbp="fb.1.1700000000.123",
        )
        result = build_user_data(user, None, None)
        self.assertEqual(result["ph"], sha256("628123456"))
        self.assertEqual(result["fn"], sha256("budi"))
        self.assertEqual(result["ln"], sha256("santoso"))
        self.assertEqual(result["ct"], sha256("jakarta"))
        self.assertEqual(result["st"], sha256("jk"))
        self.assertEqual(result["zp"], sha256("10110"))
        self.assertEqual(result["country"], sha256("id"))
        self.assertEqual(result["external_id"], sha256("cust-1"))
        self.assertEqual(result["fbc"], "fb.1.1700000000.abc")
        self.assertEqual(result["fbp"], "fb.1.1700000000.123")
        self.assertNotIn("client_ip_address", result)
        self.assertNotIn("client_user_agent", result)

    def test_no_raw_pii(self):
        user = UserData(email="a@b.com", phone="0812", first_name="Budi")
        values = build_user_data(user, None, None).values()
        for raw in ("a@b.com", "0812", "Budi"):
            self.assertNotIn(raw, values)


class TestBuildCustomData(unittest.TestCase):
    def test_defaults(self):
        result = build_custom_data(EventData(value=50000))
        self.assertEqual(result, {"currency": "IDR", "value": 50000, "content_type": "product"})

    def test_empty_event_data(self):
        result = build_custom_data(EventData())
        self.assertEqual(result, {"currency": "IDR", "value": 0, "content_type": "product"})

    def test_optional_fields_passed_through(self):
        data = EventData(
            currency="USD",
            value=12.5,
            content_name="Course",
            content_ids=["sku-1"],
            content_type="product_group",
            contents=[{"id": "sku-1", "quantity": 1}],
            order_id="ORD-9",
        )
        result = build_custom_data(data)
        self.assertEqual(result["currency"], "USD")
        self.assertEqual(result["value"], 12.5)
        self.assertEqual(result["content_type"], "product_group")
        self.assertEqual(result["content_ids"], ["sku-1"])
        self.assertEqual(result["contents"], [{"id": "sku-1", "quantity": 1}])
        self.assertEqual(result["order_id"], "ORD-9")


class TestBuildEvent(unittest.TestCase):
    headers = {"user-agent": "Mozilla/5.0", "referer": "https://shop.example/checkout"}

    def test_minimal_event(self):
        result = build_event(InboundEvent(event_name="PageView"), self.headers, "10.0.0.2", now=1700000000.9)
        self.assertEqual(result["event_name"], "PageView")
        self.assertEqual(result["event_time"], 1700000000)
        self.assertEqual(result["action_source"], "website")
        self.assertEqual(result["event_source_url"], "https://shop.example/checkout")
        self.assertEqual(
            result["user_data"],
            {"client_ip_address": "10.0.0.2", "client_user_agent": "Mozilla/5.0"},
        )
        self.assertNotIn("custom_data", result)
        self.assertNotIn("event_id", result)

    def test_event_id_and_source_url_passthrough(self):
        event = InboundEvent(
            event_name="Lead",
            event_id="evt-123",
            event_source_url="https://shop.example/landing",
            event_data=EventData(value=100),
        )
        result = build_event(event, self.headers, None)
        self.assertEqual(result["event_id"], "evt-123")
        self.assertEqual(result["event_source_url"], "https://shop.example/landing")
        self.assertEqual(result["custom_data"]["value"], 100)

    def test_no_source_url(self):
        result = build_event(InboundEvent(event_name="Lead"), {}, None)
        self.assertNotIn("event_source_url", result)
        self.assertEqual(result["user_data"], {})

    def test_event_time_is_current(self):
        before = int(time.time())
        result = build_event(InboundEvent(event_name="Lead"), {}, None)
        self.assertGreaterEqual(result["event_time"], before)
        self.assertIsInstance(result["event_time"], int)
