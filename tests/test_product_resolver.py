import json
import unittest

import httpx

from blog_builder.services.product_resolver import ProductResolver, extract_handle, extract_handles
from blog_builder.services.shopify_client import ShopifyClient
from shopify_stub import FakeShopify, make_settings, product_node


class TestExtractHandle(unittest.TestCase):
    def test_plain_product_url(self):
        self.assertEqual(extract_handle("https://shop.example.jp/products/linen-shirt"), "linen-shirt")

    def test_strips_query_string(self):
        url = "https://shop.example.jp/collections/new/products/linen-shirt?variant=123&utm_source=x"
        self.assertEqual(extract_handle(url), "linen-shirt")

    def test_percent_decodes_handle(self):
        url = "https://shop.example.jp/products/%E3%82%B7%E3%83%A3%E3%83%84"
        self.assertEqual(extract_handle(url), "シャツ")

    def test_url_without_products_segment(self):
        self.assertIsNone(extract_handle("https://shop.example.jp/collections/all"))

    def test_empty_handle(self):
        self.assertIsNone(extract_handle("https://shop.example.jp/products/"))
        self.assertIsNone(extract_handle("https://shop.example.jp/products/?variant=1"))

    def test_malformed_encoding_is_skipped(self):
        self.assertIsNone(extract_handle("https://shop.example.jp/products/bad%zzhandle"))
        self.assertIsNone(extract_handle("https://shop.example.jp/products/%E3%82"))

    def test_extract_handles_keeps_valid_ones_in_order(self):
        urls = [
            "https://shop.example.jp/products/b",
            "https://shop.example.jp/pages/about",
            "https://shop.example.jp/products/a",
            "https://shop.example.jp/products/%zz",
        ]
        self.assertEqual(extract_handles(urls), ["b", "a"])


class TestProductResolver(unittest.TestCase):
    def setUp(self):
        self.settings = make_settings()
        self.fake = FakeShopify(
            products={
                "linen-shirt": product_node("linen-shirt", amount="4980.0"),
                "no-price": {"title": "No Price", "handle": "no-price"},
                "untitled": {"title": "", "handle": "untitled"},
            },
            broken_handles={"offline"},
        )
        client = ShopifyClient(self.settings, transport=self.fake.transport())
        self.resolver = ProductResolver(client, self.settings)

    def test_resolves_product_record(self):
        record = self.resolver.resolve("linen-shirt")
        self.assertEqual(record.title, "Linen Shirt")
        self.assertEqual(record.image, "https://cdn.shopify.com/linen-shirt.jpg")
        self.assertEqual(record.description_html, "<p>linen-shirt</p>")
        self.assertEqual(record.price_amount, "4980.0")
        self.assertEqual(record.currency_code, "JPY")
        self.assertEqual(record.url, "https://shop.example.jp/products/linen-shirt")

    def test_missing_fields_fall_back_to_defaults(self):
        record = self.resolver.resolve("no-price")
        self.assertIsNone(record.image)
        self.assertEqual(record.description_html, "")
        self.assertEqual(record.price_amount, "0")
        self.assertEqual(record.currency_code, "JPY")
        self.assertEqual(record.url, "https://test-shop/products/no-price")

    def test_unknown_product_returns_none(self):
        self.assertIsNone(self.resolver.resolve("missing"))

    def test_product_without_title_returns_none(self):
        self.assertIsNone(self.resolver.resolve("untitled"))

    def test_network_failure_returns_none(self):
        self.assertIsNone(self.resolver.resolve("offline"))

    def test_graphql_errors_return_none(self):
        def handler(request):
            return httpx.Response(200, json={"errors": [{"message": "Throttled"}]})

        client = ShopifyClient(self.settings, transport=httpx.MockTransport(handler))
        self.assertIsNone(ProductResolver(client, self.settings).resolve("linen-shirt"))

    def test_upstream_error_status_returns_none(self):
        def handler(request):
            return httpx.Response(502, text="Bad Gateway")

        client = ShopifyClient(self.settings, transport=httpx.MockTransport(handler))
        self.assertIsNone(ProductResolver(client, self.settings).resolve("linen-shirt"))

    def test_partial_graphql_errors_keep_returned_product(self):
        node = product_node("linen-shirt", store_url=False)

        def handler(request):
            return httpx.Response(200, json={
                "data": {"productByHandle": node},
                "errors": [{"message": "Access denied for onlineStoreUrl field."}],
            })

        client = ShopifyClient(self.settings, transport=httpx.MockTransport(handler))
        record = ProductResolver(client, self.settings).resolve("linen-shirt")
        self.assertEqual(record.title, "Linen Shirt")
        self.assertEqual(record.url, "https://test-shop/products/linen-shirt")

    def test_non_object_graphql_body_returns_none(self):
        bodies = [[], "oops", {"data": ["not", "an", "object"]}]
        for body in bodies:
            def handler(request, body=body):
                return httpx.Response(200, json=body)

            client = ShopifyClient(self.settings, transport=httpx.MockTransport(handler))
            self.assertIsNone(ProductResolver(client, self.settings).resolve("x"))

    def test_bad_body_does_not_abort_the_batch(self):
        def handler(request):
            handle = json.loads(request.content)["variables"]["handle"]
            if handle == "broken":
                return httpx.Response(200, json=[])
            return httpx.Response(200, json={"data": {"productByHandle": product_node(handle)}})

        client = ShopifyClient(self.settings, transport=httpx.MockTransport(handler))
        report = ProductResolver(client, self.settings).resolve_all(["broken", "canvas-tote"])
        self.assertEqual([p.title for p in report.products], ["Canvas Tote"])
        self.assertEqual(report.failed_handles, ["broken"])

    def test_resolve_all_collects_partial_results(self):
        report = self.resolver.resolve_all(["missing", "linen-shirt", "offline", "no-price"])
        self.assertTrue(report.succeeded)
        self.assertEqual([p.title for p in report.products], ["Linen Shirt", "No Price"])
        self.assertEqual(report.failed_handles, ["missing", "offline"])
        self.assertEqual(self.fake.graphql_calls, ["missing", "linen-shirt", "offline", "no-price"])

    def test_sends_access_token(self):
        seen = {}

        def handler(request):
            seen["token"] = request.headers.get("X-Shopify-Access-Token")
            seen["path"] = request.url.path
            return httpx.Response(200, json={"data": {"productByHandle": None}})

        client = ShopifyClient(self.settings, transport=httpx.MockTransport(handler))
        ProductResolver(client, self.settings).resolve("linen-shirt")
        self.assertEqual(seen["token"], "shpat_test")
        self.assertEqual(seen["path"], "/admin/api/2024-10/graphql.json")


if __name__ == "__main__":
    unittest.main()
