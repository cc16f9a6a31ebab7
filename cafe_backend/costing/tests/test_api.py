# costing/tests/test_api.py

from decimal import Decimal

from django.contrib.auth import get_user_model
from django.test import override_settings
from rest_framework import status
from rest_framework.test import APIClient, APITestCase

from accounting.models import JournalEntry
from accounting.services.chart_of_accounts import seed_default_chart
from costing.models import OrderCosting
from inventory.models import RawItem, StockMovement
from inventory.services.stock_ledger import adjust, get_stock_level
from recipes.models import MenuProduct, RecipeLine

TENANT = "tenant-a"
BRANCH = "branch-1"

User = get_user_model()


class CafeApiTestCase(APITestCase):
    def setUp(self):
        self.user = User.objects.create_superuser(username="owner", password="pass12345", email="owner@example.com")
        self.client = APIClient()
        self.client.force_authenticate(user=self.user)

        self.beans = RawItem.objects.create(
            tenant_id=TENANT, code="BEANS", name="Coffee Beans", unit="g", unit_cost=Decimal("0.0200")
        )
        self.espresso = MenuProduct.objects.create(tenant_id=TENANT, name="Espresso", price=Decimal("2.30"))
        RecipeLine.objects.create(product=self.espresso, raw_item=self.beans, quantity=Decimal("18"), unit="g")
        adjust(branch_id=BRANCH, raw_item_id=self.beans.pk, delta=1000, movement_type="purchase")

    def order(self, order_id="o-1", quantity="2", **extra):
        return {
            "order_id": order_id,
            "branch_id": BRANCH,
            "line_items": [{"product_id": str(self.espresso.pk), "quantity": quantity}],
            **extra,
        }


class CostOrderApiTests(CafeApiTestCase):
    def test_first_call_costs_then_replays(self):
        first = self.client.post("/api/costing/orders/", self.order(), format="json")
        self.assertEqual(first.status_code, status.HTTP_201_CREATED)
        self.assertTrue(first.data["success"])
        self.assertEqual(Decimal(first.data["cost_of_goods"]), Decimal("0.72"))

        again = self.client.post("/api/costing/orders/", self.order(), format="json")
        self.assertEqual(again.status_code, status.HTTP_200_OK)
        self.assertEqual(again.data["cost_of_goods"], first.data["cost_of_goods"])

        # stock is deducted exactly once
        level = get_stock_level(branch_id=BRANCH, raw_item=self.beans)
        self.assertEqual(level.quantity, Decimal("964"))
        self.assertEqual(StockMovement.objects.filter(reference_id="o-1").count(), 1)

    def test_detail_returns_stored_costing(self):
        self.client.post("/api/costing/orders/", self.order(), format="json")

        response = self.client.get("/api/costing/orders/o-1/")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(Decimal(response.data["cost_of_goods"]), Decimal("0.72"))
        self.assertFalse(response.data["has_shortages"])

        self.assertEqual(self.client.get("/api/costing/orders/nope/").status_code, status.HTTP_404_NOT_FOUND)

    def test_unknown_product_is_a_warning(self):
        payload = self.order()
        payload["line_items"][0]["product_id"] = "00000000-0000-0000-0000-000000000000"

        response = self.client.post("/api/costing/orders/", payload, format="json")
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(Decimal(response.data["cost_of_goods"]), Decimal("0"))
        self.assertEqual(len(response.data["warnings"]), 1)
        self.assertEqual(get_stock_level(branch_id=BRANCH, raw_item=self.beans).quantity, Decimal("1000"))

    def test_invalid_quantity_fails_validation(self):
        response = self.client.post("/api/costing/orders/", self.order(quantity="0"), format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    @override_settings(ACCOUNTING_POSTING_ENABLED=True)
    def test_tenant_header_posts_to_ledger(self):
        seed_default_chart(tenant_id=TENANT)

        response = self.client.post(
            "/api/costing/orders/",
            self.order(total_amount="4.60"),
            format="json",
            HTTP_X_TENANT_ID=TENANT,
        )

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertIsNotNone(response.data["cogs_journal_entry_id"])
        self.assertIsNotNone(response.data["sale_journal_entry_id"])
        self.assertEqual(JournalEntry.objects.filter(tenant_id=TENANT).count(), 2)

    @override_settings(ACCOUNTING_POSTING_ENABLED=True)
    def test_missing_chart_rolls_back_costing(self):
        response = self.client.post(
            "/api/costing/orders/", self.order(), format="json", HTTP_X_TENANT_ID=TENANT
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(OrderCosting.objects.exists())
        self.assertEqual(get_stock_level(branch_id=BRANCH, raw_item=self.beans).quantity, Decimal("1000"))

    def test_estimate_leaves_stock_alone(self):
        response = self.client.post(
            "/api/costing/estimate/",
            {"line_items": [{"product_id": str(self.espresso.pk), "quantity": "1"}]},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["cost_of_goods"], "0.36")
        self.assertEqual(get_stock_level(branch_id=BRANCH, raw_item=self.beans).quantity, Decimal("1000"))

    def test_costing_needs_permission(self):
        barista = User.objects.create_user(username="barista", password="pass12345")
        client = APIClient()
        client.force_authenticate(user=barista)

        response = client.post("/api/costing/orders/", self.order(), format="json")
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)


class RecipeApiTests(CafeApiTestCase):
    def setUp(self):
        super().setUp()
        self.client.credentials(HTTP_X_TENANT_ID=TENANT)

    def test_product_cost_and_margin(self):
        response = self.client.get(f"/api/recipes/products/{self.espresso.pk}/cost/")

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["total_cost"], "0.36")
        self.assertEqual(Decimal(response.data["profit"]), Decimal("1.94"))
        self.assertEqual(len(response.data["lines"]), 1)

    def test_product_list_includes_recipe(self):
        response = self.client.get("/api/recipes/products/")

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        product = response.data["results"][0]
        self.assertEqual(product["name"], "Espresso")
        self.assertEqual(len(product["recipe_lines"]), 1)

    def test_recipe_line_rejects_unknown_unit(self):
        response = self.client.post(
            "/api/recipes/recipe-lines/",
            {"product": str(self.espresso.pk), "raw_item": str(self.beans.pk), "quantity": "5", "unit": "handful"},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_writes_need_permission(self):
        barista = User.objects.create_user(username="barista", password="pass12345")
        client = APIClient()
        client.force_authenticate(user=barista)
        client.credentials(HTTP_X_TENANT_ID=TENANT)

        self.assertEqual(client.get("/api/recipes/products/").status_code, status.HTTP_200_OK)
        response = client.post(
            "/api/recipes/products/", {"name": "Mocha", "price": "3.50"}, format="json"
        )
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_recipe_line_keeps_its_note(self):
        response = self.client.post(
            "/api/recipes/recipe-lines/",
            {
                "product": str(self.espresso.pk),
                "raw_item": str(self.beans.pk),
                "quantity": "2",
                "unit": "g",
                "note": "extra shot for large cups",
            },
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(RecipeLine.objects.get(pk=response.data["id"]).note, "extra shot for large cups")
        listed = self.client.get("/api/recipes/recipe-lines/", {"product": str(self.espresso.pk)})
        self.assertIn("extra shot for large cups", [row["note"] for row in listed.data["results"]])

    def test_create_product_takes_the_request_tenant(self):
        response = self.client.post(
            "/api/recipes/products/", {"tenant_id": "tenant-b", "name": "Mocha", "price": "3.50"}, format="json"
        )

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data["tenant_id"], TENANT)

    def test_other_tenant_sees_no_recipes(self):
        client = APIClient()
        client.force_authenticate(user=self.user)
        client.credentials(HTTP_X_TENANT_ID="tenant-b")

        self.assertEqual(client.get("/api/recipes/products/").data["count"], 0)
        self.assertEqual(client.get("/api/recipes/recipe-lines/").data["count"], 0)
        self.assertEqual(
            client.get(f"/api/recipes/products/{self.espresso.pk}/cost/").status_code, status.HTTP_404_NOT_FOUND
        )

    def test_recipe_line_rejects_other_tenant_raw_item(self):
        foreign = RawItem.objects.create(tenant_id="tenant-b", code="OAT", name="Oat Milk", unit="ml")

        response = self.client.post(
            "/api/recipes/recipe-lines/",
            {"product": str(self.espresso.pk), "raw_item": str(foreign.pk), "quantity": "30", "unit": "ml"},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("raw_item", response.data)

    def test_missing_tenant_is_bad_request(self):
        client = APIClient()
        client.force_authenticate(user=self.user)

        self.assertEqual(client.get("/api/recipes/products/").status_code, status.HTTP_400_BAD_REQUEST)
