# inventory/tests/test_api.py

from decimal import Decimal

from django.contrib.auth import get_user_model
from django.test import override_settings
from rest_framework import status
from rest_framework.test import APIClient, APITestCase

from accounting.services.chart_of_accounts import seed_default_chart
from inventory.models import RawItem, StockAlert, StockMovement
from inventory.services.stock_ledger import adjust

TENANT = "tenant-a"
BRANCH = "branch-1"
BASE = "/api/inventory"

User = get_user_model()


class InventoryApiTests(APITestCase):
    def setUp(self):
        self.user = User.objects.create_superuser(username="owner", password="pass12345", email="owner@example.com")
        self.client = APIClient()
        self.client.force_authenticate(user=self.user)
        self.client.credentials(HTTP_X_TENANT_ID=TENANT)
        self.beans = RawItem.objects.create(tenant_id=TENANT, code="BEANS", name="Coffee Beans", unit="g")

    def client_for(self, tenant_id):
        client = APIClient()
        client.force_authenticate(user=self.user)
        client.credentials(HTTP_X_TENANT_ID=tenant_id)
        return client

    def test_create_raw_item_normalizes_unit(self):
        response = self.client.post(
            f"{BASE}/raw-items/",
            {"code": "MILK", "name": "Whole Milk", "unit": " L "},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data["unit"], "l")

    def test_duplicate_code_is_rejected_within_tenant(self):
        response = self.client.post(
            f"{BASE}/raw-items/", {"code": "BEANS", "name": "More Beans", "unit": "g"}, format="json"
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("code", response.data)

        other = self.client_for("tenant-b").post(
            f"{BASE}/raw-items/", {"code": "BEANS", "name": "Beans", "unit": "g"}, format="json"
        )
        self.assertEqual(other.status_code, status.HTTP_201_CREATED)
        self.assertEqual(other.data["tenant_id"], "tenant-b")

    def test_unknown_unit_is_rejected(self):
        response = self.client.post(
            f"{BASE}/raw-items/",
            {"code": "X", "name": "Mystery", "unit": "bushel"},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_adjust_and_read_stock_level(self):
        response = self.client.post(
            f"{BASE}/stock/adjust/",
            {"branch_id": BRANCH, "raw_item_id": str(self.beans.pk), "delta": "500", "note": "opening count"},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(Decimal(response.data["new_quantity"]), Decimal("500"))

        levels = self.client.get(f"{BASE}/stock/", {"branch_id": BRANCH})
        self.assertEqual(levels.status_code, status.HTTP_200_OK)
        beans = next(row for row in levels.data["stock"] if row["raw_item_name"] == "Coffee Beans")
        self.assertEqual(Decimal(beans["quantity"]), Decimal("500"))

    def test_stock_requires_branch(self):
        response = self.client.get(f"{BASE}/stock/")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_adjust_unknown_raw_item_is_not_found(self):
        response = self.client.post(
            f"{BASE}/stock/adjust/",
            {"branch_id": BRANCH, "raw_item_id": "00000000-0000-0000-0000-000000000000", "delta": "1"},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    @override_settings(ACCOUNTING_POSTING_ENABLED=True)
    def test_purchase_converts_units_and_posts(self):
        seed_default_chart(tenant_id=TENANT)

        response = self.client.post(
            f"{BASE}/stock/purchase/",
            {
                "branch_id": BRANCH,
                "raw_item_id": str(self.beans.pk),
                "quantity": "2",
                "unit": "kg",
                "total_cost": "30.00",
                "reference_id": "GRN-1",
            },
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(Decimal(response.data["new_quantity"]), Decimal("2000"))
        self.assertEqual(Decimal(response.data["unit_cost"]), Decimal("0.0150"))
        self.assertIsNotNone(response.data["journal_entry_id"])

    def test_transfer_moves_stock_between_branches(self):
        adjust(branch_id=BRANCH, raw_item_id=self.beans.pk, delta=300, movement_type="purchase")

        response = self.client.post(
            f"{BASE}/stock/transfer/",
            {"from_branch_id": BRANCH, "to_branch_id": "branch-2", "raw_item_id": str(self.beans.pk), "quantity": "100"},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)

        movements = self.client.get(f"{BASE}/movements/", {"branch_id": "branch-2"})
        self.assertEqual(len(movements.data), 1)

    def test_min_level_raises_and_resolves_alert(self):
        response = self.client.post(
            f"{BASE}/stock/min-level/",
            {"branch_id": BRANCH, "raw_item_id": str(self.beans.pk), "min_stock_level": "50"},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)

        alerts = self.client.get(f"{BASE}/alerts/")
        self.assertEqual(len(alerts.data), 1)

        alert = StockAlert.objects.get()
        resolved = self.client.post(f"{BASE}/alerts/{alert.pk}/resolve/")
        self.assertEqual(resolved.status_code, status.HTTP_200_OK)
        self.assertTrue(resolved.data["is_resolved"])

    def test_writes_need_permission(self):
        barista = User.objects.create_user(username="barista", password="pass12345")
        client = APIClient()
        client.force_authenticate(user=barista)
        client.credentials(HTTP_X_TENANT_ID=TENANT)

        response = client.post(
            f"{BASE}/stock/adjust/",
            {"branch_id": BRANCH, "raw_item_id": str(self.beans.pk), "delta": "5"},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        # reading the catalog is open to any authenticated user
        self.assertEqual(client.get(f"{BASE}/raw-items/").status_code, status.HTTP_200_OK)

    def test_missing_tenant_is_bad_request(self):
        client = APIClient()
        client.force_authenticate(user=self.user)

        self.assertEqual(client.get(f"{BASE}/raw-items/").status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(client.get(f"{BASE}/stock/", {"branch_id": BRANCH}).status_code, status.HTTP_400_BAD_REQUEST)

    def test_other_tenant_cannot_see_or_move_raw_items(self):
        adjust(branch_id=BRANCH, raw_item_id=self.beans.pk, delta=100, movement_type="purchase")
        other = self.client_for("tenant-b")

        self.assertEqual(other.get(f"{BASE}/raw-items/").data["count"], 0)
        self.assertEqual(other.get(f"{BASE}/raw-items/{self.beans.pk}/").status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(other.get(f"{BASE}/movements/", {"branch_id": BRANCH}).data, [])

        response = other.post(
            f"{BASE}/stock/adjust/",
            {"branch_id": BRANCH, "raw_item_id": str(self.beans.pk), "delta": "-100"},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(StockMovement.objects.count(), 1)

    def test_other_tenant_cannot_resolve_alerts(self):
        self.client.post(
            f"{BASE}/stock/min-level/",
            {"branch_id": BRANCH, "raw_item_id": str(self.beans.pk), "min_stock_level": "50"},
            format="json",
        )
        alert = StockAlert.objects.get()
        other = self.client_for("tenant-b")

        self.assertEqual(other.get(f"{BASE}/alerts/").data, [])
        response = other.post(f"{BASE}/alerts/{alert.pk}/resolve/")
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        alert.refresh_from_db()
        self.assertFalse(alert.is_resolved)

    @override_settings(ACCOUNTING_POSTING_ENABLED=True)
    def test_repeated_purchase_is_replayed(self):
        seed_default_chart(tenant_id=TENANT)
        payload = {
            "branch_id": BRANCH,
            "raw_item_id": str(self.beans.pk),
            "quantity": "1",
            "unit": "kg",
            "total_cost": "30.00",
            "reference_id": "PO-1",
        }

        first = self.client.post(f"{BASE}/stock/purchase/", payload, format="json")
        again = self.client.post(f"{BASE}/stock/purchase/", payload, format="json")

        self.assertEqual(first.status_code, status.HTTP_201_CREATED)
        self.assertFalse(first.data["replayed"])
        self.assertEqual(again.status_code, status.HTTP_200_OK)
        self.assertTrue(again.data["replayed"])
        self.assertEqual(Decimal(again.data["new_quantity"]), Decimal("1000"))
        self.assertEqual(again.data["journal_entry_id"], first.data["journal_entry_id"])
        self.assertEqual(StockMovement.objects.filter(reference_id="PO-1").count(), 1)
