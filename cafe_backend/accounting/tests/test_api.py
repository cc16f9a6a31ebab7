# accounting/tests/test_api.py

from decimal import Decimal

from django.contrib.auth import get_user_model
from rest_framework import status
from rest_framework.test import APIClient, APITestCase

from accounting.models import Expense, Invoice, JournalEntry
from accounting.services.chart_of_accounts import seed_default_chart

TENANT = "tenant-a"
BASE = "/api/accounting"

User = get_user_model()


class AccountingApiTestCase(APITestCase):
    def setUp(self):
        self.user = User.objects.create_superuser(username="owner", password="pass12345", email="owner@example.com")
        self.client = APIClient()
        self.client.force_authenticate(user=self.user)
        self.client.credentials(HTTP_X_TENANT_ID=TENANT)
        seed_default_chart(tenant_id=TENANT)

    def client_for(self, tenant_id):
        client = APIClient()
        client.force_authenticate(user=self.user)
        client.credentials(HTTP_X_TENANT_ID=tenant_id)
        return client

    def create_entry(self, amount="10.00", post=True, **extra):
        payload = {
            "description": "Counter sale",
            "post": post,
            "lines": [
                {"account_number": "1111", "debit": amount},
                {"account_number": "4100", "credit": amount},
            ],
            **extra,
        }
        return self.client.post(f"{BASE}/journal-entries/", payload, format="json")


class JournalEntryApiTests(AccountingApiTestCase):
    def test_create_posted_entry(self):
        response = self.create_entry()

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data["status"], JournalEntry.Status.POSTED)
        self.assertEqual(response.data["total_debit"], "10.00")
        self.assertEqual(len(response.data["lines"]), 2)

    def test_unbalanced_entry_is_bad_request(self):
        payload = {
            "description": "Broken",
            "lines": [
                {"account_number": "1111", "debit": "10.00"},
                {"account_number": "4100", "credit": "9.00"},
            ],
        }
        response = self.client.post(f"{BASE}/journal-entries/", payload, format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(JournalEntry.objects.exists())

    def test_unknown_account_is_bad_request(self):
        payload = {
            "description": "Unknown",
            "lines": [
                {"account_number": "9999", "debit": "10.00"},
                {"account_number": "4100", "credit": "10.00"},
            ],
        }
        response = self.client.post(f"{BASE}/journal-entries/", payload, format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("9999", response.data["detail"])

    def test_list_is_paginated_and_filterable(self):
        self.create_entry(post=True)
        self.create_entry(post=False)

        response = self.client.get(f"{BASE}/journal-entries/", {"status": "posted"})

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["count"], 1)
        self.assertEqual(response.data["results"][0]["status"], "posted")

    def test_list_is_tenant_scoped(self):
        self.create_entry()

        response = self.client_for("tenant-b").get(f"{BASE}/journal-entries/")
        self.assertEqual(response.data["count"], 0)

    def test_draft_post_then_reverse(self):
        entry_id = self.create_entry(post=False).data["id"]

        posted = self.client.post(f"{BASE}/journal-entries/{entry_id}/post/")
        self.assertEqual(posted.status_code, status.HTTP_200_OK)
        self.assertEqual(posted.data["status"], "posted")

        reversal = self.client.post(f"{BASE}/journal-entries/{entry_id}/reverse/")
        self.assertEqual(reversal.status_code, status.HTTP_200_OK)
        self.assertEqual(reversal.data["reversal_of"], entry_id)

    def test_illegal_transitions_conflict(self):
        entry_id = self.create_entry(post=True).data["id"]

        self.assertEqual(
            self.client.post(f"{BASE}/journal-entries/{entry_id}/void/").status_code, status.HTTP_409_CONFLICT
        )
        self.assertEqual(
            self.client.post(f"{BASE}/journal-entries/{entry_id}/post/").status_code, status.HTTP_409_CONFLICT
        )

    def test_duplicate_reference_conflicts(self):
        first = self.create_entry(reference_type="manual", reference_id="adj-1")
        second = self.create_entry(reference_type="manual", reference_id="adj-1")

        self.assertEqual(first.status_code, status.HTTP_201_CREATED)
        self.assertEqual(second.status_code, status.HTTP_409_CONFLICT)

    def test_automatic_reference_types_are_reserved(self):
        response = self.create_entry(post=False, reference_type="order_cogs", reference_id="O1")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("reference_type", response.data)
        self.assertFalse(JournalEntry.objects.exists())

    def test_missing_tenant_is_bad_request(self):
        client = APIClient()
        client.force_authenticate(user=self.user)
        response = client.get(f"{BASE}/journal-entries/")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)


class ReportApiTests(AccountingApiTestCase):
    def test_trial_balance(self):
        self.create_entry(amount="25.00")

        response = self.client.get(f"{BASE}/trial-balance/")

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data["totals"]["balanced"])
        self.assertEqual(response.data["totals"]["debit_minor"], 2500)

    def test_reports_respond(self):
        self.create_entry(amount="25.00")

        for path in ("balance-sheet/", "income-statement/", "overview/", "accounts/tree/"):
            response = self.client.get(f"{BASE}/{path}")
            self.assertEqual(response.status_code, status.HTTP_200_OK, path)

    def test_bad_date_is_bad_request(self):
        response = self.client.get(f"{BASE}/trial-balance/", {"as_of": "yesterday"})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_seed_is_idempotent_over_http(self):
        response = self.client.post(f"{BASE}/accounts/seed/")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["created"], 0)


class InvoiceApiTests(AccountingApiTestCase):
    def test_invoice_lifecycle(self):
        created = self.client.post(
            f"{BASE}/invoices/",
            {
                "customer_name": "Office Catering Ltd",
                "lines": [{"description": "Coffee tray", "quantity": "2", "unit_price": "50.00"}],
            },
            format="json",
        )
        self.assertEqual(created.status_code, status.HTTP_201_CREATED)
        self.assertEqual(Decimal(created.data["total_amount"]), Decimal("115.00"))
        invoice_id = created.data["id"]

        issued = self.client.post(f"{BASE}/invoices/{invoice_id}/issue/")
        self.assertEqual(issued.status_code, status.HTTP_200_OK)
        self.assertEqual(issued.data["status"], Invoice.Status.ISSUED)

        too_much = self.client.post(f"{BASE}/invoices/{invoice_id}/payments/", {"amount": "200.00"}, format="json")
        self.assertEqual(too_much.status_code, status.HTTP_400_BAD_REQUEST)

        paid = self.client.post(
            f"{BASE}/invoices/{invoice_id}/payments/",
            {"amount_paid": "115.00", "payment_method": "bank"},
            format="json",
        )
        self.assertEqual(paid.status_code, status.HTTP_200_OK)
        self.assertEqual(paid.data["status"], Invoice.Status.PAID)

        void = self.client.post(f"{BASE}/invoices/{invoice_id}/void/")
        self.assertEqual(void.status_code, status.HTTP_409_CONFLICT)

    def test_payment_requires_exactly_one_amount(self):
        created = self.client.post(
            f"{BASE}/invoices/",
            {"customer_name": "Walk-in", "lines": [{"description": "Beans", "quantity": "1", "unit_price": "9.00"}]},
            format="json",
        )
        url = f"{BASE}/invoices/{created.data['id']}/payments/"

        self.assertEqual(self.client.post(url, {}, format="json").status_code, status.HTTP_400_BAD_REQUEST)
        both = {"amount": "1.00", "amount_paid": "1.00"}
        self.assertEqual(self.client.post(url, both, format="json").status_code, status.HTTP_400_BAD_REQUEST)

    def test_other_tenant_gets_not_found(self):
        created = self.client.post(
            f"{BASE}/invoices/",
            {"customer_name": "Walk-in", "lines": [{"description": "Beans", "quantity": "1", "unit_price": "9.00"}]},
            format="json",
        )
        response = self.client_for("tenant-b").get(f"{BASE}/invoices/{created.data['id']}/")
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)


class ExpenseApiTests(AccountingApiTestCase):
    def test_expense_lifecycle(self):
        created = self.client.post(
            f"{BASE}/expenses/",
            {"category": "utilities", "description": "Electricity", "amount": "80.00", "payment_method": "bank"},
            format="json",
        )
        self.assertEqual(created.status_code, status.HTTP_201_CREATED)
        expense_id = created.data["id"]

        approved = self.client.post(f"{BASE}/expenses/{expense_id}/approve/")
        self.assertEqual(approved.status_code, status.HTTP_200_OK)
        self.assertEqual(approved.data["status"], Expense.Status.APPROVED)

        again = self.client.post(f"{BASE}/expenses/{expense_id}/approve/")
        self.assertEqual(again.status_code, status.HTTP_409_CONFLICT)

        paid = self.client.post(f"{BASE}/expenses/{expense_id}/pay/")
        self.assertEqual(paid.status_code, status.HTTP_200_OK)
        self.assertEqual(paid.data["status"], Expense.Status.PAID)

        listing = self.client.get(f"{BASE}/expenses/")
        self.assertEqual(len(listing.data), 1)


class PermissionTests(AccountingApiTestCase):
    def test_user_without_permissions_is_forbidden(self):
        barista = User.objects.create_user(username="barista", password="pass12345")
        client = APIClient()
        client.force_authenticate(user=barista)
        client.credentials(HTTP_X_TENANT_ID=TENANT)

        self.assertEqual(client.get(f"{BASE}/journal-entries/").status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(client.get(f"{BASE}/trial-balance/").status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(
            client.post(f"{BASE}/expenses/", {"category": "rent"}, format="json").status_code,
            status.HTTP_403_FORBIDDEN,
        )

    def test_anonymous_is_rejected(self):
        response = APIClient().get(f"{BASE}/trial-balance/", HTTP_X_TENANT_ID=TENANT)
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
