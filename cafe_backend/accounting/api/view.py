# PATH: accounting/api/view.py

"""
PATH: accounting/api/view.py

JOURNAL ENTRY VIEWSET

- list / retrieve (tenant-scoped, filterable via django-filter):
    /api/accounting/journal-entries/?status=posted&reference_type=order_cogs
- create: manual balanced entry (draft, or posted with "post": true)
- actions: post / void (drafts only) / reverse (posted only)

Posted entries are never edited here: there is no update or destroy route.

Security rules:
- read requires accounting.view_journalentry
- create/post/void/reverse require accounting.add_journalentry
"""

from django.db.models import Prefetch
from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.decorators import action
from rest_framework.exceptions import PermissionDenied
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.viewsets import ReadOnlyModelViewSet

from accounting.api.errors import domain_error_response, forbidden
from accounting.api.serializers import JournalEntryCreateSerializer, JournalEntrySerializer
from accounting.models import Account, JournalEntry, JournalLine
from accounting.services.exceptions import AccountingServiceError
from accounting.services.journal_entry_service import (
    create_and_post_journal_entry,
    create_journal_entry,
    post_journal_entry,
    reverse_journal_entry,
    void_journal_entry,
)
from backend.tenancy import tenant_id_from

VIEW_PERMISSION = "accounting.view_journalentry"
WRITE_PERMISSION = "accounting.add_journalentry"


@extend_schema(tags=["accounting"])
class JournalEntryViewSet(ReadOnlyModelViewSet):
    permission_classes = [IsAuthenticated]
    serializer_class = JournalEntrySerializer
    filterset_fields = ["status", "reference_type", "reference_id", "entry_date"]

    queryset = JournalEntry.objects.prefetch_related(
        Prefetch("lines", queryset=JournalLine.objects.select_related("account"))
    ).order_by("-entry_date", "-id")

    def get_queryset(self):
        if not self.request.user.has_perm(VIEW_PERMISSION):
            raise PermissionDenied("You do not have permission to view journal entries.")
        return super().get_queryset().filter(tenant_id=tenant_id_from(self.request))

    def _actor(self) -> str:
        return self.request.user.get_username()

    @extend_schema(request=JournalEntryCreateSerializer, responses={201: JournalEntrySerializer, 400: dict})
    def create(self, request, *args, **kwargs):
        if not request.user.has_perm(WRITE_PERMISSION):
            return forbidden("You do not have permission to create journal entries.")

        tenant_id = tenant_id_from(request)
        s = JournalEntryCreateSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        data = s.validated_data

        numbers = {line["account_number"] for line in data["lines"]}
        accounts = {
            a.account_number: a
            for a in Account.objects.filter(tenant_id=tenant_id, account_number__in=numbers)
        }
        missing = sorted(numbers - set(accounts))
        if missing:
            return Response(
                {"detail": f"Unknown account number(s): {', '.join(missing)}"},
                status=status.HTTP_400_BAD_REQUEST,
            )

        lines = [
            {
                "account": accounts[line["account_number"]],
                "debit": line.get("debit"),
                "credit": line.get("credit"),
                "description": line.get("description", ""),
                "branch_id": line.get("branch_id", ""),
            }
            for line in data["lines"]
        ]
        kwargs = {
            "tenant_id": tenant_id,
            "description": data["description"],
            "lines": lines,
            "entry_date": data.get("entry_date"),
            "reference_type": data.get("reference_type") or None,
            "reference_id": data.get("reference_id") or None,
            "branch_id": data.get("branch_id") or None,
        }

        try:
            if data.get("post"):
                entry = create_and_post_journal_entry(posted_by=self._actor(), **kwargs)
            else:
                entry = create_journal_entry(created_by=self._actor(), **kwargs)
        except AccountingServiceError as exc:
            return domain_error_response(exc)

        return Response(self.get_serializer(entry).data, status=status.HTTP_201_CREATED)

    def _transition(self, fn, **kwargs):
        if not self.request.user.has_perm(WRITE_PERMISSION):
            return forbidden("You do not have permission to change journal entries.")
        entry = self.get_object()
        try:
            result = fn(entry=entry, **kwargs)
        except AccountingServiceError as exc:
            return domain_error_response(exc)
        fresh = self.get_queryset().get(pk=result.pk)
        return Response(self.get_serializer(fresh).data, status=status.HTTP_200_OK)

    @extend_schema(request=None, responses={200: JournalEntrySerializer, 409: dict})
    @action(detail=True, methods=["post"], url_path="post", url_name="post")
    def post_entry(self, request, pk=None):
        return self._transition(post_journal_entry, posted_by=self._actor())

    @extend_schema(request=None, responses={200: JournalEntrySerializer, 409: dict})
    @action(detail=True, methods=["post"])
    def void(self, request, pk=None):
        return self._transition(void_journal_entry, voided_by=self._actor())

    @extend_schema(request=None, responses={200: JournalEntrySerializer, 409: dict})
    @action(detail=True, methods=["post"])
    def reverse(self, request, pk=None):
        return self._transition(reverse_journal_entry, reversed_by=self._actor())
