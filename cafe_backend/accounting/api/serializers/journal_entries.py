# accounting/api/serializers/journal_entries.py

from decimal import Decimal

from rest_framework import serializers

from accounting.models.journal import JournalEntry
from accounting.models.journal_line import JournalLine
from accounting.services.journal_entry_service import SYSTEM_REFERENCE_TYPES


class JournalLineSerializer(serializers.ModelSerializer):
    account_number = serializers.CharField(source="account.account_number", read_only=True)
    account_name = serializers.CharField(source="account.name", read_only=True)

    class Meta:
        model = JournalLine
        fields = (
            "id",
            "account",
            "account_number",
            "account_name",
            "debit",
            "credit",
            "description",
            "branch_id",
        )
        read_only_fields = fields


class JournalEntrySerializer(serializers.ModelSerializer):
    lines = JournalLineSerializer(many=True, read_only=True)
    total_debit = serializers.SerializerMethodField()
    total_credit = serializers.SerializerMethodField()

    class Meta:
        model = JournalEntry
        fields = (
            "id",
            "tenant_id",
            "entry_date",
            "description",
            "status",
            "reference_type",
            "reference_id",
            "reversal_of",
            "created_by",
            "posted_by",
            "posted_at",
            "voided_by",
            "voided_at",
            "created_at",
            "total_debit",
            "total_credit",
            "lines",
        )
        read_only_fields = fields

    def get_total_debit(self, obj) -> str:
        return str(sum((line.debit for line in obj.lines.all()), Decimal("0.00")))

    def get_total_credit(self, obj) -> str:
        return str(sum((line.credit for line in obj.lines.all()), Decimal("0.00")))


class JournalLineInputSerializer(serializers.Serializer):
    account_number = serializers.CharField(max_length=20)
    debit = serializers.DecimalField(max_digits=18, decimal_places=2, required=False, default=Decimal("0.00"))
    credit = serializers.DecimalField(max_digits=18, decimal_places=2, required=False, default=Decimal("0.00"))
    description = serializers.CharField(max_length=255, required=False, allow_blank=True)
    branch_id = serializers.CharField(max_length=64, required=False, allow_blank=True)


class JournalEntryCreateSerializer(serializers.Serializer):
    """
    Manual journal entry (Swagger-visible).
    Balance is validated by the journal engine, not here.
    """

    description = serializers.CharField(max_length=255)
    entry_date = serializers.DateField(required=False)
    reference_type = serializers.CharField(max_length=50, required=False, allow_blank=True)
    reference_id = serializers.CharField(max_length=100, required=False, allow_blank=True)
    branch_id = serializers.CharField(max_length=64, required=False, allow_blank=True)
    post = serializers.BooleanField(required=False, default=False)
    lines = JournalLineInputSerializer(many=True)

    def validate_reference_type(self, value):
        if value.strip() in SYSTEM_REFERENCE_TYPES:
            raise serializers.ValidationError(
                f"'{value.strip()}' is reserved for automatic postings"
            )
        return value

    def validate_lines(self, value):
        if len(value) < 2:
            raise serializers.ValidationError("A journal entry needs at least two lines")
        return value
