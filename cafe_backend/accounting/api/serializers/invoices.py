# accounting/api/serializers/invoices.py

from rest_framework import serializers

from accounting.models.invoice import Invoice, InvoiceLine


class InvoiceLineSerializer(serializers.ModelSerializer):
    class Meta:
        model = InvoiceLine
        fields = (
            "id",
            "description",
            "quantity",
            "unit_price",
            "discount_percent",
            "tax_rate",
            "line_subtotal",
            "line_discount",
            "line_tax",
            "line_total",
        )
        read_only_fields = fields


class InvoiceSerializer(serializers.ModelSerializer):
    lines = InvoiceLineSerializer(many=True, read_only=True)
    balance_due = serializers.DecimalField(max_digits=14, decimal_places=2, read_only=True)

    class Meta:
        model = Invoice
        fields = (
            "id",
            "tenant_id",
            "branch_id",
            "invoice_number",
            "customer_name",
            "customer_tax_number",
            "issue_date",
            "due_date",
            "subtotal",
            "discount_amount",
            "tax_amount",
            "total_amount",
            "amount_paid",
            "balance_due",
            "status",
            "journal_entry",
            "notes",
            "created_by",
            "created_at",
            "lines",
        )
        read_only_fields = fields


class InvoiceLineInputSerializer(serializers.Serializer):
    description = serializers.CharField(max_length=255)
    quantity = serializers.DecimalField(max_digits=12, decimal_places=3)
    unit_price = serializers.DecimalField(max_digits=14, decimal_places=2)
    discount_percent = serializers.DecimalField(max_digits=5, decimal_places=2, required=False, default=0)
    tax_rate = serializers.DecimalField(max_digits=5, decimal_places=4, required=False)


class InvoiceCreateSerializer(serializers.Serializer):
    customer_name = serializers.CharField(max_length=150)
    customer_tax_number = serializers.CharField(max_length=50, required=False, allow_blank=True)
    branch_id = serializers.CharField(max_length=64, required=False, allow_blank=True)
    issue_date = serializers.DateField(required=False)
    due_date = serializers.DateField(required=False, allow_null=True)
    notes = serializers.CharField(max_length=255, required=False, allow_blank=True)
    lines = InvoiceLineInputSerializer(many=True)

    def validate_lines(self, value):
        if not value:
            raise serializers.ValidationError("At least one line is required")
        return value


class InvoicePaymentSerializer(serializers.Serializer):
    """
    Either `amount` (a new payment) or `amount_paid` (the new running total).
    """

    amount = serializers.DecimalField(max_digits=14, decimal_places=2, required=False)
    amount_paid = serializers.DecimalField(max_digits=14, decimal_places=2, required=False)
    payment_method = serializers.ChoiceField(
        choices=[(Invoice.PAYMENT_CASH, "Cash"), (Invoice.PAYMENT_BANK, "Bank")],
        default=Invoice.PAYMENT_CASH,
    )

    def validate(self, attrs):
        if ("amount" in attrs) == ("amount_paid" in attrs):
            raise serializers.ValidationError("Provide exactly one of amount or amount_paid")
        return attrs
