# PATH: accounting/api/serializers/expenses.py

from rest_framework import serializers

from accounting.models.expense import Expense


class ExpenseSerializer(serializers.ModelSerializer):
    """
    Output serializer (DB truth) - clean, stable contract.
    """

    total_amount = serializers.DecimalField(max_digits=14, decimal_places=2, read_only=True)

    class Meta:
        model = Expense
        fields = [
            "id",
            "tenant_id",
            "branch_id",
            "expense_number",
            "category",
            "description",
            "vendor",
            "expense_date",
            "amount",
            "vat_amount",
            "total_amount",
            "payment_method",
            "status",
            "journal_entry",
            "payment_journal_entry",
            "created_by",
            "approved_by",
            "approved_at",
            "paid_at",
            "created_at",
        ]
        read_only_fields = fields


class ExpenseCreateSerializer(serializers.Serializer):
    """
    Input serializer (Swagger-visible).
    """

    category = serializers.ChoiceField(choices=Expense.Category.choices)
    description = serializers.CharField(max_length=255)
    amount = serializers.DecimalField(max_digits=14, decimal_places=2)
    vat_amount = serializers.DecimalField(max_digits=14, decimal_places=2, required=False, default=0)
    payment_method = serializers.ChoiceField(choices=Expense.PAYMENT_METHODS, default=Expense.PAYMENT_CASH)
    branch_id = serializers.CharField(max_length=64, required=False, allow_blank=True)
    vendor = serializers.CharField(max_length=150, required=False, allow_blank=True)
    expense_date = serializers.DateField(required=False)

    def validate_amount(self, value):
        if value is None:
            raise serializers.ValidationError("amount is required")
        if value <= 0:
            raise serializers.ValidationError("amount must be > 0")
        return value
