# accounting/api/serializers/accounts.py

from rest_framework import serializers

from accounting.models.account import Account


class AccountSerializer(serializers.ModelSerializer):
    """
    Read-only account row.
    UI needs: number, name, type, parent (and id for keys).
    """

    parent_number = serializers.CharField(source="parent.account_number", read_only=True, default=None)
    normal_balance = serializers.CharField(read_only=True)

    class Meta:
        model = Account
        fields = (
            "id",
            "tenant_id",
            "account_number",
            "name",
            "account_type",
            "normal_balance",
            "parent",
            "parent_number",
            "description",
            "is_active",
            "is_system",
        )
        read_only_fields = fields


class AccountCreateSerializer(serializers.Serializer):
    account_number = serializers.CharField(max_length=20)
    name = serializers.CharField(max_length=150)
    account_type = serializers.ChoiceField(choices=Account.ACCOUNT_TYPES)
    parent_number = serializers.CharField(max_length=20, required=False, allow_blank=True, allow_null=True)
    description = serializers.CharField(max_length=255, required=False, allow_blank=True)
