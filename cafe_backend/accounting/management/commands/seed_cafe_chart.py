# accounting/management/commands/seed_cafe_chart.py

from django.core.management.base import BaseCommand, CommandError
from django.db import transaction

from accounting.services.exceptions import AccountingServiceError
from accounting.services.chart_of_accounts import seed_default_chart


class Command(BaseCommand):
    help = "Seed the default cafe Chart of Accounts for a tenant (idempotent)"

    def add_arguments(self, parser):
        parser.add_argument("--tenant", required=True, help="Tenant id that owns the chart")

    @transaction.atomic
    def handle(self, *args, **options):
        tenant_id = options["tenant"]
        self.stdout.write(f"Seeding cafe Chart of Accounts for tenant {tenant_id}...")

        try:
            result = seed_default_chart(tenant_id=tenant_id)
        except AccountingServiceError as exc:
            raise CommandError(str(exc)) from exc

        self.stdout.write(
            self.style.SUCCESS(
                f"Cafe chart ready: {result['created']} created, "
                f"{result['total'] - result['created']} already present."
            )
        )
