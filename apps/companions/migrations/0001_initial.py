import uuid
from decimal import Decimal

import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Companion",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("city", models.CharField(blank=True, max_length=100)),
                ("bio", models.TextField(blank=True)),
                (
                    "hourly_rate",
                    models.DecimalField(
                        decimal_places=2,
                        default=Decimal("0.00"),
                        help_text="Price per hour charged to clients.",
                        max_digits=10,
                    ),
                ),
                ("is_available", models.BooleanField(default=True)),
                (
                    "moderation_status",
                    models.CharField(
                        choices=[("pending", "Awaiting moderation"), ("approved", "Approved"), ("rejected", "Rejected")],
                        default="pending",
                        max_length=20,
                    ),
                ),
                ("paystack_subaccount_code", models.CharField(blank=True, max_length=64)),
                ("bank_account_name", models.CharField(blank=True, max_length=255)),
                ("bank_account_number", models.CharField(blank=True, max_length=20)),
                ("bank_code", models.CharField(blank=True, max_length=20)),
                ("total_bookings", models.PositiveIntegerField(default=0)),
                ("total_earnings", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=12)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "user",
                    models.OneToOneField(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="companion_profile",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "verbose_name": "Companion",
                "verbose_name_plural": "Companions",
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["moderation_status", "is_available"], name="companions__moderat_6b1f0e_idx"),
                ],
            },
        ),
    ]
