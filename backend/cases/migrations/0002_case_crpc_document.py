import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    dependencies = [
        ("cases", "0001_initial"),
        ("crpc", "0001_initial"),
    ]

    operations = [
        migrations.AddField(
            model_name="case",
            name="crpc_document",
            field=models.ForeignKey(
                blank=True,
                null=True,
                on_delete=django.db.models.deletion.SET_NULL,
                related_name="+",
                to="crpc.crpcdocument",
                verbose_name="91CRPC Document",
            ),
        ),
    ]
