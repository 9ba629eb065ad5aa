# Generated manually for the document sync app

import django.core.serializers.json
import django.utils.timezone
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='StoredDocument',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('collection', models.CharField(db_index=True, max_length=255)),
                ('document_id', models.CharField(max_length=64)),
                ('data', models.JSONField(default=dict, encoder=django.core.serializers.json.DjangoJSONEncoder)),
                ('created_at', models.DateTimeField(default=django.utils.timezone.now, editable=False)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'db_table': 'stored_documents',
                'ordering': ['created_at', 'id'],
                'indexes': [
                    models.Index(fields=['collection', 'created_at'], name='stored_docu_collect_8d1f0c_idx'),
                ],
                'unique_together': {('collection', 'document_id')},
            },
        ),
    ]
