import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('contenttypes', '0002_remove_content_type_name'),
    ]

    operations = [
        migrations.CreateModel(
            name='LocationNode',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('created_at', models.DateTimeField(auto_now_add=True, verbose_name='Дата создания')),
                ('updated_at', models.DateTimeField(auto_now=True, verbose_name='Дата обновления')),
                ('sort_order', models.IntegerField(db_index=True, default=0, verbose_name='Порядок')),
                ('is_active', models.BooleanField(db_index=True, default=True, verbose_name='Активен')),
                ('kind', models.CharField(choices=[('province', 'Province'), ('city', 'City'), ('district', 'District'), ('suburb', 'Suburb'), ('settlement', 'Settlement'), ('community', 'Community'), ('village', 'Village')], db_index=True, max_length=20, verbose_name='Kind')),
                ('title', models.CharField(blank=True, max_length=255, verbose_name='Title')),
                ('description', models.TextField(blank=True, verbose_name='Description')),
                ('parent', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.CASCADE, related_name='children', to='locations.locationnode', verbose_name='Parent')),
            ],
            options={
                'verbose_name': 'Location',
                'verbose_name_plural': 'Locations',
                'ordering': ['sort_order', 'title', 'id'],
                'indexes': [
                    models.Index(fields=['kind', 'parent'], name='loc_node_kind_parent_idx'),
                    models.Index(fields=['parent', 'sort_order'], name='loc_node_parent_order_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='Translation',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('created_at', models.DateTimeField(auto_now_add=True, verbose_name='Дата создания')),
                ('updated_at', models.DateTimeField(auto_now=True, verbose_name='Дата обновления')),
                ('locale', models.CharField(choices=[('tj', 'Таджикский'), ('ru', 'Русский'), ('eng', 'Английский')], max_length=4, verbose_name='Locale')),
                ('title', models.CharField(max_length=255, verbose_name='Title')),
                ('node', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='translations', to='locations.locationnode', verbose_name='Location')),
            ],
            options={
                'verbose_name': 'Translation',
                'verbose_name_plural': 'Translations',
                'ordering': ['node', 'locale'],
                'constraints': [
                    models.UniqueConstraint(fields=('node', 'locale'), name='unique_translation_per_locale'),
                ],
            },
        ),
        migrations.CreateModel(
            name='Address',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('created_at', models.DateTimeField(auto_now_add=True, verbose_name='Дата создания')),
                ('updated_at', models.DateTimeField(auto_now=True, verbose_name='Дата обновления')),
                ('line', models.CharField(blank=True, max_length=255, verbose_name='Street / building / apartment')),
                ('province', models.ForeignKey(blank=True, limit_choices_to={'kind': 'province'}, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to='locations.locationnode', verbose_name='Province')),
                ('city', models.ForeignKey(blank=True, limit_choices_to={'kind': 'city'}, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to='locations.locationnode', verbose_name='City')),
                ('suburbs', models.ManyToManyField(blank=True, limit_choices_to={'kind': 'suburb'}, related_name='+', to='locations.locationnode', verbose_name='Suburbs')),
                ('district', models.ForeignKey(blank=True, limit_choices_to={'kind': 'district'}, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to='locations.locationnode', verbose_name='District')),
                ('settlement', models.ForeignKey(blank=True, limit_choices_to={'kind': 'settlement'}, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to='locations.locationnode', verbose_name='Settlement')),
                ('community', models.ForeignKey(blank=True, limit_choices_to={'kind': 'community'}, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to='locations.locationnode', verbose_name='Community')),
                ('village', models.ForeignKey(blank=True, limit_choices_to={'kind': 'village'}, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to='locations.locationnode', verbose_name='Village')),
            ],
            options={
                'verbose_name': 'Address',
                'verbose_name_plural': 'Addresses',
                'ordering': ['-created_at'],
            },
        ),
        migrations.CreateModel(
            name='AddressAttachment',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('created_at', models.DateTimeField(auto_now_add=True, verbose_name='Дата создания')),
                ('updated_at', models.DateTimeField(auto_now=True, verbose_name='Дата обновления')),
                ('object_id', models.CharField(max_length=64, verbose_name='Owner ID')),
                ('address', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='attachments', to='locations.address', verbose_name='Address')),
                ('content_type', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, to='contenttypes.contenttype', verbose_name='Owner type')),
            ],
            options={
                'verbose_name': 'Address attachment',
                'verbose_name_plural': 'Address attachments',
                'indexes': [
                    models.Index(fields=['content_type', 'object_id'], name='loc_attach_owner_idx'),
                ],
                'constraints': [
                    models.UniqueConstraint(fields=('address', 'content_type', 'object_id'), name='unique_address_owner'),
                ],
            },
        ),
    ]
