from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
    ]

    operations = [
        migrations.CreateModel(
            name='Country',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('common_name', models.CharField(max_length=200, unique=True)),
                ('official_name', models.CharField(blank=True, max_length=300, null=True)),
                ('capital_city', models.CharField(blank=True, max_length=200, null=True)),
                ('independent', models.BooleanField(default=False)),
                ('un_member', models.BooleanField(default=False)),
                ('currencies', models.TextField(blank=True, default='')),
                ('alt_spellings', models.JSONField(blank=True, default=list)),
                ('region', models.CharField(blank=True, max_length=100, null=True)),
                ('subregion', models.CharField(blank=True, max_length=100, null=True)),
                ('languages', models.JSONField(blank=True, default=list)),
                ('borders', models.JSONField(blank=True, default=list)),
                ('population', models.BigIntegerField(default=0)),
                ('car_signs', models.JSONField(blank=True, default=list)),
                ('car_side', models.CharField(blank=True, max_length=10, null=True)),
                ('google_maps', models.URLField(blank=True, null=True)),
                ('flag', models.URLField(blank=True, null=True)),
                ('last_refreshed_at', models.DateTimeField(blank=True, null=True)),
            ],
            options={
                'ordering': ['common_name'],
            },
        ),
    ]
