import django.db.models.deletion
from django.db import migrations, models

import vehicles.models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('delegations', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='VehicleModel',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('operation_id', models.CharField(default=vehicles.models.generate_operation_id, max_length=64)),
                ('make', models.CharField(db_index=True, max_length=50)),
                ('model', models.CharField(max_length=50)),
                ('year', models.PositiveSmallIntegerField(db_index=True)),
                ('color', models.CharField(blank=True, max_length=30)),
                ('daily_rate', models.DecimalField(decimal_places=2, max_digits=10)),
                ('rented', models.BooleanField(db_index=True, default=False)),
                ('engine', models.CharField(blank=True, max_length=50)),
                ('horsepower', models.CharField(blank=True, max_length=20)),
                ('transmission', models.CharField(blank=True, max_length=30)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('delegation', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='vehicles', to='delegations.delegationmodel')),
            ],
            options={
                'ordering': ['make', 'model'],
                'indexes': [models.Index(fields=['delegation', 'year'], name='vehicle_delegation_year_idx')],
                'constraints': [models.UniqueConstraint(fields=('delegation', 'operation_id'), name='unique_vehicle_operation_per_delegation')],
            },
        ),
    ]
