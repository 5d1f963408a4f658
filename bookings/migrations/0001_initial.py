import uuid

import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('delegations', '0001_initial'),
        ('vehicles', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='BookingModel',
            fields=[
                ('booking_id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('user_id', models.CharField(db_index=True, max_length=64)),
                ('start_date', models.DateField(db_index=True)),
                ('end_date', models.DateField(db_index=True)),
                ('created_at', models.DateTimeField(auto_now_add=True, db_index=True)),
                ('delegation', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='bookings', to='delegations.delegationmodel')),
                ('vehicle', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='bookings', to='vehicles.vehiclemodel')),
            ],
            options={
                'ordering': ['-created_at'],
                'indexes': [models.Index(fields=['vehicle', 'start_date', 'end_date'], name='booking_vehicle_range_idx'), models.Index(fields=['delegation', 'start_date'], name='booking_delegation_start_idx')],
                'constraints': [models.UniqueConstraint(fields=('vehicle', 'start_date'), name='unique_booking_vehicle_start'), models.CheckConstraint(condition=models.Q(('end_date__gte', models.F('start_date'))), name='booking_end_not_before_start')],
            },
        ),
    ]
