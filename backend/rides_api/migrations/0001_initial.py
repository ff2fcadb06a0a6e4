from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='DriverPresenceRecord',
            fields=[
                ('driver_id', models.CharField(max_length=64, primary_key=True, serialize=False)),
                ('is_online', models.BooleanField(default=False)),
                ('is_verified', models.BooleanField(default=False)),
                ('latitude', models.FloatField(blank=True, null=True)),
                ('longitude', models.FloatField(blank=True, null=True)),
                ('last_updated_at', models.DateTimeField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
            ],
            options={
                'indexes': [models.Index(fields=['is_online', 'is_verified'], name='presence_eligible_idx')],
            },
        ),
        migrations.CreateModel(
            name='RideRecord',
            fields=[
                ('id', models.CharField(max_length=36, primary_key=True, serialize=False)),
                ('rider_id', models.CharField(db_index=True, max_length=64)),
                ('driver_id', models.CharField(blank=True, db_index=True, max_length=64, null=True)),
                ('requested_driver_id', models.CharField(blank=True, max_length=64, null=True)),
                ('offered_driver_ids', models.JSONField(blank=True, default=list)),
                ('pickup_lat', models.FloatField()),
                ('pickup_lng', models.FloatField()),
                ('dropoff_lat', models.FloatField()),
                ('dropoff_lng', models.FloatField()),
                ('pickup_address', models.TextField(blank=True, null=True)),
                ('dropoff_address', models.TextField(blank=True, null=True)),
                ('distance_km', models.FloatField()),
                ('estimated_duration_min', models.FloatField()),
                ('fare', models.FloatField()),
                ('ride_class', models.CharField(choices=[('standard', 'Standard'), ('premium', 'Premium'), ('group', 'Group')], default='standard', max_length=20)),
                ('payment_method', models.CharField(choices=[('card', 'Card'), ('qr', 'Qr'), ('cash', 'Cash')], default='cash', max_length=20)),
                ('payment_status', models.CharField(choices=[('pending', 'Pending'), ('paid', 'Paid'), ('failed', 'Failed')], default='pending', max_length=20)),
                ('status', models.CharField(choices=[('pending', 'Pending'), ('accepted', 'Accepted'), ('in_progress', 'In Progress'), ('completed', 'Completed'), ('cancelled', 'Cancelled')], default='pending', max_length=20)),
                ('created_at', models.DateTimeField()),
                ('accepted_at', models.DateTimeField(blank=True, null=True)),
                ('started_at', models.DateTimeField(blank=True, null=True)),
                ('completed_at', models.DateTimeField(blank=True, null=True)),
                ('cancelled_at', models.DateTimeField(blank=True, null=True)),
                ('cancelled_by', models.CharField(blank=True, max_length=64, null=True)),
            ],
            options={
                'indexes': [models.Index(fields=['status', 'created_at'], name='ride_status_created_idx')],
            },
        ),
    ]
