from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='CabType',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=50, unique=True)),
                ('description', models.TextField(blank=True, default='')),
                ('ac_type', models.CharField(choices=[('AC', 'AC'), ('Non-AC', 'Non-AC')], default='AC', max_length=10)),
                ('seating_capacity', models.IntegerField(default=4)),
                ('luggage_capacity', models.IntegerField(default=2)),
                ('base_km_price', models.DecimalField(decimal_places=2, max_digits=8)),
                ('extra_fare_per_km', models.DecimalField(decimal_places=2, default=0, max_digits=8)),
                ('included_km', models.IntegerField(default=0)),
                ('fuel_charges_included', models.BooleanField(default=True)),
                ('fuel_charge', models.DecimalField(decimal_places=2, default=0, max_digits=8)),
                ('driver_charges_included', models.BooleanField(default=True)),
                ('driver_charge', models.DecimalField(decimal_places=2, default=0, max_digits=8)),
                ('night_charges_included', models.BooleanField(default=True)),
                ('night_charge', models.DecimalField(decimal_places=2, default=0, max_digits=8)),
                ('active', models.BooleanField(default=True)),
            ],
        ),
        migrations.CreateModel(
            name='City',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=64)),
                ('state', models.CharField(max_length=64)),
                ('country', models.CharField(default='India', max_length=64)),
                ('latitude', models.FloatField(blank=True, null=True)),
                ('longitude', models.FloatField(blank=True, null=True)),
                ('is_popular', models.BooleanField(default=False)),
                ('active', models.BooleanField(default=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
            ],
            options={
                'verbose_name_plural': 'cities',
                'indexes': [models.Index(fields=['name'], name='city_name_idx')],
            },
        ),
        migrations.CreateModel(
            name='Profile',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('phone', models.CharField(blank=True, max_length=15, null=True)),
                ('role', models.CharField(choices=[('user', 'User'), ('driver', 'Driver'), ('admin', 'Admin')], default='user', max_length=20)),
                ('ratings', models.DecimalField(decimal_places=2, default=0.0, max_digits=3)),
                ('total_ratings', models.IntegerField(default=0)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('user', models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name='profile', to=settings.AUTH_USER_MODEL)),
            ],
        ),
        migrations.CreateModel(
            name='Route',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('distance', models.FloatField()),
                ('estimated_time', models.IntegerField(help_text='Minutes')),
                ('base_price', models.DecimalField(decimal_places=2, default=0, max_digits=10)),
                ('toll_charges', models.DecimalField(decimal_places=2, default=0, max_digits=10)),
                ('is_popular', models.BooleanField(default=False)),
                ('active', models.BooleanField(default=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('destination_city', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='routes_to', to='cabride_main_app.city')),
                ('source_city', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='routes_from', to='cabride_main_app.city')),
            ],
            options={
                'unique_together': {('source_city', 'destination_city')},
            },
        ),
        migrations.CreateModel(
            name='Driver',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(blank=True, max_length=100, null=True)),
                ('email', models.EmailField(blank=True, max_length=254, null=True)),
                ('phone', models.CharField(blank=True, max_length=15, null=True)),
                ('license_number', models.CharField(max_length=32, unique=True)),
                ('license_expiry', models.DateField(blank=True, null=True)),
                ('vehicle_number', models.CharField(max_length=16, unique=True)),
                ('vehicle_model', models.CharField(blank=True, default='', max_length=64)),
                ('is_approved', models.BooleanField(default=False)),
                ('is_available', models.BooleanField(default=True)),
                ('ratings', models.DecimalField(decimal_places=2, default=0.0, max_digits=3)),
                ('total_rides', models.IntegerField(default=0)),
                ('total_ratings', models.IntegerField(default=0)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('user', models.OneToOneField(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='driver', to=settings.AUTH_USER_MODEL)),
                ('vehicle_type', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='drivers', to='cabride_main_app.cabtype')),
            ],
            options={
                'indexes': [models.Index(fields=['is_available', 'is_approved'], name='driver_avail_approved_idx')],
            },
        ),
        migrations.CreateModel(
            name='Booking',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('booking_number', models.CharField(db_index=True, max_length=16, unique=True)),
                ('pickup_address', models.CharField(max_length=255)),
                ('drop_address', models.CharField(max_length=255)),
                ('journey_type', models.CharField(choices=[('oneWay', 'One Way'), ('roundTrip', 'Round Trip')], default='oneWay', max_length=10)),
                ('pickup_date', models.DateField()),
                ('pickup_time', models.CharField(default='10:00', max_length=5)),
                ('return_date', models.DateField(blank=True, null=True)),
                ('return_time', models.CharField(blank=True, max_length=5, null=True)),
                ('distance', models.FloatField(default=0)),
                ('duration', models.IntegerField(blank=True, null=True)),
                ('passenger_name', models.CharField(max_length=100)),
                ('passenger_email', models.EmailField(max_length=254)),
                ('passenger_phone', models.CharField(max_length=15)),
                ('additional_notes', models.TextField(blank=True, null=True)),
                ('base_amount', models.DecimalField(decimal_places=2, default=0, max_digits=10)),
                ('tax_amount', models.DecimalField(decimal_places=2, default=0, max_digits=10)),
                ('toll_charges', models.DecimalField(decimal_places=2, default=0, max_digits=10)),
                ('driver_allowance', models.DecimalField(decimal_places=2, default=0, max_digits=10)),
                ('night_charges', models.DecimalField(decimal_places=2, default=0, max_digits=10)),
                ('total_amount', models.DecimalField(decimal_places=2, default=0, max_digits=10)),
                ('fare_breakdown', models.JSONField(blank=True, null=True)),
                ('status', models.CharField(choices=[('pending', 'Pending'), ('confirmed', 'Confirmed'), ('assigned', 'Assigned'), ('inProgress', 'In Progress'), ('completed', 'Completed'), ('cancelled', 'Cancelled')], default='pending', max_length=20)),
                ('payment_status', models.CharField(choices=[('pending', 'Pending'), ('completed', 'Completed'), ('failed', 'Failed')], default='pending', max_length=20)),
                ('payment_method', models.CharField(blank=True, choices=[('online', 'Online'), ('cod', 'Cash on Delivery')], max_length=10, null=True)),
                ('payment_id', models.CharField(blank=True, max_length=128, null=True)),
                ('assigned_at', models.DateTimeField(blank=True, null=True)),
                ('started_at', models.DateTimeField(blank=True, null=True)),
                ('completed_at', models.DateTimeField(blank=True, null=True)),
                ('cancelled_at', models.DateTimeField(blank=True, null=True)),
                ('user_rating', models.JSONField(blank=True, null=True)),
                ('driver_rating', models.JSONField(blank=True, null=True)),
                ('refund_status', models.CharField(choices=[('none', 'None'), ('processed', 'Processed'), ('failed', 'Failed')], default='none', max_length=20)),
                ('refund_id', models.CharField(blank=True, max_length=128, null=True)),
                ('refund_amount', models.DecimalField(blank=True, decimal_places=2, max_digits=10, null=True)),
                ('refund_processed_at', models.DateTimeField(blank=True, null=True)),
                ('cancellation_reason', models.CharField(blank=True, max_length=255, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('cab_type', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, to='cabride_main_app.cabtype')),
                ('driver', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='bookings', to='cabride_main_app.driver')),
                ('drop_location', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='drops', to='cabride_main_app.city')),
                ('pickup_location', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='pickups', to='cabride_main_app.city')),
                ('user', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='bookings', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['status', 'driver'], name='booking_status_driver_idx'),
                    models.Index(fields=['user', '-created_at'], name='booking_user_created_idx'),
                ],
            },
        ),
        migrations.AddField(
            model_name='driver',
            name='current_booking',
            field=models.ForeignKey(blank=True, db_constraint=False, null=True, on_delete=django.db.models.deletion.DO_NOTHING, related_name='+', to='cabride_main_app.booking'),
        ),
        migrations.CreateModel(
            name='RatingRecord',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('rater_role', models.CharField(choices=[('user', 'User rated driver'), ('driver', 'Driver rated user')], max_length=10)),
                ('rating', models.PositiveSmallIntegerField()),
                ('comment', models.TextField(blank=True, default='')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('booking', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='rating_records', to='cabride_main_app.booking')),
                ('driver', models.ForeignKey(null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='rating_records', to='cabride_main_app.driver')),
                ('user', models.ForeignKey(null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='rating_records', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'ordering': ['-created_at'],
                'unique_together': {('booking', 'rater_role')},
                'indexes': [
                    models.Index(fields=['driver', 'rater_role'], name='rating_driver_role_idx'),
                    models.Index(fields=['user', 'rater_role'], name='rating_user_role_idx'),
                ],
            },
        ),
    ]
