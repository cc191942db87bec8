from decimal import Decimal
import django.core.serializers.json
import django.core.validators
import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('properties', '0001_initial'),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='AuctionProperty',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('auction_type', models.CharField(choices=[('live', 'Live'), ('timed', 'Timed')], default='live', max_length=10)),
                ('preview_start', models.DateTimeField()),
                ('start_time', models.DateTimeField()),
                ('end_time', models.DateTimeField()),
                ('reserve_price', models.DecimalField(decimal_places=2, max_digits=14, validators=[django.core.validators.MinValueValidator(Decimal('0.01'))])),
                ('buy_now_price', models.DecimalField(blank=True, decimal_places=2, max_digits=14, null=True)),
                ('current_bid', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=14)),
                ('bid_count', models.PositiveIntegerField(default=0)),
                ('status', models.CharField(choices=[('preview', 'Preview'), ('live', 'Live'), ('ended', 'Ended'), ('sold', 'Sold'), ('cancelled', 'Cancelled')], default='preview', max_length=20)),
                ('commission_rate', models.DecimalField(decimal_places=4, default=Decimal('0.05'), max_digits=5, validators=[django.core.validators.MinValueValidator(Decimal('0')), django.core.validators.MaxValueValidator(Decimal('1'))])),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('listed_property', models.ForeignKey(blank=True, db_column='property_id', null=True, on_delete=django.db.models.deletion.PROTECT, related_name='auctions', to='properties.property')),
            ],
            options={
                'db_table': 'auction_properties',
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['status', 'start_time'], name='auction_status_start_idx'),
                    models.Index(fields=['status', 'end_time'], name='auction_status_end_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='Bid',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('amount', models.DecimalField(decimal_places=2, max_digits=14, validators=[django.core.validators.MinValueValidator(Decimal('0.01'))])),
                ('auto_bid_max', models.DecimalField(blank=True, decimal_places=2, max_digits=14, null=True)),
                ('bid_time', models.DateTimeField(default=django.utils.timezone.now)),
                ('ip_address', models.GenericIPAddressField(blank=True, null=True)),
                ('user_agent', models.TextField(blank=True)),
                ('is_winning', models.BooleanField(default=False)),
                ('status', models.CharField(choices=[('active', 'Active'), ('outbid', 'Outbid'), ('winning', 'Winning'), ('cancelled', 'Cancelled')], default='active', max_length=20)),
                ('auction_property', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='bids', to='auctions.auctionproperty')),
                ('user', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='bids', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'bids',
                'ordering': ['-bid_time', '-id'],
                'indexes': [
                    models.Index(fields=['auction_property', '-bid_time'], name='bid_auction_time_idx'),
                    models.Index(fields=['auction_property', 'is_winning'], name='bid_auction_winning_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='AuctionWinner',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('winning_bid', models.DecimalField(decimal_places=2, max_digits=14)),
                ('final_price', models.DecimalField(decimal_places=2, max_digits=14)),
                ('commission_amount', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=14)),
                ('developer_share', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=14)),
                ('platform_share', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=14)),
                ('payment_status', models.CharField(choices=[('pending', 'Pending'), ('paid', 'Paid'), ('failed', 'Failed'), ('refunded', 'Refunded')], default='pending', max_length=20)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('auction_property', models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name='winner', to='auctions.auctionproperty')),
                ('user', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='won_auctions', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'auction_winners',
            },
        ),
        migrations.CreateModel(
            name='AuctionEvent',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('event_type', models.CharField(choices=[('auction_created', 'Auction Created'), ('auction_updated', 'Auction Updated'), ('auction_started', 'Auction Started'), ('auction_ended', 'Auction Ended'), ('bid_placed', 'Bid Placed'), ('buy_now_purchase', 'Buy Now Purchase')], max_length=30)),
                ('event_data', models.JSONField(blank=True, default=dict, encoder=django.core.serializers.json.DjangoJSONEncoder)),
                ('created_at', models.DateTimeField(default=django.utils.timezone.now)),
                ('auction_property', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='events', to='auctions.auctionproperty')),
            ],
            options={
                'db_table': 'auction_events',
                'ordering': ['-created_at', '-id'],
            },
        ),
    ]
