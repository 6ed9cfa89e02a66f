"""Built-in demo data set for the CLI."""

from __future__ import annotations

from .models import Sample, Strategy, Vendor

HOURLY_DELIVERIES = [
    Sample(x=1, y=120, label="08:00"),
    Sample(x=2, y=135, label="09:00"),
    Sample(x=3, y=128, label="10:00"),
    Sample(x=4, y=142, label="11:00"),
    Sample(x=5, y=138, label="12:00"),
    Sample(x=6, y=155, label="13:00"),
    Sample(x=7, y=148, label="14:00"),
    Sample(x=8, y=162, label="15:00"),
    Sample(x=9, y=175, label="16:00"),
    Sample(x=10, y=168, label="17:00"),
]

VENDORS = [
    Vendor(id=1, name="Fresh Mart", location="Downtown", demand=95, congestion_level=45, base_delay=12),
    Vendor(id=2, name="Urban Foods", location="North District", demand=65, congestion_level=30, base_delay=8),
    Vendor(id=3, name="Metro Market", location="East Plaza", demand=54, congestion_level=60, base_delay=15),
    Vendor(id=4, name="City Store", location="South Market", demand=96, congestion_level=75, base_delay=18),
    Vendor(id=5, name="Prime Hub", location="West End", demand=72, congestion_level=40, base_delay=10),
    Vendor(id=6, name="Quick Center", location="Central Hub", demand=91, congestion_level=55, base_delay=14),
]

STRATEGIES = [
    Strategy(id="s1", vendor="Urban Foods", supplier="SwiftDeliver Inc", delivery_time=48, max_delivery=60, cost=420, max_cost=600, reliability_pct=92),
    Strategy(id="s2", vendor="Metro Market", supplier="SwiftDeliver Inc", delivery_time=50, max_delivery=60, cost=400, max_cost=600, reliability_pct=90),
    Strategy(id="s3", vendor="City Store", supplier="ColdChain Co", delivery_time=42, max_delivery=60, cost=450, max_cost=600, reliability_pct=95),
    Strategy(id="s4", vendor="Prime Hub", supplier="FreshRoute Corp", delivery_time=55, max_delivery=60, cost=380, max_cost=600, reliability_pct=88),
]
