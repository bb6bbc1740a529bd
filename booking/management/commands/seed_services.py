"""
seed_services.py
----------------
Seeds (creates or updates) the salon's service catalog. You can run this any
time; it will upsert by name.

Prices are stored as text: "45" is fixed, "35+" is a "from" price and "POA"
is priced at the counter.

Usage:
    python manage.py seed_services
"""

from django.core.management.base import BaseCommand
from booking.models import Service


CATALOG = [
    # Cuts
    {"name": "Women's Cut & Blow-dry", "category": "Cuts",    "duration_minutes": 60,  "regular_price": "75"},
    {"name": "Men's Cut",              "category": "Cuts",    "duration_minutes": 30,  "regular_price": "40"},
    {"name": "Kids Cut (under 12)",    "category": "Cuts",    "duration_minutes": 30,  "regular_price": "28"},
    {"name": "Fringe Trim",            "category": "Cuts",    "duration_minutes": 15,  "regular_price": "15"},

    # Styling
    {"name": "Blow-dry",               "category": "Styling", "duration_minutes": 45,  "regular_price": "45+"},
    {"name": "Up-style",               "category": "Styling", "duration_minutes": 60,  "regular_price": "90+"},
    {"name": "Bridal Styling",         "category": "Styling", "duration_minutes": 90,  "regular_price": "POA"},

    # Colour
    {"name": "Root Colour",            "category": "Colour",  "duration_minutes": 90,  "regular_price": "95"},
    {"name": "Full Colour",            "category": "Colour",  "duration_minutes": 120, "regular_price": "130+"},
    {"name": "Half Head Foils",        "category": "Colour",  "duration_minutes": 120, "regular_price": "150+", "discount": "10"},
    {"name": "Balayage",               "category": "Colour",  "duration_minutes": 180, "regular_price": "POA"},
    {"name": "Toner",                  "category": "Colour",  "duration_minutes": 30,  "regular_price": "35"},

    # Treatments
    {"name": "Deep Conditioning",      "category": "Treatments", "duration_minutes": 15, "regular_price": "25"},
    {"name": "Keratin Smoothing",      "category": "Treatments", "duration_minutes": 150, "regular_price": "POA"},
]

FIELDS = ("category", "duration_minutes", "regular_price", "discount")


class Command(BaseCommand):
    help = "Seed or update the service catalog."

    def handle(self, *args, **options):
        created = 0
        updated = 0

        for item in CATALOG:
            values = {field: item.get(field, "") for field in FIELDS}
            svc = Service.objects.filter(name=item["name"]).first()
            if svc is None:
                Service.objects.create(name=item["name"], active=True, **values)
                created += 1
                continue

            changed = [field for field in FIELDS if getattr(svc, field) != values[field]]
            for field in changed:
                setattr(svc, field, values[field])
            if not svc.active:
                svc.active = True
                changed.append("active")
            if changed:
                svc.save(update_fields=changed)
                updated += 1

        self.stdout.write(self.style.SUCCESS(f"Seed complete. Created={created}, Updated={updated}"))
