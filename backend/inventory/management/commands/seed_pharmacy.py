"""
Management command to load the sample medicine inventory
Usage: python manage.py seed_pharmacy [--clear]
"""
from datetime import date
from decimal import Decimal

from django.core.management.base import BaseCommand
from django.db import transaction

from backend.inventory.models import Medicine

SAMPLE_MEDICINES = [
    {
        'name': 'Paracetamol',
        'description': 'Pain reliever and fever reducer',
        'price': Decimal('5.99'),
        'stock': 100,
        'expiry_date': date(2025, 12, 31),
        'category': 'Pain Relief',
        'manufacturer': 'MedPharm',
    },
    {
        'name': 'Amoxicillin',
        'description': 'Antibiotic for bacterial infections',
        'price': Decimal('12.50'),
        'stock': 50,
        'expiry_date': date(2024, 10, 15),
        'category': 'Antibiotics',
        'manufacturer': 'HealthCare',
    },
    {
        'name': 'Loratadine',
        'description': 'Antihistamine for allergy relief',
        'price': Decimal('8.75'),
        'stock': 75,
        'expiry_date': date(2025, 6, 30),
        'category': 'Allergy',
        'manufacturer': 'AllergyCare',
    },
    {
        'name': 'Metformin',
        'description': 'Oral diabetes medicine',
        'price': Decimal('15.25'),
        'stock': 40,
        'expiry_date': date(2024, 8, 20),
        'category': 'Diabetes',
        'manufacturer': 'DiabetesCare',
    },
    {
        'name': 'Lisinopril',
        'description': 'ACE inhibitor for high blood pressure',
        'price': Decimal('18.99'),
        'stock': 30,
        'expiry_date': date(2024, 12, 15),
        'category': 'Blood Pressure',
        'manufacturer': 'CardioHealth',
    },
    {
        'name': 'Ibuprofen',
        'description': 'NSAID for pain and inflammation',
        'price': Decimal('6.50'),
        'stock': 85,
        'expiry_date': date(2025, 4, 10),
        'category': 'Pain Relief',
        'manufacturer': 'PainFree',
    },
    {
        'name': 'Cetirizine',
        'description': 'Antihistamine for allergies',
        'price': Decimal('9.25'),
        'stock': 5,
        'expiry_date': date(2024, 11, 22),
        'category': 'Allergy',
        'manufacturer': 'AllergyCare',
    },
]


class Command(BaseCommand):
    help = "Adds the sample medicine inventory to the database"

    def add_arguments(self, parser):
        parser.add_argument(
            '--clear',
            action='store_true',
            help='Delete all existing medicines before seeding',
        )

    def handle(self, *args, **options):
        self.stdout.write(self.style.SUCCESS("=" * 80))
        self.stdout.write(self.style.SUCCESS("SEEDING MEDICINE INVENTORY"))
        self.stdout.write(self.style.SUCCESS("=" * 80))

        created_count = 0
        skipped_count = 0

        with transaction.atomic():
            if options['clear']:
                self.stdout.write(self.style.WARNING("Clearing all existing medicines..."))
                deleted, _ = Medicine.objects.all().delete()
                self.stdout.write(self.style.SUCCESS(f"Deleted {deleted} medicines."))

            for fields in SAMPLE_MEDICINES:
                # Name and manufacturer identify a sample row
                medicine, created = Medicine.objects.get_or_create(
                    name=fields['name'],
                    manufacturer=fields['manufacturer'],
                    defaults=fields,
                )
                if created:
                    created_count += 1
                    self.stdout.write(self.style.SUCCESS(f"  ✓ Created: {medicine.name}"))
                else:
                    skipped_count += 1
                    self.stdout.write(self.style.WARNING(f"  ⊘ Skipped (already exists): {medicine.name}"))

        self.stdout.write(self.style.SUCCESS("\n" + "=" * 80))
        self.stdout.write(self.style.SUCCESS("SUMMARY"))
        self.stdout.write(self.style.SUCCESS("=" * 80))
        self.stdout.write(f"Medicines Created: {created_count}")
        self.stdout.write(f"Medicines Skipped (already exist): {skipped_count}")
        self.stdout.write(f"Total Medicines in Database: {Medicine.objects.count()}")
