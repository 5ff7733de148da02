import uuid

import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models

STATUS_CHOICES = [
    ('intake_pending', 'Intake pending'),
    ('scheduled', 'Scheduled'),
    ('in_treatment', 'In treatment'),
    ('awaiting_payment', 'Awaiting payment'),
    ('paid_assigned', 'Paid and assigned'),
    ('completed', 'Completed'),
    ('cancelled', 'Cancelled'),
]


def patient_fields(related_name):
    return [
        ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
        ('patient_name', models.CharField(max_length=120)),
        ('patient_phone', models.CharField(max_length=20)),
        ('patient_email', models.EmailField(blank=True, max_length=254, null=True)),
        ('date_of_birth', models.DateField(blank=True, null=True)),
        ('chief_complaint', models.TextField()),
        ('medical_history', models.TextField(blank=True, null=True)),
        ('allergies', models.TextField(blank=True, null=True)),
        ('current_medications', models.TextField(blank=True, null=True)),
        ('additional_notes', models.TextField(blank=True, null=True)),
        ('preferred_appointment_date', models.DateField(blank=True, null=True)),
        ('preferred_appointment_time', models.TimeField(blank=True, null=True)),
        ('status', models.CharField(choices=STATUS_CHOICES, default='intake_pending', max_length=20)),
        ('submitted_at', models.DateTimeField(auto_now_add=True)),
        ('updated_at', models.DateTimeField(auto_now=True)),
        ('doctor', models.ForeignKey(blank=True, limit_choices_to={'role': 'doctor'}, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name=related_name, to=settings.AUTH_USER_MODEL)),
    ]


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='MalePatient',
            fields=patient_fields('malepatient_set'),
            options={
                'db_table': 'male_patients',
                'ordering': ['-submitted_at'],
                'abstract': False,
            },
        ),
        migrations.CreateModel(
            name='FemalePatient',
            fields=patient_fields('femalepatient_set'),
            options={
                'db_table': 'female_patients',
                'ordering': ['-submitted_at'],
                'abstract': False,
            },
        ),
    ]
