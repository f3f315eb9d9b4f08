import uuid
from datetime import timedelta

from django.conf import settings
from django.db import models
from django.db.models import Q
from django.utils import timezone

from core.roles import CAPABILITY_FIELDS, Capabilities, Role


class UserAccount(models.Model):
    """Application-level user record with UUID id and normalized unique email.

    Sits beside Django's auth_user row and records which side of the board the
    user is on (job seeker or company) plus their hosted avatar.
    """
    USER = 'USER'
    COMPANY = 'COMPANY'
    USER_TYPES = [
        (USER, 'Job Seeker'),
        (COMPANY, 'Company'),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.OneToOneField(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='account')
    email = models.EmailField(unique=True, db_index=True)
    user_type = models.CharField(max_length=10, choices=USER_TYPES, default=USER)
    avatar_url = models.URLField(max_length=500, blank=True)
    avatar_public_id = models.CharField(max_length=255, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        indexes = [models.Index(fields=["email"], name='core_userac_email_4f9a2c_idx')]

    def save(self, *args, **kwargs):
        if self.email:
            self.email = self.email.lower()
        return super().save(*args, **kwargs)

    @property
    def is_company(self):
        return self.user_type == self.COMPANY

    def __str__(self):
        return f"{self.email} ({self.user_type})"


class JobSeekerProfile(models.Model):
    EXPERIENCE_LEVELS = [
        ('ENTRY', 'Entry Level'),
        ('MID', 'Mid Level'),
        ('SENIOR', 'Senior Level'),
        ('EXECUTIVE', 'Executive'),
    ]

    user = models.OneToOneField(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='job_seeker')
    first_name = models.CharField(max_length=100)
    last_name = models.CharField(max_length=100)
    phone = models.CharField(max_length=20)
    city = models.CharField(max_length=100)
    country = models.CharField(max_length=100, blank=True)
    current_position = models.CharField(max_length=160, blank=True)
    experience_level = models.CharField(max_length=20, choices=EXPERIENCE_LEVELS, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def get_full_name(self):
        return f"{self.first_name} {self.last_name}".strip()

    def __str__(self):
        return self.get_full_name() or self.user.email


class Company(models.Model):
    COMPANY_SIZES = [
        ('1-10', '1-10'),
        ('11-50', '11-50'),
        ('51-200', '51-200'),
        ('201-500', '201-500'),
        ('501-1000', '501-1000'),
        ('1000+', '1000+'),
    ]

    owner = models.OneToOneField(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='company')
    name = models.CharField(max_length=200, db_index=True)
    industry = models.CharField(max_length=120)
    company_size = models.CharField(max_length=20)
    location = models.CharField(max_length=160)
    website = models.URLField(blank=True)
    description = models.TextField(blank=True)
    logo_url = models.URLField(max_length=500, blank=True)
    logo_public_id = models.CharField(max_length=255, blank=True)
    contact_phone = models.CharField(max_length=30, blank=True)
    contact_email = models.EmailField(blank=True)
    established_year = models.PositiveIntegerField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name_plural = 'companies'

    def __str__(self):
        return self.name


class Job(models.Model):
    WORK_TYPES = [
        ('FULL_TIME', 'Full-time'),
        ('PART_TIME', 'Part-time'),
        ('CONTRACT', 'Contract'),
        ('FREELANCE', 'Freelance'),
        ('INTERNSHIP', 'Internship'),
        ('REMOTE', 'Remote'),
    ]

    company = models.ForeignKey(Company, on_delete=models.CASCADE, related_name='jobs')
    title = models.CharField(max_length=200)
    description = models.TextField()
    requirements = models.JSONField(default=list, blank=True)
    responsibilities = models.JSONField(default=list, blank=True)
    location = models.CharField(max_length=160)
    work_type = models.CharField(max_length=20, choices=WORK_TYPES)
    salary_min = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    salary_max = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    currency = models.CharField(max_length=3, default='USD')
    benefits = models.JSONField(default=list, blank=True)
    skills = models.JSONField(default=list, blank=True)
    experience_level = models.CharField(max_length=40)
    is_active = models.BooleanField(default=True)
    deadline = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['company', '-created_at'], name='core_job_company_2a4f1c_idx'),
            models.Index(fields=['is_active', '-created_at'], name='core_job_is_acti_7d0b3e_idx'),
        ]

    def is_past_deadline(self):
        return bool(self.deadline and self.deadline < timezone.now())

    def __str__(self):
        return f"{self.title} @ {self.company.name}"


class JobApplication(models.Model):
    STATUS_CHOICES = [
        ('PENDING', 'Pending'),
        ('REVIEWED', 'Reviewed'),
        ('SHORTLISTED', 'Shortlisted'),
        ('INTERVIEWING', 'Interviewing'),
        ('ACCEPTED', 'Accepted'),
        ('REJECTED', 'Rejected'),
        ('WITHDRAWN', 'Withdrawn'),
    ]

    job = models.ForeignKey(Job, on_delete=models.CASCADE, related_name='applications')
    applicant = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='job_applications')
    full_name = models.CharField(max_length=200)
    email = models.EmailField()
    phone = models.CharField(max_length=30, blank=True)
    resume_url = models.URLField(max_length=500, blank=True)
    cover_letter = models.TextField(blank=True)
    experience = models.CharField(max_length=200, blank=True)
    expected_salary = models.CharField(max_length=60, blank=True)
    available_from = models.DateField(null=True, blank=True)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='PENDING', db_index=True)
    notes = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at']
        unique_together = [('job', 'applicant')]
        indexes = [
            models.Index(fields=['job', 'status'], name='core_jobapp_job_id_5c1e9a_idx'),
            models.Index(fields=['applicant', '-created_at'], name='core_jobapp_applica_8e2d47_idx'),
        ]

    def __str__(self):
        return f"{self.full_name} -> {self.job.title} ({self.status})"


class SavedJob(models.Model):
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='saved_jobs')
    job = models.ForeignKey(Job, on_delete=models.CASCADE, related_name='saved_by')
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-created_at']
        unique_together = [('user', 'job')]


class Interview(models.Model):
    INTERVIEW_TYPES = [
        ('VIDEO', 'Video Call'),
        ('PHONE', 'Phone Call'),
        ('IN_PERSON', 'In Person'),
    ]
    STATUS_CHOICES = [
        ('SCHEDULED', 'Scheduled'),
        ('CONFIRMED', 'Confirmed'),
        ('RESCHEDULED', 'Rescheduled'),
        ('CANCELLED', 'Cancelled'),
        ('COMPLETED', 'Completed'),
    ]

    application = models.ForeignKey(JobApplication, on_delete=models.CASCADE, related_name='interviews')
    job = models.ForeignKey(Job, on_delete=models.CASCADE, related_name='interviews')
    candidate = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='candidate_interviews')
    company_user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='company_interviews')
    title = models.CharField(max_length=200)
    description = models.TextField(blank=True)
    interview_type = models.CharField(max_length=20, choices=INTERVIEW_TYPES, default='VIDEO')
    scheduled_at = models.DateTimeField()
    duration_minutes = models.PositiveIntegerField(default=60)
    meeting_link = models.URLField(max_length=500, blank=True)
    meeting_password = models.CharField(max_length=100, blank=True)
    location = models.CharField(max_length=255, blank=True)
    company_notes = models.TextField(blank=True)
    candidate_notes = models.TextField(blank=True)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='SCHEDULED', db_index=True)
    feedback = models.TextField(blank=True)
    rating = models.PositiveSmallIntegerField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['scheduled_at']
        indexes = [
            models.Index(fields=['candidate', 'scheduled_at'], name='core_interv_candida_3b9f10_idx'),
            models.Index(fields=['company_user', 'scheduled_at'], name='core_interv_company_61a7d2_idx'),
        ]

    def append_note(self, field_name, note):
        existing = getattr(self, field_name) or ''
        setattr(self, field_name, f"{existing}\n{note}".strip() if existing else note)


class TeamMember(models.Model):
    STATUS_CHOICES = [
        ('PENDING', 'Pending'),
        ('ACCEPTED', 'Accepted'),
        ('REJECTED', 'Rejected'),
        ('EXPIRED', 'Expired'),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    company = models.ForeignKey(Company, on_delete=models.CASCADE, related_name='team_members')
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='team_memberships',
    )
    email = models.EmailField()
    name = models.CharField(max_length=200, blank=True)
    role = models.CharField(max_length=20, choices=Role.choices, default=Role.VIEWER)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='PENDING')
    can_create_jobs = models.BooleanField(default=False)
    can_edit_jobs = models.BooleanField(default=False)
    can_delete_jobs = models.BooleanField(default=False)
    can_review_apps = models.BooleanField(default=False)
    can_edit_company = models.BooleanField(default=False)
    can_manage_team = models.BooleanField(default=False)
    invited_at = models.DateTimeField(default=timezone.now)
    accepted_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at']
        constraints = [
            models.UniqueConstraint(fields=['company', 'email'], name='unique_team_member_email_per_company'),
        ]
        indexes = [
            models.Index(fields=['company', 'role'], name='core_teamme_company_18c4b7_idx'),
        ]

    def save(self, *args, **kwargs):
        if self.email:
            self.email = self.email.lower()
        return super().save(*args, **kwargs)

    @property
    def capabilities(self) -> Capabilities:
        return Capabilities(**{name: getattr(self, name) for name in CAPABILITY_FIELDS})

    def apply_capabilities(self, capabilities: Capabilities):
        for name, value in capabilities.as_dict().items():
            setattr(self, name, value)

    def is_expired(self):
        ttl = timedelta(days=getattr(settings, 'TEAM_INVITATION_TTL_DAYS', 7))
        return self.status == 'PENDING' and timezone.now() > self.invited_at + ttl

    def __str__(self):
        return f"{self.email} ({self.role}) @ {self.company_id}"


class MessageThread(models.Model):
    """Conversation between a company and an applicant about one job.

    ``company`` is the company owner's user row, so either side can be matched
    against ``request.user`` directly.
    """
    company = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='company_threads')
    applicant = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='applicant_threads')
    job = models.ForeignKey(Job, on_delete=models.CASCADE, null=True, blank=True, related_name='threads')
    last_message = models.TextField(blank=True)
    last_message_at = models.DateTimeField(default=timezone.now)
    is_read = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-updated_at']
        constraints = [
            models.UniqueConstraint(
                fields=['company', 'applicant', 'job'],
                name='unique_thread_per_company_applicant_job',
            ),
            # NULLs are distinct in a plain unique constraint
            models.UniqueConstraint(
                fields=['company', 'applicant'],
                condition=Q(job__isnull=True),
                name='unique_jobless_thread_per_company_applicant',
            ),
        ]
        indexes = [
            models.Index(fields=['company', '-updated_at'], name='core_messag_company_0f4c8b_idx'),
            models.Index(fields=['applicant', '-updated_at'], name='core_messag_applica_9d3e21_idx'),
        ]

    def involves(self, user):
        return user.pk in (self.company_id, self.applicant_id)

    def other_party_id(self, user):
        return self.applicant_id if user.pk == self.company_id else self.company_id


class Message(models.Model):
    MESSAGE_TYPES = [
        ('TEXT', 'Text'),
        ('IMAGE', 'Image'),
        ('DOCUMENT', 'Document'),
        ('MIXED', 'Mixed'),
    ]

    thread = models.ForeignKey(MessageThread, on_delete=models.CASCADE, related_name='messages')
    sender = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='sent_messages')
    receiver = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='received_messages')
    content = models.TextField(blank=True)
    attachments = models.JSONField(default=list, blank=True)
    message_type = models.CharField(max_length=10, choices=MESSAGE_TYPES, default='TEXT')
    is_read = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['created_at']
        indexes = [
            models.Index(fields=['thread', 'created_at'], name='core_messag_thread__4a6b93_idx'),
            models.Index(fields=['receiver', 'is_read'], name='core_messag_receive_c2e815_idx'),
        ]


class Notification(models.Model):
    """Per-user notification feed entry."""
    TYPE_CHOICES = [
        ('NEW_APPLICATION', 'New application'),
        ('APPLICATION_VIEWED', 'Application viewed'),
        ('APPLICATION_SHORTLISTED', 'Application shortlisted'),
        ('APPLICATION_ACCEPTED', 'Application accepted'),
        ('APPLICATION_REJECTED', 'Application rejected'),
        ('INTERVIEW_SCHEDULED', 'Interview scheduled'),
        ('INTERVIEW_CONFIRMED', 'Interview confirmed'),
        ('INTERVIEW_RESCHEDULED', 'Interview rescheduled'),
        ('INTERVIEW_CANCELLED', 'Interview cancelled'),
        ('INTERVIEW_REMINDER', 'Interview reminder'),
        ('INTERVIEW_COMPLETED', 'Interview completed'),
        ('INTERVIEW_FEEDBACK', 'Interview feedback'),
        ('NEW_MESSAGE', 'New message'),
        ('NEW_JOB_MATCH', 'New job match'),
        ('JOB_DEADLINE_REMINDER', 'Job deadline reminder'),
        ('SYSTEM_ANNOUNCEMENT', 'System announcement'),
        ('ACCOUNT_UPDATE', 'Account update'),
    ]
    TYPES = frozenset(value for value, _ in TYPE_CHOICES)

    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="notifications")
    notification_type = models.CharField(max_length=40, choices=TYPE_CHOICES)
    title = models.CharField(max_length=200)
    message = models.TextField()
    data = models.JSONField(null=True, blank=True)
    action_url = models.CharField(max_length=500, blank=True)
    is_read = models.BooleanField(default=False)
    read_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=["user", "is_read", "-created_at"], name='core_notifi_user_id_7b1d55_idx'),
        ]


class Resume(models.Model):
    TEMPLATE_CHOICES = [
        ('classic', 'Classic'),
        ('modern', 'Modern'),
        ('minimal', 'Minimal'),
        ('professional', 'Professional'),
    ]

    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='resumes')
    name = models.CharField(max_length=200)
    email = models.EmailField(blank=True)
    phone = models.CharField(max_length=30, blank=True)
    summary = models.TextField(blank=True)
    skills = models.JSONField(default=list, blank=True)
    languages = models.JSONField(default=list, blank=True)
    education = models.JSONField(default=list, blank=True)
    experience = models.JSONField(default=list, blank=True)
    projects = models.JSONField(default=list, blank=True)
    template = models.CharField(max_length=20, choices=TEMPLATE_CHOICES, default='classic')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at']
        indexes = [models.Index(fields=['user', '-created_at'], name='core_resume_user_id_e3a0f6_idx')]

    def __str__(self):
        return f"Resume({self.name})"
