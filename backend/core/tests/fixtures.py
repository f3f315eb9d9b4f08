"""
Test fixtures and factories for creating test data.
Uses factory_boy for consistent test data generation.
"""
from datetime import timedelta

import factory
from django.contrib.auth import get_user_model
from django.utils import timezone
from factory.django import DjangoModelFactory

from core.models import (
    Company,
    Interview,
    Job,
    JobApplication,
    JobSeekerProfile,
    Notification,
    Resume,
    TeamMember,
    UserAccount,
)
from core.roles import ROLE_PERMISSIONS, Role
from core.serializers import display_name

User = get_user_model()

PASSWORD = 'secret123'


class UserFactory(DjangoModelFactory):
    """Factory for auth users; the password is always ``PASSWORD``."""
    class Meta:
        model = User

    username = factory.Sequence(lambda n: f'user{n}@example.com')
    email = factory.LazyAttribute(lambda obj: obj.username)
    first_name = factory.Faker('first_name')
    last_name = factory.Faker('last_name')
    is_active = True
    password = factory.django.Password(PASSWORD)


class UserAccountFactory(DjangoModelFactory):
    class Meta:
        model = UserAccount

    user = factory.SubFactory(UserFactory)
    email = factory.LazyAttribute(lambda obj: obj.user.email.lower())
    user_type = UserAccount.USER


class JobSeekerFactory(DjangoModelFactory):
    """A job seeker: auth user, USER account row and profile."""
    class Meta:
        model = JobSeekerProfile

    user = factory.SubFactory(UserFactory)
    first_name = factory.Faker('first_name')
    last_name = factory.Faker('last_name')
    phone = '+15551234567'
    city = factory.Faker('city')

    @factory.post_generation
    def account(self, create, extracted, **kwargs):
        if create:
            UserAccountFactory(user=self.user, user_type=UserAccount.USER)


class CompanyFactory(DjangoModelFactory):
    """A company and its owner's COMPANY account row."""
    class Meta:
        model = Company

    owner = factory.SubFactory(UserFactory)
    name = factory.Sequence(lambda n: f'Company {n}')
    industry = 'Technology'
    company_size = '11-50'
    location = 'Remote'

    @factory.post_generation
    def account(self, create, extracted, **kwargs):
        if create:
            UserAccountFactory(user=self.owner, user_type=UserAccount.COMPANY)


class JobFactory(DjangoModelFactory):
    class Meta:
        model = Job

    company = factory.SubFactory(CompanyFactory)
    title = factory.Sequence(lambda n: f'Backend Engineer {n}')
    description = 'Build and run APIs.'
    requirements = factory.LazyFunction(lambda: ['3+ years of Python'])
    location = 'Remote'
    work_type = 'FULL_TIME'
    skills = factory.LazyFunction(lambda: ['Python', 'Django'])
    experience_level = 'MID'
    is_active = True


class ApplicationFactory(DjangoModelFactory):
    class Meta:
        model = JobApplication

    job = factory.SubFactory(JobFactory)
    applicant = factory.LazyAttribute(lambda obj: JobSeekerFactory().user)
    full_name = factory.LazyAttribute(lambda obj: display_name(obj.applicant))
    email = factory.LazyAttribute(lambda obj: obj.applicant.email)
    status = 'PENDING'


class InterviewFactory(DjangoModelFactory):
    class Meta:
        model = Interview

    application = factory.SubFactory(ApplicationFactory)
    job = factory.LazyAttribute(lambda obj: obj.application.job)
    candidate = factory.LazyAttribute(lambda obj: obj.application.applicant)
    company_user = factory.LazyAttribute(lambda obj: obj.application.job.company.owner)
    title = 'Technical interview'
    scheduled_at = factory.LazyFunction(lambda: timezone.now() + timedelta(days=3))
    status = 'SCHEDULED'


class TeamMemberFactory(DjangoModelFactory):
    """Team member whose flags follow the role defaults unless given explicitly."""
    class Meta:
        model = TeamMember

    company = factory.SubFactory(CompanyFactory)
    email = factory.Sequence(lambda n: f'member{n}@example.com')
    name = factory.Faker('name')
    role = Role.ADMIN
    status = 'ACCEPTED'

    @factory.lazy_attribute
    def can_create_jobs(self):
        return ROLE_PERMISSIONS[Role(self.role)].can_create_jobs

    @factory.lazy_attribute
    def can_edit_jobs(self):
        return ROLE_PERMISSIONS[Role(self.role)].can_edit_jobs

    @factory.lazy_attribute
    def can_delete_jobs(self):
        return ROLE_PERMISSIONS[Role(self.role)].can_delete_jobs

    @factory.lazy_attribute
    def can_review_apps(self):
        return ROLE_PERMISSIONS[Role(self.role)].can_review_apps

    @factory.lazy_attribute
    def can_edit_company(self):
        return ROLE_PERMISSIONS[Role(self.role)].can_edit_company

    @factory.lazy_attribute
    def can_manage_team(self):
        return ROLE_PERMISSIONS[Role(self.role)].can_manage_team


class NotificationFactory(DjangoModelFactory):
    class Meta:
        model = Notification

    user = factory.SubFactory(UserFactory)
    notification_type = 'SYSTEM_ANNOUNCEMENT'
    title = 'Heads up'
    message = factory.Faker('sentence')
    is_read = False


class ResumeFactory(DjangoModelFactory):
    class Meta:
        model = Resume

    user = factory.SubFactory(UserFactory)
    name = factory.Faker('name')
    email = factory.Faker('email')
    summary = 'Engineer who likes clean APIs.'
    skills = factory.LazyFunction(lambda: ['Python', 'SQL'])
    experience = factory.LazyFunction(lambda: [
        {'company': 'Tech Corp', 'role': 'Engineer', 'startDate': '2021', 'endDate': 'Present',
         'description': 'Built APIs.'},
    ])
    template = 'modern'
