"""
Serializers for the JobKit REST API.

Field names are camelCase to match the web client; ``source=`` maps them onto
the snake_case model attributes.
"""
from rest_framework import serializers

from core.exceptions import ValidationFailed
from core.models import (
    Company,
    Interview,
    Job,
    JobApplication,
    JobSeekerProfile,
    Message,
    MessageThread,
    Notification,
    Resume,
    SavedJob,
    TeamMember,
    UserAccount,
)


def display_name(user):
    """Best human-readable name for a user on either side of the board."""
    if user is None:
        return ''
    profile = getattr(user, 'job_seeker', None)
    if profile is not None:
        return profile.get_full_name()
    company = getattr(user, 'company', None)
    if company is not None:
        return company.name
    return user.get_full_name() or user.email


def avatar_url(user):
    account = getattr(user, 'account', None)
    return account.avatar_url if account else ''


def parse_id(value, field_name):
    """Coerce a client-supplied primary key, raising a 400 for anything malformed."""
    try:
        return serializers.IntegerField(min_value=1).run_validation(value)
    except serializers.ValidationError as exc:
        raise ValidationFailed(f'{field_name} must be a positive integer', details={field_name: exc.detail[0]})


class CompanySerializer(serializers.ModelSerializer):
    companyName = serializers.CharField(source='name', max_length=200)
    companySize = serializers.CharField(source='company_size', max_length=20)
    logo = serializers.URLField(source='logo_url', read_only=True)
    contactPhone = serializers.CharField(source='contact_phone', max_length=30, required=False, allow_blank=True)
    contactEmail = serializers.EmailField(source='contact_email', required=False, allow_blank=True)
    establishedYear = serializers.IntegerField(source='established_year', required=False, allow_null=True)
    userId = serializers.IntegerField(source='owner_id', read_only=True)
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)
    updatedAt = serializers.DateTimeField(source='updated_at', read_only=True)

    class Meta:
        model = Company
        fields = [
            'id', 'userId', 'companyName', 'industry', 'companySize', 'location', 'website',
            'description', 'logo', 'contactPhone', 'contactEmail', 'establishedYear',
            'createdAt', 'updatedAt',
        ]
        extra_kwargs = {
            'website': {'required': False, 'allow_blank': True},
            'description': {'required': False, 'allow_blank': True},
        }


class CompanySummarySerializer(serializers.ModelSerializer):
    companyName = serializers.CharField(source='name')
    logo = serializers.CharField(source='logo_url')

    class Meta:
        model = Company
        fields = ['id', 'companyName', 'logo', 'location', 'industry']


class JobSeekerProfileSerializer(serializers.ModelSerializer):
    firstName = serializers.CharField(source='first_name')
    lastName = serializers.CharField(source='last_name')
    currentPosition = serializers.CharField(source='current_position', required=False, allow_blank=True)
    experienceLevel = serializers.CharField(source='experience_level', required=False, allow_blank=True)

    class Meta:
        model = JobSeekerProfile
        fields = ['id', 'firstName', 'lastName', 'phone', 'city', 'country', 'currentPosition', 'experienceLevel']


class UserSerializer(serializers.Serializer):
    id = serializers.IntegerField()
    email = serializers.EmailField()
    name = serializers.SerializerMethodField()
    userType = serializers.SerializerMethodField()
    avatarUrl = serializers.SerializerMethodField()
    company = serializers.SerializerMethodField()
    jobSeeker = serializers.SerializerMethodField()

    def get_name(self, user):
        return display_name(user)

    def get_userType(self, user):
        account = getattr(user, 'account', None)
        return account.user_type if account else UserAccount.USER

    def get_avatarUrl(self, user):
        return avatar_url(user)

    def get_company(self, user):
        company = getattr(user, 'company', None)
        return CompanySerializer(company).data if company else None

    def get_jobSeeker(self, user):
        profile = getattr(user, 'job_seeker', None)
        return JobSeekerProfileSerializer(profile).data if profile else None


class ParticipantSerializer(serializers.Serializer):
    id = serializers.IntegerField()
    name = serializers.SerializerMethodField()
    avatarUrl = serializers.SerializerMethodField()

    def get_name(self, user):
        return display_name(user)

    def get_avatarUrl(self, user):
        return avatar_url(user)


class JobSerializer(serializers.ModelSerializer):
    workType = serializers.ChoiceField(source='work_type', choices=Job.WORK_TYPES)
    salaryMin = serializers.DecimalField(source='salary_min', max_digits=12, decimal_places=2, required=False, allow_null=True, coerce_to_string=False)
    salaryMax = serializers.DecimalField(source='salary_max', max_digits=12, decimal_places=2, required=False, allow_null=True, coerce_to_string=False)
    experienceLevel = serializers.CharField(source='experience_level', max_length=40)
    isActive = serializers.BooleanField(source='is_active', required=False)
    requirements = serializers.ListField(child=serializers.CharField(), required=False)
    responsibilities = serializers.ListField(child=serializers.CharField(), required=False)
    benefits = serializers.ListField(child=serializers.CharField(), required=False)
    skills = serializers.ListField(child=serializers.CharField(), required=False)
    companyId = serializers.IntegerField(source='company_id', read_only=True)
    company = CompanySummarySerializer(read_only=True)
    applicationCount = serializers.SerializerMethodField()
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)
    updatedAt = serializers.DateTimeField(source='updated_at', read_only=True)

    class Meta:
        model = Job
        fields = [
            'id', 'companyId', 'company', 'title', 'description', 'requirements', 'responsibilities',
            'location', 'workType', 'salaryMin', 'salaryMax', 'currency', 'benefits', 'skills',
            'experienceLevel', 'isActive', 'deadline', 'applicationCount', 'createdAt', 'updatedAt',
        ]
        extra_kwargs = {
            'currency': {'required': False},
            'deadline': {'required': False, 'allow_null': True},
        }

    def get_applicationCount(self, job):
        count = getattr(job, 'application_count', None)
        return count

    def validate(self, attrs):
        instance = self.instance
        requirements = attrs.get('requirements', getattr(instance, 'requirements', None))
        skills = attrs.get('skills', getattr(instance, 'skills', None))
        if not [r for r in (requirements or []) if str(r).strip()]:
            raise serializers.ValidationError({'requirements': 'At least one requirement is required'})
        if not [s for s in (skills or []) if str(s).strip()]:
            raise serializers.ValidationError({'skills': 'At least one skill is required'})

        salary_min = attrs.get('salary_min', getattr(instance, 'salary_min', None))
        salary_max = attrs.get('salary_max', getattr(instance, 'salary_max', None))
        if salary_min is not None and salary_max is not None and salary_min > salary_max:
            raise serializers.ValidationError({'salaryMin': 'Minimum salary cannot be greater than maximum salary'})

        attrs['requirements'] = [r.strip() for r in requirements if str(r).strip()]
        attrs['skills'] = [s.strip() for s in skills if str(s).strip()]
        if 'currency' in attrs:
            attrs['currency'] = (attrs['currency'] or 'USD').upper()
        return attrs


class JobSummarySerializer(serializers.ModelSerializer):
    workType = serializers.CharField(source='work_type')
    company = CompanySummarySerializer(read_only=True)

    class Meta:
        model = Job
        fields = ['id', 'title', 'location', 'workType', 'company']


class ApplicationCreateSerializer(serializers.ModelSerializer):
    fullName = serializers.CharField(source='full_name', max_length=200)
    resumeUrl = serializers.URLField(source='resume_url', required=False, allow_blank=True)
    coverLetter = serializers.CharField(source='cover_letter', required=False, allow_blank=True)
    expectedSalary = serializers.CharField(source='expected_salary', required=False, allow_blank=True)
    availableFrom = serializers.DateField(source='available_from', required=False, allow_null=True)

    class Meta:
        model = JobApplication
        fields = ['fullName', 'email', 'phone', 'resumeUrl', 'coverLetter', 'experience', 'expectedSalary', 'availableFrom']
        extra_kwargs = {
            'phone': {'required': False, 'allow_blank': True},
            'experience': {'required': False, 'allow_blank': True},
        }


class ApplicationSerializer(serializers.ModelSerializer):
    jobId = serializers.IntegerField(source='job_id', read_only=True)
    applicantId = serializers.IntegerField(source='applicant_id', read_only=True)
    fullName = serializers.CharField(source='full_name', read_only=True)
    resumeUrl = serializers.CharField(source='resume_url', read_only=True)
    coverLetter = serializers.CharField(source='cover_letter', read_only=True)
    expectedSalary = serializers.CharField(source='expected_salary', read_only=True)
    availableFrom = serializers.DateField(source='available_from', read_only=True)
    job = JobSummarySerializer(read_only=True)
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)
    updatedAt = serializers.DateTimeField(source='updated_at', read_only=True)

    class Meta:
        model = JobApplication
        fields = [
            'id', 'jobId', 'applicantId', 'fullName', 'email', 'phone', 'resumeUrl', 'coverLetter',
            'experience', 'expectedSalary', 'availableFrom', 'status', 'notes', 'job', 'createdAt', 'updatedAt',
        ]
        read_only_fields = fields


class SavedJobSerializer(serializers.ModelSerializer):
    jobId = serializers.IntegerField(source='job_id', read_only=True)
    job = JobSerializer(read_only=True)
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)

    class Meta:
        model = SavedJob
        fields = ['id', 'jobId', 'job', 'createdAt']


class InterviewSerializer(serializers.ModelSerializer):
    applicationId = serializers.IntegerField(source='application_id', read_only=True)
    jobId = serializers.IntegerField(source='job_id', read_only=True)
    candidateId = serializers.IntegerField(source='candidate_id', read_only=True)
    companyId = serializers.IntegerField(source='company_user_id', read_only=True)
    interviewType = serializers.CharField(source='interview_type', read_only=True)
    scheduledAt = serializers.DateTimeField(source='scheduled_at', read_only=True)
    duration = serializers.IntegerField(source='duration_minutes', read_only=True)
    meetingLink = serializers.CharField(source='meeting_link', read_only=True)
    meetingPassword = serializers.CharField(source='meeting_password', read_only=True)
    companyNotes = serializers.CharField(source='company_notes', read_only=True)
    candidateNotes = serializers.CharField(source='candidate_notes', read_only=True)
    job = JobSummarySerializer(read_only=True)
    candidate = ParticipantSerializer(read_only=True)
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)
    updatedAt = serializers.DateTimeField(source='updated_at', read_only=True)

    class Meta:
        model = Interview
        fields = [
            'id', 'applicationId', 'jobId', 'candidateId', 'companyId', 'title', 'description',
            'interviewType', 'scheduledAt', 'duration', 'meetingLink', 'meetingPassword', 'location',
            'companyNotes', 'candidateNotes', 'status', 'feedback', 'rating', 'job', 'candidate',
            'createdAt', 'updatedAt',
        ]
        read_only_fields = fields


class InterviewCreateSerializer(serializers.Serializer):
    applicationId = serializers.IntegerField()
    title = serializers.CharField(max_length=200)
    description = serializers.CharField(required=False, allow_blank=True, default='')
    interviewType = serializers.ChoiceField(choices=Interview.INTERVIEW_TYPES, default='VIDEO')
    scheduledAt = serializers.DateTimeField()
    duration = serializers.IntegerField(min_value=5, max_value=480, default=60)
    meetingLink = serializers.URLField(required=False, allow_blank=True, default='')
    meetingPassword = serializers.CharField(required=False, allow_blank=True, default='')
    location = serializers.CharField(required=False, allow_blank=True, default='')
    companyNotes = serializers.CharField(required=False, allow_blank=True, default='')


class TeamMemberSerializer(serializers.ModelSerializer):
    companyId = serializers.IntegerField(source='company_id', read_only=True)
    userId = serializers.IntegerField(source='user_id', read_only=True)
    canCreateJobs = serializers.BooleanField(source='can_create_jobs', read_only=True)
    canEditJobs = serializers.BooleanField(source='can_edit_jobs', read_only=True)
    canDeleteJobs = serializers.BooleanField(source='can_delete_jobs', read_only=True)
    canReviewApps = serializers.BooleanField(source='can_review_apps', read_only=True)
    canEditCompany = serializers.BooleanField(source='can_edit_company', read_only=True)
    canManageTeam = serializers.BooleanField(source='can_manage_team', read_only=True)
    invitedAt = serializers.DateTimeField(source='invited_at', read_only=True)
    acceptedAt = serializers.DateTimeField(source='accepted_at', read_only=True)
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)
    updatedAt = serializers.DateTimeField(source='updated_at', read_only=True)

    class Meta:
        model = TeamMember
        fields = [
            'id', 'companyId', 'userId', 'email', 'name', 'role', 'status',
            'canCreateJobs', 'canEditJobs', 'canDeleteJobs', 'canReviewApps', 'canEditCompany', 'canManageTeam',
            'invitedAt', 'acceptedAt', 'createdAt', 'updatedAt',
        ]
        read_only_fields = fields


class MessageSerializer(serializers.ModelSerializer):
    threadId = serializers.IntegerField(source='thread_id', read_only=True)
    senderId = serializers.IntegerField(source='sender_id', read_only=True)
    receiverId = serializers.IntegerField(source='receiver_id', read_only=True)
    messageType = serializers.CharField(source='message_type', read_only=True)
    isRead = serializers.BooleanField(source='is_read', read_only=True)
    sender = ParticipantSerializer(read_only=True)
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)

    class Meta:
        model = Message
        fields = [
            'id', 'threadId', 'senderId', 'receiverId', 'content', 'attachments',
            'messageType', 'isRead', 'sender', 'createdAt',
        ]
        read_only_fields = fields


class ThreadSerializer(serializers.ModelSerializer):
    companyId = serializers.IntegerField(source='company_id', read_only=True)
    applicantId = serializers.IntegerField(source='applicant_id', read_only=True)
    jobId = serializers.IntegerField(source='job_id', read_only=True)
    lastMessage = serializers.CharField(source='last_message', read_only=True)
    lastMessageAt = serializers.DateTimeField(source='last_message_at', read_only=True)
    isRead = serializers.BooleanField(source='is_read', read_only=True)
    company = ParticipantSerializer(read_only=True)
    applicant = ParticipantSerializer(read_only=True)
    job = serializers.SerializerMethodField()
    latestMessage = serializers.SerializerMethodField()
    unreadCount = serializers.SerializerMethodField()
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)
    updatedAt = serializers.DateTimeField(source='updated_at', read_only=True)

    class Meta:
        model = MessageThread
        fields = [
            'id', 'companyId', 'applicantId', 'jobId', 'lastMessage', 'lastMessageAt', 'isRead',
            'company', 'applicant', 'job', 'latestMessage', 'unreadCount', 'createdAt', 'updatedAt',
        ]
        read_only_fields = fields

    def get_job(self, thread):
        if thread.job is None:
            return None
        return {'id': thread.job_id, 'title': thread.job.title}

    def get_latestMessage(self, thread):
        latest = thread.messages.order_by('-created_at').first()
        return MessageSerializer(latest).data if latest else None

    def get_unreadCount(self, thread):
        count = getattr(thread, 'unread_count', None)
        if count is not None:
            return count
        request = self.context.get('request')
        if request is None:
            return 0
        return thread.messages.filter(receiver=request.user, is_read=False).count()


class NotificationSerializer(serializers.ModelSerializer):
    userId = serializers.IntegerField(source='user_id', read_only=True)
    type = serializers.CharField(source='notification_type', read_only=True)
    actionUrl = serializers.CharField(source='action_url', read_only=True)
    isRead = serializers.BooleanField(source='is_read', read_only=True)
    readAt = serializers.DateTimeField(source='read_at', read_only=True)
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)

    class Meta:
        model = Notification
        fields = ['id', 'userId', 'type', 'title', 'message', 'data', 'actionUrl', 'isRead', 'readAt', 'createdAt']
        read_only_fields = fields


class EducationEntrySerializer(serializers.Serializer):
    school = serializers.CharField(allow_blank=True, default='')
    degree = serializers.CharField(allow_blank=True, default='')
    startDate = serializers.CharField(allow_blank=True, default='')
    endDate = serializers.CharField(allow_blank=True, default='')
    description = serializers.CharField(allow_blank=True, default='')


class ExperienceEntrySerializer(serializers.Serializer):
    company = serializers.CharField(allow_blank=True, default='')
    role = serializers.CharField(allow_blank=True, default='')
    startDate = serializers.CharField(allow_blank=True, default='')
    endDate = serializers.CharField(allow_blank=True, default='')
    description = serializers.CharField(allow_blank=True, default='')


class ProjectEntrySerializer(serializers.Serializer):
    title = serializers.CharField(allow_blank=True, default='')
    link = serializers.CharField(allow_blank=True, default='')
    description = serializers.CharField(allow_blank=True, default='')


class ResumeSerializer(serializers.ModelSerializer):
    skills = serializers.ListField(child=serializers.CharField(allow_blank=True), required=False)
    languages = serializers.ListField(child=serializers.CharField(allow_blank=True), required=False)
    education = serializers.ListField(child=EducationEntrySerializer(), required=False)
    experience = serializers.ListField(child=ExperienceEntrySerializer(), required=False)
    projects = serializers.ListField(child=ProjectEntrySerializer(), required=False)
    userId = serializers.IntegerField(source='user_id', read_only=True)
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)
    updatedAt = serializers.DateTimeField(source='updated_at', read_only=True)

    class Meta:
        model = Resume
        fields = [
            'id', 'userId', 'name', 'email', 'phone', 'summary', 'skills', 'languages',
            'education', 'experience', 'projects', 'template', 'createdAt', 'updatedAt',
        ]
        extra_kwargs = {
            'email': {'required': False, 'allow_blank': True},
            'phone': {'required': False, 'allow_blank': True},
            'summary': {'required': False, 'allow_blank': True},
            'template': {'required': False},
        }

    def validate(self, attrs):
        for key in ('education', 'experience', 'projects'):
            if key in attrs:
                attrs[key] = [dict(entry) for entry in attrs[key]]
        for key in ('skills', 'languages'):
            if key in attrs:
                attrs[key] = [value.strip() for value in attrs[key] if value and value.strip()]
        return attrs


class RegisterSerializer(serializers.Serializer):
    USER_REQUIRED = ('firstName', 'lastName', 'phone', 'city')
    COMPANY_REQUIRED = ('companyName', 'industry', 'companySize', 'location')

    email = serializers.EmailField()
    password = serializers.CharField(min_length=6, write_only=True)
    userType = serializers.ChoiceField(choices=UserAccount.USER_TYPES, default=UserAccount.USER)
    firstName = serializers.CharField(required=False, allow_blank=True, max_length=100)
    lastName = serializers.CharField(required=False, allow_blank=True, max_length=100)
    phone = serializers.CharField(required=False, allow_blank=True, max_length=20)
    city = serializers.CharField(required=False, allow_blank=True, max_length=100)
    companyName = serializers.CharField(required=False, allow_blank=True, max_length=200)
    industry = serializers.CharField(required=False, allow_blank=True, max_length=120)
    companySize = serializers.CharField(required=False, allow_blank=True, max_length=20)
    location = serializers.CharField(required=False, allow_blank=True, max_length=160)

    def validate_email(self, value):
        return value.strip().lower()

    def validate(self, attrs):
        required = self.COMPANY_REQUIRED if attrs['userType'] == UserAccount.COMPANY else self.USER_REQUIRED
        missing = {name: 'This field is required.' for name in required if not (attrs.get(name) or '').strip()}
        if missing:
            raise serializers.ValidationError(missing)
        return attrs


class ResetPasswordSerializer(serializers.Serializer):
    token = serializers.CharField()
    password = serializers.CharField(min_length=6, write_only=True)
    confirmPassword = serializers.CharField(write_only=True)

    def validate(self, attrs):
        if attrs['password'] != attrs['confirmPassword']:
            raise serializers.ValidationError({'confirmPassword': 'Passwords do not match'})
        return attrs
