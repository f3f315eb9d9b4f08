from django.contrib import admin
from .models import (
    # Accounts
    UserAccount, JobSeekerProfile, Company,
    # Jobs & applications
    Job, JobApplication, SavedJob, Interview,
    # Team
    TeamMember,
    # Messaging & notifications
    MessageThread, Message, Notification,
    # Resume builder
    Resume,
)


@admin.register(UserAccount)
class UserAccountAdmin(admin.ModelAdmin):
    list_display = ['email', 'user_type', 'created_at']
    list_filter = ['user_type']
    search_fields = ['email', 'user__username']


@admin.register(JobSeekerProfile)
class JobSeekerProfileAdmin(admin.ModelAdmin):
    list_display = ['user', 'first_name', 'last_name', 'city', 'experience_level']
    list_filter = ['experience_level']
    search_fields = ['user__email', 'first_name', 'last_name', 'city']


class TeamMemberInline(admin.TabularInline):
    model = TeamMember
    extra = 0
    fields = ['email', 'name', 'role', 'status', 'can_manage_team']


@admin.register(Company)
class CompanyAdmin(admin.ModelAdmin):
    list_display = ['name', 'owner', 'industry', 'company_size', 'location']
    list_filter = ['industry', 'company_size']
    search_fields = ['name', 'owner__email', 'industry']
    inlines = [TeamMemberInline]


@admin.register(Job)
class JobAdmin(admin.ModelAdmin):
    list_display = ['title', 'company', 'location', 'work_type', 'experience_level', 'is_active', 'deadline']
    list_filter = ['work_type', 'is_active', 'experience_level']
    search_fields = ['title', 'company__name', 'location']


@admin.register(JobApplication)
class JobApplicationAdmin(admin.ModelAdmin):
    list_display = ['full_name', 'job', 'status', 'created_at']
    list_filter = ['status', 'created_at']
    search_fields = ['full_name', 'email', 'job__title']


@admin.register(SavedJob)
class SavedJobAdmin(admin.ModelAdmin):
    list_display = ['user', 'job', 'created_at']
    search_fields = ['user__email', 'job__title']


@admin.register(Interview)
class InterviewAdmin(admin.ModelAdmin):
    list_display = ['title', 'job', 'candidate', 'scheduled_at', 'interview_type', 'status']
    list_filter = ['status', 'interview_type', 'scheduled_at']
    search_fields = ['title', 'job__title', 'candidate__email']


@admin.register(TeamMember)
class TeamMemberAdmin(admin.ModelAdmin):
    list_display = ['email', 'company', 'role', 'status', 'invited_at', 'accepted_at']
    list_filter = ['role', 'status']
    search_fields = ['email', 'name', 'company__name']


class MessageInline(admin.TabularInline):
    model = Message
    extra = 0
    fields = ['sender', 'receiver', 'content', 'message_type', 'is_read']
    readonly_fields = fields


@admin.register(MessageThread)
class MessageThreadAdmin(admin.ModelAdmin):
    list_display = ['id', 'company', 'applicant', 'job', 'last_message_at', 'is_read']
    list_filter = ['is_read']
    search_fields = ['company__email', 'applicant__email', 'job__title']
    inlines = [MessageInline]


@admin.register(Notification)
class NotificationAdmin(admin.ModelAdmin):
    list_display = ['user', 'notification_type', 'title', 'is_read', 'created_at']
    list_filter = ['notification_type', 'is_read']
    search_fields = ['user__email', 'title', 'message']


@admin.register(Resume)
class ResumeAdmin(admin.ModelAdmin):
    list_display = ['name', 'user', 'template', 'updated_at']
    list_filter = ['template']
    search_fields = ['name', 'user__email']
