"""
URL configuration for the JobKit API.
"""
from django.urls import path

from core import (
    application_views,
    cover_letter_views,
    interview_views,
    job_views,
    message_views,
    notification_views,
    resume_views,
    team_views,
    upload_views,
    views,
)

app_name = 'core'

urlpatterns = [
    path('health', views.health, name='health'),

    # Authentication & account
    path('auth/register', views.register, name='register'),
    path('auth/login', views.login, name='login'),
    path('auth/logout', views.logout, name='logout'),
    path('auth/refresh', views.refresh, name='refresh'),
    path('auth/me', views.me, name='me'),
    path('auth/forgot-password', views.forgot_password, name='forgot-password'),
    path('auth/reset-password', views.reset_password, name='reset-password'),
    path('dashboard/account', views.update_account, name='update-account'),
    path('account/delete', views.delete_account, name='delete-account'),
    path('dashboard/company/profile', views.company_profile, name='company-profile'),
    path('dashboard/stats', views.dashboard_stats, name='dashboard-stats'),

    # Jobs
    path('jobs', job_views.job_list, name='job-list'),
    path('jobs/search', job_views.job_search, name='job-search'),
    path('jobs/<int:job_id>', job_views.job_detail, name='job-detail'),
    path('jobs/<int:job_id>/apply', application_views.apply_to_job, name='job-apply'),
    path('company/jobs', job_views.company_jobs, name='company-jobs'),
    path('company/jobs/<int:job_id>', job_views.company_job_detail, name='company-job-detail'),
    path('saved-jobs', job_views.saved_jobs, name='saved-jobs'),
    path('saved-jobs/check/<int:job_id>', job_views.saved_job_check, name='saved-job-check'),
    path('saved-jobs/<int:job_id>', job_views.saved_job_delete, name='saved-job-delete'),

    # Applications
    path('applications', application_views.my_applications, name='my-applications'),
    path('applications/<int:application_id>/withdraw', application_views.withdraw_application, name='withdraw-application'),
    path('applications/message', message_views.message_applicant, name='message-applicant'),
    path('company/applications', application_views.company_applications, name='company-applications'),
    path(
        'company/applications/<int:application_id>',
        application_views.company_application_detail,
        name='company-application-detail',
    ),

    # Interviews
    path('interviews', interview_views.interviews, name='interviews'),
    path('interviews/<int:interview_id>/confirm', interview_views.confirm_interview, name='interview-confirm'),
    path('interviews/<int:interview_id>/cancel', interview_views.cancel_interview, name='interview-cancel'),
    path('interviews/<int:interview_id>/reschedule', interview_views.reschedule_interview, name='interview-reschedule'),
    path('interviews/<int:interview_id>/feedback', interview_views.interview_feedback, name='interview-feedback'),

    # Team
    path('company/team', team_views.team_members, name='team-members'),
    path('company/team/roles', team_views.team_roles, name='team-roles'),
    path('company/team/<uuid:member_id>', team_views.team_member_detail, name='team-member-detail'),
    path('team/accept/<uuid:member_id>', team_views.accept_team_invitation, name='team-accept'),

    # Messaging
    path('messages', message_views.messages, name='messages'),
    path('messages/create', message_views.create_thread_from_application, name='messages-create'),
    path('messages/threads/stats', message_views.thread_stats, name='thread-stats'),
    path('messages/threads/<int:thread_id>', message_views.thread_detail, name='thread-detail'),

    # Notifications
    path('notifications', notification_views.notifications, name='notifications'),
    path('notifications/count', notification_views.notification_count, name='notification-count'),
    path('notifications/read-all', notification_views.mark_all_notifications_read, name='notifications-read-all'),
    path('notifications/<int:notification_id>', notification_views.notification_detail, name='notification-detail'),

    # Resume & cover letter
    path('resume', resume_views.resume, name='resume'),
    path('resume/print', resume_views.resume_print, name='resume-print'),
    path('resume/user/<int:user_id>', resume_views.resume_for_user, name='resume-for-user'),
    path('generate', cover_letter_views.generate, name='cover-letter-generate'),
    path('cover-letter/export', cover_letter_views.export_cover_letter, name='cover-letter-export'),

    # Uploads
    path('upload/message-files', upload_views.upload_message_files, name='upload-message-files'),
    path('upload/message-files/delete', upload_views.delete_message_files, name='delete-message-files'),
    path('upload/avatar', upload_views.upload_avatar, name='upload-avatar'),
    path('upload/logo', upload_views.upload_logo, name='upload-logo'),
]
