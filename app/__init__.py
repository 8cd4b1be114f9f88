"""
ATS Tracker
Personal job-search tracker backend.

Architecture:
- PostgreSQL: profile data (users, jobs, education, skills, certifications, projects, files)
- MongoDB: legacy application tracking documents
- Local disk: uploaded resumes, documents and profile pictures
"""

__version__ = "1.0.0"
