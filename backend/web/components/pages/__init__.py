"""
Page components for SIAKAD.

Each page renders the content column only; routes wrap it in `Layout`.
"""

from .admin import AdminHomePage, RegistrationsPage, UsersPage
from .auth import LoginPage, RegistrationPage
from .profile import ProfilePage
from .status import AccountProblemPage, LoadingPage, PendingApprovalPage, ServiceUnavailablePage
from .student import AssignmentsPage, AttendancePage, MaterialsPage, StudentHomePage

__all__ = [
    "AdminHomePage",
    "RegistrationsPage",
    "UsersPage",
    "LoginPage",
    "RegistrationPage",
    "ProfilePage",
    "AccountProblemPage",
    "LoadingPage",
    "PendingApprovalPage",
    "ServiceUnavailablePage",
    "AssignmentsPage",
    "AttendancePage",
    "MaterialsPage",
    "StudentHomePage",
]
