# crmsync/models/__init__.py
from crmsync.models.user import User, gen_user_id
from crmsync.models.activity import ActivityLog, UserActivity
from crmsync.models.lead import Lead
from crmsync.models.otp import AdminOtp

__all__ = ["User", "gen_user_id", "UserActivity", "ActivityLog", "Lead", "AdminOtp"]
