from cafeshift.models.branch import Branch
from cafeshift.models.user import User
from cafeshift.models.session import Session
from cafeshift.models.shift import Shift, ShiftTrade
from cafeshift.models.payroll import PayrollPeriod, PayrollEntry
from cafeshift.models.approval import Approval
from cafeshift.models.time_off import TimeOffRequest
from cafeshift.models.notification import Notification
from cafeshift.models.setup_status import SetupStatus

__all__ = [
    "Branch",
    "User",
    "Session",
    "Shift",
    "ShiftTrade",
    "PayrollPeriod",
    "PayrollEntry",
    "Approval",
    "TimeOffRequest",
    "Notification",
    "SetupStatus",
]
