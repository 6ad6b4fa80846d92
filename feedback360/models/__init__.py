from feedback360.models.profile import Profile, UserRole
from feedback360.models.assessment import (
    AssessmentPeriod,
    AssessmentAssignment,
    FeedbackResponse,
    ReminderLog,
    AssessmentHistory,
)
from feedback360.models.pin import EmployeePin, WeeklyPinAllowance, PinPeriod
from feedback360.models.notification import Notification
from feedback360.models.triwulan import (
    TriwulanMonthlyDeficiency,
    TriwulanCandidate,
    TriwulanVote,
    TriwulanVoteCompletion,
    TriwulanRating,
    TriwulanWinner,
)
