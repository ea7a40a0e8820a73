'''
Enumerations stored as plain strings in the database.
'''
import enum


class ListableEnum(str, enum.Enum):
    """A custom Enum base class that can list all member values."""
    @classmethod
    def get_all_names(cls) -> list[str]:
        return [member.value for member in cls]


class DayOfWeek(ListableEnum):
    MONDAY = 'Monday'
    TUESDAY = 'Tuesday'
    WEDNESDAY = 'Wednesday'
    THURSDAY = 'Thursday'
    FRIDAY = 'Friday'
    SATURDAY = 'Saturday'
    SUNDAY = 'Sunday'

    @classmethod
    def from_date(cls, value) -> 'DayOfWeek':
        return list(cls)[value.weekday()]


class StudentStatus(ListableEnum):
    ACTIVE = 'active'
    INACTIVE = 'inactive'
    GRADUATED = 'graduated'
    TRANSFERRED = 'transferred'


class GenderEnum(ListableEnum):
    MALE = 'male'
    FEMALE = 'female'
    OTHER = 'other'


class SubstitutionStatus(ListableEnum):
    PENDING = 'pending'
    APPROVED = 'approved'
    COMPLETED = 'completed'
    CANCELLED = 'cancelled'


class FeeFrequency(ListableEnum):
    MONTHLY = 'monthly'
    TERMLY = 'termly'
    ANNUAL = 'annual'
    ONE_TIME = 'one_time'


class DiscountType(ListableEnum):
    PERCENTAGE = 'percentage'
    FIXED = 'fixed'


class InvoiceStatus(ListableEnum):
    PENDING = 'pending'
    PARTIAL = 'partial'
    PAID = 'paid'
    OVERDUE = 'overdue'
    CANCELLED = 'cancelled'


class PaymentMethod(ListableEnum):
    CASH = 'cash'
    BANK_TRANSFER = 'bank_transfer'
    CHEQUE = 'cheque'
    MPESA = 'mpesa'
    CARD = 'card'


class PaymentStatus(ListableEnum):
    SUCCESS = 'success'
    FAILED = 'failed'


class AttendanceSession(ListableEnum):
    MORNING = 'morning'
    AFTERNOON = 'afternoon'
    FULL_DAY = 'full_day'


class AttendanceStatus(ListableEnum):
    PRESENT = 'present'
    ABSENT = 'absent'
    LATE = 'late'
    EXCUSED = 'excused'


class NotificationType(ListableEnum):
    INFO = 'info'
    PAYMENT = 'payment'
    ATTENDANCE = 'attendance'
    EXAM = 'exam'
    ANNOUNCEMENT = 'announcement'


class RecipientType(ListableEnum):
    STUDENT = 'student'
    PARENT = 'parent'
    TEACHER = 'teacher'


class AnnouncementAudience(ListableEnum):
    ALL = 'all'
    STUDENTS = 'students'
    PARENTS = 'parents'
    TEACHERS = 'teachers'
