from typing import List, Optional
from pydantic import BaseModel
import enum

# Field names follow the JSON documents on disk (camelCase) so stored data
# and API payloads stay byte-compatible with the front end.

# --- Enums ---

class UserId(str, enum.Enum):
    USER1 = "user1"
    USER2 = "user2"

class AssignedTo(str, enum.Enum):
    BOTH = "both"
    USER1 = "user1"
    USER2 = "user2"

class ProgressSource(str, enum.Enum):
    CHECKIN = "checkin"
    MANUAL = "manual"

class TodoStatus(str, enum.Enum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"

class DayStatus(str, enum.Enum):
    COMPLETE = "complete"
    PARTIAL = "partial"
    INCOMPLETE = "incomplete"
    UNPLANNED = "unplanned"

# --- Users ---

class User(BaseModel):
    id: UserId
    name: str
    avatar: Optional[str] = None
    progressColor: Optional[str] = None

class UserUpdateRequest(BaseModel):
    id: Optional[UserId] = None
    name: Optional[str] = None
    avatar: Optional[str] = None
    progressColor: Optional[str] = None

class UsersResponse(BaseModel):
    users: List[User]

# --- Settings ---

class CompletedPages(BaseModel):
    user1: int = 0
    user2: int = 0

class HomeworkItem(BaseModel):
    id: str
    title: str
    totalPages: int = 0
    completedPages: CompletedPages = CompletedPages()
    unit: str = ""

class Subject(BaseModel):
    id: str
    name: str
    color: str = "#3b82f6"
    homework: List[HomeworkItem] = []
    assignedTo: AssignedTo = AssignedTo.BOTH

class VacationSettings(BaseModel):
    startDate: str
    endDate: str
    name: str = ""

class ExamCountdown(BaseModel):
    id: str
    name: str
    date: str

class AppSettings(BaseModel):
    vacation: Optional[VacationSettings] = None
    subjects: List[Subject] = []
    exams: List[ExamCountdown] = []

class SettingsResponse(BaseModel):
    settings: AppSettings

class ManualProgressRequest(BaseModel):
    userId: UserId
    completedPages: int
    date: Optional[str] = None
    note: Optional[str] = None

class HomeworkHistoryEntry(BaseModel):
    date: str
    userId: UserId
    amount: int
    source: ProgressSource
    timestamp: str

class HomeworkHistoryResponse(BaseModel):
    history: List[HomeworkHistoryEntry]

# --- Daily tasks & check-ins ---

class DailyTask(BaseModel):
    id: str
    title: str
    target: int = 0
    unit: str = ""
    subjectId: Optional[str] = None
    homeworkId: Optional[str] = None
    icon: Optional[str] = None

class DailyTaskList(BaseModel):
    tasks: List[DailyTask] = []

class DailyCheckIn(BaseModel):
    taskId: str
    completed: bool = False
    amount: int = 0
    completedAt: Optional[str] = None
    syncedAmount: int = 0

class UserDailyCheckIns(BaseModel):
    user1: List[DailyCheckIn] = []
    user2: List[DailyCheckIn] = []

class HomeworkProgressEntry(BaseModel):
    subjectId: str
    homeworkId: str
    amount: int
    source: ProgressSource
    taskId: Optional[str] = None
    timestamp: str
    note: Optional[str] = None

class UserHomeworkProgress(BaseModel):
    user1: List[HomeworkProgressEntry] = []
    user2: List[HomeworkProgressEntry] = []

class DailyCheckInData(BaseModel):
    date: str
    checkIns: UserDailyCheckIns
    homeworkProgress: UserHomeworkProgress

class StreakPair(BaseModel):
    user1: int = 0
    user2: int = 0

class CheckInDayResponse(DailyCheckInData):
    streaks: StreakPair
    tasks: List[DailyTask]

class CheckInUpdateRequest(BaseModel):
    checkIns: UserDailyCheckIns
    homeworkProgress: Optional[UserHomeworkProgress] = None

class ToggleCheckInRequest(BaseModel):
    userId: UserId
    taskId: str
    amount: Optional[int] = None

class CheckInAmountRequest(BaseModel):
    userId: UserId
    taskId: str
    amount: int

# --- Todos ---

class GlobalTodoItem(BaseModel):
    id: str
    title: str
    status: TodoStatus = TodoStatus.PENDING
    createdAt: str
    deadline: Optional[str] = None
    createdBy: Optional[UserId] = None
    linkedBlockId: Optional[str] = None
    linkedSubjectId: Optional[str] = None

class GlobalTodoList(BaseModel):
    user1: List[GlobalTodoItem] = []
    user2: List[GlobalTodoItem] = []

class TodoListResponse(BaseModel):
    todos: GlobalTodoList

class TodoCreateRequest(BaseModel):
    title: str
    deadline: Optional[str] = None
    createdBy: Optional[UserId] = None
    linkedSubjectId: Optional[str] = None

# --- Stats ---

class PKUserStats(BaseModel):
    completed: int
    total: int
    streak: int

class PKStats(BaseModel):
    date: str
    user1: PKUserStats
    user2: PKUserStats

class CalendarDay(BaseModel):
    date: str
    status: DayStatus
    completed: int
    total: int

class CalendarResponse(BaseModel):
    days: List[CalendarDay]

class VacationProgress(BaseModel):
    name: str = ""
    totalDays: int
    daysPassed: int
    daysRemaining: int
    percentage: float

class SubjectProgress(BaseModel):
    subjectId: str
    name: str
    completed: int
    total: int
    percentage: float

class OverallProgress(BaseModel):
    completed: int
    total: int
    percentage: float
    subjects: List[SubjectProgress] = []

class ExamCountdownInfo(ExamCountdown):
    daysLeft: int

class ProgressOverview(BaseModel):
    vacation: Optional[VacationProgress] = None
    homework: OverallProgress
    exams: List[ExamCountdownInfo] = []
