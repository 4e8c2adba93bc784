# Pydantic schemas
from chronicle.schemas.user import (
    UserRegister,
    UserResponse,
    AvatarUpdate,
    SupervisorLinkRequest,
    SupervisorLinkResponse,
    BulkUserRow,
    BulkCreateRequest,
    BulkCreateResponse,
)
from chronicle.schemas.log import (
    Attachment,
    LogCreate,
    LogUpdate,
    LogStatusUpdate,
    LogComment,
    LogResponse,
)
from chronicle.schemas.admin import (
    SystemEventResponse,
    AnnouncementCreate,
    AnnouncementResponse,
    ProgramCycleCreate,
    ProgramCycleResponse,
    BrandingUpdate,
    BrandingResponse,
)
from chronicle.schemas.workflow import (
    SignoffDecision,
    FinalReviewRequest,
    SignoffRequest,
    NotificationResponse,
    CountResponse,
    SkillResponse,
    StudentSummaryResponse,
    SupervisorDashboardResponse,
    AdminStatsResponse,
)
from chronicle.schemas.ai import (
    AnalyzeLogRequest,
    AnalyzeLogResponse,
    LogAnalysis,
    GenerateLogRequest,
    GeneratedText,
)
