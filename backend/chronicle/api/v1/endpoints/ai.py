"""
AI writing aids

Failures never surface as errors here: analysis returns no result and the
generators return their fallback text.
"""
from fastapi import APIRouter, Depends, HTTPException, status

from chronicle.api.deps import get_gateway, get_ai_client
from chronicle.db.gateway import PersistenceGateway
from chronicle.models.log_entry import LogStatus
from chronicle.models.user import User
from chronicle.modules.auth.dependencies import get_current_student, get_current_supervisor
from chronicle.schemas.ai import (
    AnalyzeLogRequest, AnalyzeLogResponse, GenerateLogRequest, GeneratedText
)
from chronicle.services.log_service import LogService
from chronicle.utils.ai_client import LogbookAIClient

router = APIRouter()


@router.post("/analyze-log", response_model=AnalyzeLogResponse)
async def analyze_log(
    data: AnalyzeLogRequest,
    current_user: User = Depends(get_current_supervisor),
    ai_client: LogbookAIClient = Depends(get_ai_client)
):
    return {"analysis": await ai_client.analyze_log_entry(data.content)}


@router.post("/generate-log", response_model=GeneratedText)
async def generate_log(
    data: GenerateLogRequest,
    current_user: User = Depends(get_current_student),
    ai_client: LogbookAIClient = Depends(get_ai_client)
):
    content = await ai_client.generate_log_entry(data.week, data.title, data.notes)
    return {"content": content}


@router.post("/final-summary", response_model=GeneratedText)
async def generate_final_summary(
    current_user: User = Depends(get_current_student),
    gateway: PersistenceGateway = Depends(get_gateway),
    ai_client: LogbookAIClient = Depends(get_ai_client)
):
    """Draft the final summary from the student's approved logs, oldest week first"""
    logs = await LogService(gateway).list_for_student(current_user.id)
    approved = sorted(
        [l for l in logs if LogStatus(l.status) == LogStatus.APPROVED],
        key=lambda l: l.week
    )
    if not approved:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="No approved logs to summarize"
        )

    log_contents = "\n\n---\n\n".join(
        f"Week {l.week}: {l.title}\n{l.content}" for l in approved
    )
    content = await ai_client.generate_final_summary(log_contents)
    return {"content": content}
