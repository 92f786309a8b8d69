from fastapi import APIRouter

from app.core.dependencies import AdvisorServiceDep, DatabaseDep
from app.modules.advisor.dto import AdvisorAnswer, AskQuestionDto

router = APIRouter(prefix="/advisor", tags=["advisor"])


@router.post("/ask", response_model=AdvisorAnswer)
async def ask_question(
    data: AskQuestionDto,
    db: DatabaseDep,
    advisor_service: AdvisorServiceDep,
) -> AdvisorAnswer:
    """Ask the financial advisor a question"""
    return await advisor_service.ask(db, data.user_id, data.question)
