from datetime import datetime
from pydantic import BaseModel, Field


class AskQuestionDto(BaseModel):
    user_id: int = Field(..., gt=0, description="User asking the question")
    question: str = Field(..., description="Free-text question about their finances")


class AdvisorAnswer(BaseModel):
    id: int = Field(..., description="Stored analysis ID")
    user_id: int
    question: str
    response: str = Field(..., description="Advisor answer")
    created_at: datetime
