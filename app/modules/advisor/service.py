import logging

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import DatabaseError, UserNotFoundError, ValidationError
from app.integrations.llm.service import LLMService
from app.modules.advisor.dto import AdvisorAnswer
from app.modules.advisor.models import AiAnalysis
from app.modules.advisor.prompts import CONTEXT_TRANSACTIONS, build_advisor_prompt
from app.modules.transactions.dto import GetTransactionsModel
from app.modules.transactions.service import TransactionsService
from app.modules.users.service import UsersService

logger = logging.getLogger(__name__)

ANALYSIS_TYPE = "financial_question"


class FinancialAdvisorService:
    def __init__(
        self,
        llm_service: LLMService,
        transactions_service: TransactionsService,
        users_service: UsersService,
    ):
        self.llm_service = llm_service
        self.transactions_service = transactions_service
        self.users_service = users_service
        self.logger = logger

    async def ask(self, db: AsyncSession, user_id: int, question: str) -> AdvisorAnswer:
        """Answer a question using the user's recent transactions as context.

        The answer is stored as an AiAnalysis row. LLMServiceError propagates
        unchanged when the completion endpoint fails.
        """
        question = (question or "").strip()
        if not question:
            raise ValidationError("Question is required")

        user = await self.users_service.get_user_by_id(db, user_id)
        if not user:
            raise UserNotFoundError(user_id)

        transactions = await self.transactions_service.get_transactions(
            db, GetTransactionsModel(user_id=user_id, limit=CONTEXT_TRANSACTIONS)
        )
        self.logger.info(
            f"Advisor question from user {user_id} with {len(transactions)} transactions"
        )

        response = await self.llm_service.complete(
            prompt=build_advisor_prompt(question, transactions),
            max_tokens=1000,
            temperature=0.7,
            call_stack="advisor",
        )

        analysis = AiAnalysis(
            user_id=user_id,
            analysis_type=ANALYSIS_TYPE,
            content=response.content.strip(),
            meta={"question": question},
        )
        try:
            db.add(analysis)
            await db.commit()
            await db.refresh(analysis)
        except Exception as e:
            await db.rollback()
            self.logger.error(f"Failed to store advisor answer: {str(e)}")
            raise DatabaseError(f"store analysis: {str(e)}")

        return AdvisorAnswer(
            id=analysis.id,
            user_id=user_id,
            question=question,
            response=analysis.content,
            created_at=analysis.created_at,
        )
