"""
题库管理API路由
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from buzzer.core.database import get_db
from buzzer.core.utils import to_http_error
from buzzer.services.question_service import QuestionService
from buzzer.schemas.session_schemas import QuestionUpdate, QuestionResponse

router = APIRouter()

@router.put("/{question_id}", response_model=QuestionResponse)
async def update_question(
    question_id: int,
    question_data: QuestionUpdate,
    db: Session = Depends(get_db)
):
    """修改题目"""
    service = QuestionService(db)
    try:
        return await service.update_question(question_id, question_data.question_text, question_data.image_url)
    except ValueError as e:
        raise to_http_error(e)

@router.delete("/{question_id}")
async def delete_question(
    question_id: int,
    db: Session = Depends(get_db)
):
    """删除题目"""
    service = QuestionService(db)
    try:
        await service.delete_question(question_id)
        return {"message": "题目已删除", "question_id": question_id}
    except ValueError as e:
        raise to_http_error(e)
