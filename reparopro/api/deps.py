import logging

import jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import APIKeyHeader

from ..config import settings
from ..database import SessionLocal
from ..schemas.user import UserObject
from ..services.quote_lifecycle import QuoteService
from ..services.quote_repository import QuoteRepository, SqlQuoteRepository
from ..services.repair_suggestion import RepairSuggestionService

api_key_header = APIKeyHeader(name="Authorization", auto_error=True)
logger = logging.getLogger(__name__)


def parse_token(token: str) -> dict:
    if token.lower().startswith("bearer "):
        token = token[7:]
    try:
        return jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
    except jwt.PyJWTError as e:
        logger.warning(f"Rejected token: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token",
        )


async def get_current_user(token: str = Depends(api_key_header)) -> UserObject:
    if not token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")

    claims = parse_token(token)
    user_data = {
        'id': claims.get('sub'),
        'name': claims.get('name', ''),
        'role': claims.get('role'),
        'status': claims.get('status', 'active'),
        'email': claims.get('email'),
    }
    try:
        return UserObject(**user_data)
    except ValueError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token claims")


def get_quote_repository() -> QuoteRepository:
    return SqlQuoteRepository(SessionLocal)


def get_quote_service(repository: QuoteRepository = Depends(get_quote_repository)) -> QuoteService:
    return QuoteService(repository)


def get_suggestion_provider() -> RepairSuggestionService:
    return RepairSuggestionService()
