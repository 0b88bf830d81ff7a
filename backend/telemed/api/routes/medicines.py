from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from telemed.api.deps import get_db
from telemed.schemas.pharmacy import MedicineResponse
from telemed.services.directory_service import list_medicines

router = APIRouter()


@router.get("", response_model=List[MedicineResponse])
def medicine_catalog(search: Optional[str] = Query(None), db: Session = Depends(get_db)):
    """Public medicine catalog."""
    return list_medicines(db, search)
