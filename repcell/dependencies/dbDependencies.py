from fastapi import Depends
from sqlalchemy.orm import Session
from typing import Annotated
from repcell.core.clock import Clock, get_clock
from repcell.database.database import get_db

db_dependency = Annotated[Session, Depends(get_db)]

clock_dependency = Annotated[Clock, Depends(get_clock)]
