from quizhub.db.base_class import Base

# Import every model so Base.metadata knows all tables (alembic + create_all)
from quizhub.models.user import User
from quizhub.models.exam import Exam
from quizhub.models.question import Question
from quizhub.models.result import Result
