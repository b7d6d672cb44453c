"""QuizHub: exams, scored results and a friend graph behind a FastAPI backend."""
