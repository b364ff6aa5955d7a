"""One-time dev setup: create tables and seed a sample quiz."""
import uuid

from gamification.core.security import SERVICE_ROLE, create_access_token
from gamification.db.models import Quiz
from gamification.db.session import Base, get_engine, get_session_factory

SAMPLE_CONTENT_ITEM_ID = uuid.UUID("00000000-0000-4000-8000-000000000001")
SAMPLE_QUESTIONS = [
    {
        "question": "Which planet is known as the Red Planet?",
        "options": ["Venus", "Mars", "Jupiter", "Mercury"],
        "correctAnswer": 1,
        "explanation": "Iron oxide on its surface gives Mars its colour.",
    },
    {
        "question": "What is the boiling point of water at sea level?",
        "options": ["90 °C", "100 °C", "110 °C"],
        "correctAnswer": 1,
    },
    {
        "question": "Who wrote 'Pride and Prejudice'?",
        "options": ["Charlotte Brontë", "Mary Shelley", "Jane Austen", "George Eliot"],
        "correctAnswer": 2,
    },
]

# 1. Create all tables
engine = get_engine()
Base.metadata.create_all(bind=engine)
print("✅ All tables created")

session_factory = get_session_factory()
with session_factory() as db:
    # 2. Sample quiz
    quiz = db.query(Quiz).filter(Quiz.content_item_id == SAMPLE_CONTENT_ITEM_ID).first()
    if not quiz:
        quiz = Quiz(
            content_item_id=SAMPLE_CONTENT_ITEM_ID,
            title="General knowledge warm-up",
            questions_json=SAMPLE_QUESTIONS,
        )
        db.add(quiz)
        db.commit()
        print(f"✅ Created sample quiz for content item {SAMPLE_CONTENT_ITEM_ID}")
    else:
        print("  Sample quiz already exists")

# 3. Dev tokens
reader_id = uuid.uuid4()
print("\n🎉 Database is ready to use!")
print(f"   Reader token:  {create_access_token({'sub': str(reader_id), 'role': 'authenticated'})}")
print(f"   Service token: {create_access_token({'sub': str(uuid.uuid4()), 'role': SERVICE_ROLE})}")
