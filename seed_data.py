from sqlmodel import Session, select
from goldstar.core.config import get_settings
from goldstar.db.session import make_engine, create_db_and_tables
from goldstar.models.blog import BlogPost
from goldstar.services.blog import BlogService
from goldstar.services.images import ImagePipeline

POSTS = [
    {
        "title": "What Does a Bond Clean Include?",
        "slug": "what-does-a-bond-clean-include",
        "description": "A room-by-room checklist of what property managers look for at the final inspection.",
        "content": "Kitchens, bathrooms, windows, skirting boards and carpets all get a detailed clean...",
        "date": "2024-01-15",
    },
    {
        "title": "Carpet Steam Cleaning vs Dry Cleaning",
        "slug": "carpet-steam-vs-dry-cleaning",
        "description": "Which method gets your bond back, and when you need a receipt for it.",
        "content": "Most lease agreements ask for professional steam cleaning of carpets at the end of a tenancy...",
        "date": "2024-02-02",
    },
    {
        "title": "Moving Out With Pets",
        "slug": "moving-out-with-pets",
        "description": "Why pest control is usually part of the exit clean when pets lived in the property.",
        "content": "If your lease allowed pets, the agent will often require flea treatment before handover...",
        "date": "2024-03-10",
    },
]

def seed_blogs():
    settings = get_settings()
    engine = make_engine(settings.DATABASE_URL)
    print("Creating database and tables...")
    create_db_and_tables(engine)

    with Session(engine) as session:
        # Check if posts already exist to avoid duplicates
        existing = session.exec(select(BlogPost)).all()
        if existing:
            print(f"Database already contains {len(existing)} blog posts. Skipping seed.")
            return

        print("Seeding initial blog posts...")
        service = BlogService(
            session,
            ImagePipeline(settings.IMAGE_MAX_WIDTH, settings.IMAGE_QUALITY),
            settings.BLOG_UPLOAD_DIR
        )
        for post in POSTS:
            service.create(post)

        print(f"Successfully seeded {len(POSTS)} blog posts!")

if __name__ == "__main__":
    seed_blogs()
