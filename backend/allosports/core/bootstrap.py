"""
Bootstrap module for application initialization.
Handles initial setup tasks: creating the default admin and seeding demo content.
"""
import datetime as dt
import logging

from allosports.config import Settings
from allosports.core.security import hash_password
from allosports.services.articles import unique_slug
from allosports.storage import ROLE_ADMIN, ROLE_AUTHOR, NewArticle, NewUser, Storage

logger = logging.getLogger("uvicorn.error")

DEMO_AUTHOR_USERNAME = "sportsjournalist"
DEMO_AUTHOR_PASSWORD = "demo123"

DEMO_ARTICLES = [
    {
        "title": "Canadiens stage a spectacular comeback against the Bruins",
        "excerpt": "Down two goals at the Bell Centre, Montreal rallied to win 4-3 in overtime.",
        "content": (
            "The Bell Centre was rocking as the Canadiens hosted the Bruins in another chapter "
            "of the historic rivalry.\n\nTrailing 2-0 after the first period, Montreal dug deep. "
            "Cole Caufield scored twice, including the overtime winner, while Samuel Montembeault "
            "made 35 saves to keep his team in the game."
        ),
        "category": "NHL",
        "image_url": "https://images.unsplash.com/photo-1515703407324-5f753afd8be8?w=1200&h=675&fit=crop",
        "featured": True,
    },
    {
        "title": "NBA pauses the season: what it means for the Raptors",
        "excerpt": "A surprise one-week suspension lands right in the middle of Toronto's playoff push.",
        "content": (
            "The NBA announced a temporary suspension of the regular season, a decision that hits "
            "the Raptors at a crucial point of the schedule.\n\nThe league says every postponed game "
            "will be rescheduled and the season will finish as planned."
        ),
        "category": "NBA",
        "image_url": "https://images.unsplash.com/photo-1546519638-68e109498ffc?w=1200&h=675&fit=crop",
    },
    {
        "title": "CF Montréal reaches the CONCACAF Champions Cup semi-finals",
        "excerpt": "A 3-2 aggregate win over Club América writes a new page in the club's history.",
        "content": (
            "In front of a record crowd at Stade Saputo, CF Montréal completed a 3-2 aggregate win "
            "over Club América to reach the semi-finals for the first time."
        ),
        "category": "Soccer",
        "image_url": "https://images.unsplash.com/photo-1574629810360-7efbbe195018?w=1200&h=675&fit=crop",
    },
    {
        "title": "Félix Auger-Aliassime into the Australian Open quarter-finals",
        "excerpt": "The Montrealer beat the world number 12 in four sets in Melbourne.",
        "content": (
            "Félix Auger-Aliassime won 6-4, 3-6, 6-3, 7-5 in a match lasting nearly three hours, "
            "his serve and baseline power making the difference."
        ),
        "category": "ATP",
        "image_url": "https://images.unsplash.com/photo-1554068865-24cecd4e34b8?w=1200&h=675&fit=crop",
    },
    {
        "title": "Canadian Grand Prix: preparations in full swing",
        "excerpt": "Circuit Gilles-Villeneuve gets ready to welcome Formula 1 in June.",
        "content": (
            "Resurfacing work and improved run-off areas are under way at Circuit Gilles-Villeneuve. "
            "More than 70% of tickets are already sold."
        ),
        "category": "F1",
        "image_url": "https://images.unsplash.com/photo-1504707748692-419802cf939d?w=1200&h=675&fit=crop",
    },
]


async def ensure_default_admin(storage: Storage, config: Settings) -> None:
    """
    If no admin exists, create a default admin based on configuration.
    Only takes effect under the following conditions:
      - Currently no user with role="ADMIN"
      - And ADMIN_PASSWORD is set (to avoid using default weak password)
    """
    if await storage.has_user_with_role(ROLE_ADMIN):
        return

    if not config.admin_password:
        logger.warning("[bootstrap] No admin present, but ADMIN_PASSWORD not set -> skip creating default admin.")
        return

    # The configured name may already belong to a regular account; pick a free one
    username = config.admin_username
    suffix = 1
    while await storage.get_user_by_username(username):
        suffix += 1
        username = f"{config.admin_username}{suffix}"

    email = config.admin_email
    if await storage.get_user_by_email(email):
        logger.warning("[bootstrap] ADMIN_EMAIL %s already used -> skip creating default admin.", email)
        return

    u = await storage.create_user(NewUser(
        username=username,
        email=email,
        password_hash=hash_password(config.admin_password),
        role=ROLE_ADMIN,
    ))
    logger.warning("[bootstrap] Created default admin -> username=%s email=%s id=%s", u.username, u.email, u.id)


async def seed_demo_content(storage: Storage) -> int:
    """
    Create the demo author and a handful of published articles, once.

    Returns:
        Number of articles created (0 when the demo author already exists).
    """
    if await storage.get_user_by_username(DEMO_AUTHOR_USERNAME):
        return 0

    author = await storage.create_user(NewUser(
        username=DEMO_AUTHOR_USERNAME,
        email="journalist@allosportshub.com",
        password_hash=hash_password(DEMO_AUTHOR_PASSWORD),
        role=ROLE_AUTHOR,
        first_name="Marc",
        last_name="Tremblay",
    ))

    now = dt.datetime.now(dt.timezone.utc)
    for hours_ago, data in enumerate(DEMO_ARTICLES):
        await storage.create_article(NewArticle(
            title=data["title"],
            slug=await unique_slug(storage, data["title"]),
            excerpt=data["excerpt"],
            content=data["content"],
            category=data["category"],
            image_url=data.get("image_url"),
            author_id=author.id,
            published=True,
            featured=data.get("featured", False),
            # spread over the last few hours so the featured story is the newest
            created_at=now - dt.timedelta(hours=hours_ago * 6),
        ))
    logger.info("[bootstrap] Seeded demo author %s with %d articles", author.username, len(DEMO_ARTICLES))
    return len(DEMO_ARTICLES)
