"""Static badge catalog. Never mutated at runtime."""

from dataclasses import dataclass

from gamification.schemas.badge import BadgeCategory


@dataclass(frozen=True)
class Badge:
    id: str
    name: str
    description: str
    category: BadgeCategory


BADGES: tuple[Badge, ...] = (
    # Writer
    Badge("first_ink", "First Ink", "Published your first article", BadgeCategory.WRITER),
    Badge("scribe", "Scribe", "Published 5 articles", BadgeCategory.WRITER),
    Badge("wordsmith", "Wordsmith", "Published 10 articles", BadgeCategory.WRITER),
    # Reader & engagement
    Badge("observer", "Observer", "Read 10 different articles", BadgeCategory.READER),
    Badge("conversation_starter", "Conversation Starter", "Posted your first comment", BadgeCategory.READER),
    Badge("debater", "Debater", "Posted 50 comments", BadgeCategory.READER),
    # Community
    Badge("rising_star", "Rising Star", "Reached 10 followers", BadgeCategory.COMMUNITY),
    Badge("influencer", "Influencer", "Reached 100 followers", BadgeCategory.COMMUNITY),
    Badge("thought_leader", "Thought Leader", "Reached 1,000 followers", BadgeCategory.COMMUNITY),
    # Quality
    Badge("viral_hit", "Viral Hit", "One of your articles reached 1,000 views", BadgeCategory.QUALITY),
    Badge("crowd_favorite", "Crowd Favorite", "One of your articles reached 100 likes", BadgeCategory.QUALITY),
    Badge("editors_choice", "Editor's Choice", "Had an article featured by editors", BadgeCategory.QUALITY),
    # Quiz
    Badge("quiz_whiz", "Quiz Whiz", "Attempted 10 quizzes", BadgeCategory.QUIZ),
    Badge("leaderboard_legend", "Leaderboard Legend", "Reached top 10 on a quiz leaderboard", BadgeCategory.QUIZ),
    Badge("top_scorer", "Top Scorer", "Ranked #1 on a quiz leaderboard", BadgeCategory.QUIZ),
)

_BY_ID: dict[str, Badge] = {badge.id: badge for badge in BADGES}


def get_badge(badge_id: str) -> Badge | None:
    return _BY_ID.get(badge_id)
